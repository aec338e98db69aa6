"""FinCompare backend package."""
