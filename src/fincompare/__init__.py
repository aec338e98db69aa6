"""FinCompare: financial product comparison and income tax estimation."""
