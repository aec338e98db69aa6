"""Tax year configuration loading and validation."""
