"""Service layer: tax calculation and cached listing data."""
