"""Infrastructure shared across PawPal modules."""
