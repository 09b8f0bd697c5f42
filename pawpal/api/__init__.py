"""PawPal HTTP API."""
