"""PawPal users and dogs service."""
