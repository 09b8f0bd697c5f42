"""Request context, structured logging and HTTP middleware."""
