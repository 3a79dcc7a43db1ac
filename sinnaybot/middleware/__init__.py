"""Request logging and exception handlers."""
