"""FastAPI upload service."""
