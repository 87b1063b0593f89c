"""Error types and FastAPI exception handlers."""
