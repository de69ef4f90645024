"""FastAPI backend for review sessions."""
