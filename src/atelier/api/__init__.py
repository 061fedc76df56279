"""FastAPI application for Atelier."""
