"""Adapter HTTP de decisão (FastAPI)."""
