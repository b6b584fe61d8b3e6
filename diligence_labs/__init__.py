"""Diligence Labs API server package."""
