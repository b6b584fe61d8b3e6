"""Domain and I/O models."""
