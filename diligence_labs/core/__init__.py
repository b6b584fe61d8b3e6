"""Core building blocks: logging, monitoring, errors, security and persistence."""
