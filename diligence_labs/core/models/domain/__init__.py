"""Domain-level models and enums."""
