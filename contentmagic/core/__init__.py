"""Core layer: logging, monitoring, errors, models and persistence."""
