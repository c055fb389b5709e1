"""Domain tables and API schemas."""
