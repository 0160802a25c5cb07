"""Domain rules and value objects."""
