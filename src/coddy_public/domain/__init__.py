"""Domain layer: entities and services."""
