"""Domain layer for SphereGrid: entities, aggregates and value objects."""
