"""Domain layer: geo primitives, scene/event entities, ranking and search."""
