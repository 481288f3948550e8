"""Domain layer: entities and ports (Protocols). No I/O."""
