"""Domain layer: storage value objects and exception taxonomy."""
