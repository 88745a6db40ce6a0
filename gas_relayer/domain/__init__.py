"""Domain layer: entities, value objects, signing contract and exceptions."""
