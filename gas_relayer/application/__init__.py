"""Application layer: price gate, intent verifier, position registry, router and workflows."""
