"""Infrastructure layer: adapters for the oracle, bridge, settlement contract and HTTP API."""
