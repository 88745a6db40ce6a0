"""Ports: interfaces of the collaborators the relayer core depends on."""
