"""FastAPI boundary of the relayer."""
