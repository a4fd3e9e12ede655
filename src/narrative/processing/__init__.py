"""Processing layer: sentiment scoring (LLM and mock)."""
