"""Service layer: decisioning, bureau aggregation, rule management and LLM integration."""
