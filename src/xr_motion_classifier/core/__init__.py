"""Configuration, signal primitives, sources, sinks and orchestration."""
