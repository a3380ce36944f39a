"""Pipelines wiring the services together for a complete run."""
