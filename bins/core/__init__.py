"""Backend-agnostic core: models, parsers, policy checks and dispatch."""
