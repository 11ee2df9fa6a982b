"""Core building blocks: models, providers and errors."""
