"""Top-level package for the ScoreDrill practice service."""

__version__ = "0.1.0"
