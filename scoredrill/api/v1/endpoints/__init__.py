"""API endpoint modules for v1."""

from scoredrill.api.v1.endpoints import labels, practice, spots

__all__ = ["labels", "practice", "spots"]
