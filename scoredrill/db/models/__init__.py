"""Database models package."""
from scoredrill.db.models.spot import PracticeLogRecord, SpotRecord

__all__ = [
    "PracticeLogRecord",
    "SpotRecord",
]
