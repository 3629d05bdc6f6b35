"""Practice spot database models."""
import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from scoredrill.db.base import Base
from scoredrill.db.types import UTCDateTime


class SpotRecord(Base):
    """Stored review state of one rectangle on a score page."""

    __tablename__ = "spots"
    __table_args__ = (
        CheckConstraint("page_number >= 1", name="page_number_positive"),
        CheckConstraint("practice_count >= 0", name="practice_count_non_negative"),
        CheckConstraint("success_count >= 0", name="success_count_non_negative"),
        CheckConstraint("interval_days >= 0", name="interval_non_negative"),
        Index("ix_spots_active_next_due", "is_active", "next_due"),
    )

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    piece_id = Column(String(64), nullable=False, index=True)

    title = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Normalised page rectangle, 0.0 - 1.0
    page_number = Column(Integer, nullable=False, default=1)
    x = Column(Float, nullable=False)
    y = Column(Float, nullable=False)
    width = Column(Float, nullable=False)
    height = Column(Float, nullable=False)

    priority = Column(String(20), nullable=False, default="medium")
    color = Column(String(20), nullable=False, default="red")

    # Review state
    readiness_level = Column(String(20), nullable=False, default="new")
    practice_count = Column(Integer, nullable=False, default=0)
    success_count = Column(Integer, nullable=False, default=0)
    interval_days = Column(Integer, nullable=False, default=0)
    next_due = Column(UTCDateTime, nullable=True)
    last_practiced_at = Column(UTCDateTime, nullable=True)
    last_outcome = Column(String(20), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)

    practice_logs = relationship(
        "PracticeLogRecord",
        back_populates="spot",
        cascade="all, delete-orphan",
        order_by="PracticeLogRecord.reviewed_at",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<SpotRecord id={self.id!r} piece_id={self.piece_id!r} level={self.readiness_level!r}>"


class PracticeLogRecord(Base):
    """Individual practice history entries for a spot."""

    __tablename__ = "practice_logs"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    spot_id = Column(
        String(64), ForeignKey("spots.id", ondelete="CASCADE"), nullable=False, index=True
    )
    outcome = Column(String(20), nullable=False)
    reviewed_at = Column(UTCDateTime, nullable=False)
    level_before = Column(String(20), nullable=False)
    level_after = Column(String(20), nullable=False)
    interval_before = Column(Integer, nullable=False)
    interval_after = Column(Integer, nullable=False)
    practice_time_minutes = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    spot = relationship("SpotRecord", back_populates="practice_logs")
