"""Aggregate practice statistics for dashboards."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from scoredrill.core.srs.models import Outcome, Priority, ReadinessLevel, SpotColor, ensure_utc, utcnow
from scoredrill.db.models.spot import PracticeLogRecord, SpotRecord
from scoredrill.services.spots import SqlSpotRepository

OUTCOME_SCORES = {
    Outcome.FAILED: 0.0,
    Outcome.STRUGGLED: 0.33,
    Outcome.GOOD: 0.66,
    Outcome.EXCELLENT: 1.0,
}


class PracticeStatsService:
    """Read-only summaries over active spots and their practice logs."""

    def __init__(self, db: Session, *, repository: SqlSpotRepository | None = None) -> None:
        self.db = db
        self.repository = repository or SqlSpotRepository(db)

    def review_performance(
        self,
        *,
        piece_id: str | None = None,
        lookback_days: int = 7,
        now: datetime | None = None,
    ) -> float | None:
        """Mean outcome score over the lookback window, None without reviews."""

        now = ensure_utc(now) or utcnow()
        cutoff = now - timedelta(days=lookback_days)
        stmt = select(PracticeLogRecord.outcome).where(PracticeLogRecord.reviewed_at >= cutoff)
        if piece_id:
            stmt = stmt.join(SpotRecord, SpotRecord.id == PracticeLogRecord.spot_id).where(
                SpotRecord.piece_id == piece_id
            )
        outcomes = [Outcome(value) for value in self.db.scalars(stmt)]
        if not outcomes:
            return None
        return sum(OUTCOME_SCORES[outcome] for outcome in outcomes) / len(outcomes)

    def summary(
        self,
        *,
        piece_id: str | None = None,
        now: datetime | None = None,
        upcoming_days: int = 7,
    ) -> dict[str, Any]:
        """Return counts by level, priority and colour plus due and success totals."""

        now = ensure_utc(now) or utcnow()
        if piece_id:
            spots = self.repository.list_by_piece(piece_id)
        else:
            spots = self.repository.list_all_active()

        level_counts = {level.value: 0 for level in ReadinessLevel}
        priority_counts = {priority.value: 0 for priority in Priority}
        color_counts = {color.value: 0 for color in SpotColor}
        due_now = 0
        due_upcoming = 0
        horizon = now + timedelta(days=upcoming_days)
        practice_total = 0
        success_total = 0

        for spot in spots:
            level_counts[spot.readiness_level.value] += 1
            priority_counts[spot.priority.value] += 1
            color_counts[spot.color.value] += 1
            practice_total += spot.practice_count
            success_total += spot.success_count
            if spot.is_due(now):
                due_now += 1
            elif spot.next_due is not None and spot.next_due <= horizon:
                due_upcoming += 1

        return {
            "piece_id": piece_id,
            "total_spots": len(spots),
            "due_now": due_now,
            "due_upcoming": due_upcoming,
            "upcoming_days": upcoming_days,
            "level_counts": level_counts,
            "priority_counts": priority_counts,
            "color_counts": color_counts,
            "practice_count": practice_total,
            "success_count": success_total,
            "success_rate": (success_total / practice_total) if practice_total else 0.0,
            "recent_performance": self.review_performance(piece_id=piece_id, now=now),
        }
