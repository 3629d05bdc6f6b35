"""Orchestration of a single practice review.

The controller walks ``idle -> awaiting_outcome -> committing -> idle``:

1. ``next_due`` builds the queue from one repository snapshot and holds its
   head (or reports that nothing is due).
2. The UI shows the spot and reports an :class:`Outcome`.
3. ``submit`` runs the scheduler, saves the result guarded by the
   ``updated_at`` token that was read in step 1, appends the practice log and
   publishes a queue invalidation.

A stale token ends the cycle with ``ConflictError`` and nothing is written;
``cancel`` ends it without touching storage.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from loguru import logger

from scoredrill.core.srs.models import (
    Outcome,
    ReadinessLevel,
    Spot,
    coerce_enum,
    days_until,
    ensure_utc,
    utcnow,
)
from scoredrill.core.srs.queue import DueQueue, DueQueueBuilder, default_queue_builder
from scoredrill.core.srs.scheduler import SchedulingEngine, default_engine
from scoredrill.services.events import QueueEvents
from scoredrill.services.spots import PracticeLog, SpotRepository
from scoredrill.utils.exceptions import ConflictError, SessionError, ValidationError


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_OUTCOME = "awaiting_outcome"
    COMMITTING = "committing"


@dataclass(slots=True)
class PracticeResult:
    """Outcome of one committed review, for immediate feedback in the UI."""

    spot: Spot
    outcome: Outcome
    previous_level: ReadinessLevel
    previous_interval: int
    reviewed_at: datetime

    @property
    def next_review_in_days(self) -> int:
        return days_until(self.spot.next_due, self.reviewed_at)

    @property
    def level_changed(self) -> bool:
        return self.previous_level is not self.spot.readiness_level


class OutcomePresenter(Protocol):
    """UI collaborator: shows a spot and returns the user's rating.

    ``present`` returns ``None`` when the user abandons the review.
    """

    def present(self, spot: Spot) -> Outcome | None: ...


class PracticeSessionController:
    """Drive one review at a time against a spot repository."""

    def __init__(
        self,
        repository: SpotRepository,
        *,
        engine: SchedulingEngine | None = None,
        queue_builder: DueQueueBuilder | None = None,
        events: QueueEvents | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.engine = engine or default_engine
        self.queue_builder = queue_builder or default_queue_builder
        self.events = events
        self.clock = clock
        self.state = SessionState.IDLE
        self.current: Spot | None = None

    # ------------------------------------------------------------------
    # Queue access
    # ------------------------------------------------------------------
    def queue(
        self,
        *,
        now: datetime | None = None,
        piece_id: str | None = None,
        limit: int | None = None,
    ) -> DueQueue:
        """Build the due queue from a single repository snapshot."""

        now = ensure_utc(now) or self.clock()
        snapshot = self.repository.list_all_active()
        queue = self.queue_builder.build(snapshot, now, piece_id=piece_id, limit=limit)
        logger.debug("Due queue built", active=len(snapshot), due=len(queue), piece_id=piece_id)
        return queue

    def _require(self, state: SessionState, action: str) -> None:
        if self.state is not state:
            raise SessionError(
                f"Cannot {action} while {self.state.value}",
                details={"state": self.state.value},
            )

    def _reset(self) -> None:
        self.state = SessionState.IDLE
        self.current = None

    # ------------------------------------------------------------------
    # Cycle steps
    # ------------------------------------------------------------------
    def next_due(self, *, piece_id: str | None = None) -> Spot | None:
        """Hold the head of the queue, or return None when nothing is due."""

        self._require(SessionState.IDLE, "start a review")
        head = self.queue(piece_id=piece_id).head()
        if head is None:
            logger.info("Nothing due", piece_id=piece_id)
            return None
        self.current = head
        self.state = SessionState.AWAITING_OUTCOME
        return head

    def attach(self, spot_id: str, expected_updated_at: datetime) -> Spot:
        """Resume a review for a spot shown earlier (stateless callers)."""

        self._require(SessionState.IDLE, "attach a spot")
        spot = self.repository.get(spot_id)
        expected = ensure_utc(expected_updated_at)
        if spot.updated_at != expected:
            raise ConflictError(
                f"Spot {spot_id} was modified concurrently",
                details={
                    "spot_id": spot_id,
                    "expected_updated_at": expected.isoformat(),
                    "stored_updated_at": spot.updated_at.isoformat(),
                },
            )
        if not spot.is_active:
            raise ValidationError("Inactive spots cannot be practised", details={"spot_id": spot_id})
        self.current = spot
        self.state = SessionState.AWAITING_OUTCOME
        return spot

    def cancel(self) -> None:
        """Abandon the open review; storage is left untouched."""

        if self.current is not None:
            logger.info("Review cancelled", spot_id=self.current.id)
        self._reset()

    def submit(
        self,
        outcome: Outcome | str,
        *,
        practice_time_minutes: int | None = None,
        notes: str | None = None,
    ) -> PracticeResult:
        """Schedule, persist and announce the review of the held spot."""

        self._require(SessionState.AWAITING_OUTCOME, "submit an outcome")
        outcome = coerce_enum(Outcome, outcome, "outcome")
        if practice_time_minutes is not None and practice_time_minutes < 0:
            raise ValidationError(
                "practice_time_minutes must be non-negative",
                details={"practice_time_minutes": practice_time_minutes},
            )

        read = self.current
        self.state = SessionState.COMMITTING
        try:
            now = self.clock()
            updated = self.engine.update(read, outcome, now)
            entry = PracticeLog(
                spot_id=read.id,
                outcome=outcome,
                reviewed_at=now,
                level_before=read.readiness_level,
                level_after=updated.readiness_level,
                interval_before=read.interval,
                interval_after=updated.interval,
                practice_time_minutes=practice_time_minutes,
                notes=notes,
            )
            saved = self.repository.save(
                updated, expected_updated_at=read.updated_at, practice_log=entry
            )
        except ConflictError:
            logger.warning("Review rejected, spot changed since it was read", spot_id=read.id)
            raise
        finally:
            self._reset()

        logger.info(
            "Spot reviewed",
            spot_id=saved.id,
            outcome=outcome.value,
            level=saved.readiness_level.value,
            interval=saved.interval,
        )
        if self.events is not None:
            self.events.publish(spot_id=saved.id, piece_id=saved.piece_id, reason="reviewed")
        return PracticeResult(
            spot=saved,
            outcome=outcome,
            previous_level=read.readiness_level,
            previous_interval=read.interval,
            reviewed_at=now,
        )

    def run(self, presenter: OutcomePresenter, *, piece_id: str | None = None) -> PracticeResult | None:
        """Run one full cycle against ``presenter``.

        Returns None when nothing is due or the user abandons the review.
        """

        spot = self.next_due(piece_id=piece_id)
        if spot is None:
            return None
        try:
            outcome = presenter.present(spot)
        except BaseException:
            self.cancel()
            raise
        if outcome is None:
            self.cancel()
            return None
        result = self.submit(outcome)
        show_result = getattr(presenter, "show_result", None)
        if callable(show_result):
            show_result(result)
        return result
