"""Persistence and editing workflows for practice spots."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Protocol

from loguru import logger
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scoredrill.core.srs.models import (
    Outcome,
    ReadinessLevel,
    Spot,
    deactivate_spot,
    edit_spot,
    ensure_utc,
    new_spot,
    utcnow,
)
from scoredrill.db.models.spot import PracticeLogRecord, SpotRecord
from scoredrill.services.events import QueueEvents
from scoredrill.utils.exceptions import ConflictError, NotFoundError, RepositoryError, ValidationError


@dataclass(slots=True)
class PracticeLog:
    """One committed review of a spot."""

    spot_id: str
    outcome: Outcome
    reviewed_at: datetime
    level_before: ReadinessLevel
    level_after: ReadinessLevel
    interval_before: int
    interval_after: int
    practice_time_minutes: int | None = None
    notes: str | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class SpotRepository(Protocol):
    """Storage contract consumed by the practice workflow."""

    def create(self, spot: Spot) -> Spot: ...

    def get(self, spot_id: str) -> Spot: ...

    def list_by_piece(self, piece_id: str, *, include_inactive: bool = False) -> list[Spot]: ...

    def list_all_active(self) -> list[Spot]: ...

    def save(
        self,
        spot: Spot,
        *,
        expected_updated_at: datetime | None = None,
        practice_log: PracticeLog | None = None,
    ) -> Spot: ...

    def delete(self, spot_id: str) -> Spot: ...

    def purge(self, spot_id: str) -> None: ...

    def history(self, spot_id: str, *, limit: int = 50) -> list[PracticeLog]: ...


def _spot_values(spot: Spot) -> dict[str, Any]:
    return {
        "piece_id": spot.piece_id,
        "title": spot.title,
        "description": spot.description,
        "notes": spot.notes,
        "page_number": spot.page_number,
        "x": spot.x,
        "y": spot.y,
        "width": spot.width,
        "height": spot.height,
        "priority": spot.priority.value,
        "color": spot.color.value,
        "readiness_level": spot.readiness_level.value,
        "practice_count": spot.practice_count,
        "success_count": spot.success_count,
        "interval_days": spot.interval,
        "next_due": spot.next_due,
        "last_practiced_at": spot.last_practiced_at,
        "last_outcome": spot.last_outcome.value if spot.last_outcome else None,
        "is_active": spot.is_active,
        "updated_at": spot.updated_at,
    }


def _log_record(entry: PracticeLog) -> PracticeLogRecord:
    return PracticeLogRecord(
        id=entry.id,
        spot_id=entry.spot_id,
        outcome=entry.outcome.value,
        reviewed_at=entry.reviewed_at,
        level_before=entry.level_before.value,
        level_after=entry.level_after.value,
        interval_before=entry.interval_before,
        interval_after=entry.interval_after,
        practice_time_minutes=entry.practice_time_minutes,
        notes=entry.notes,
    )


class SqlSpotRepository:
    """SQLAlchemy implementation of :class:`SpotRepository`.

    ``save`` is a compare-and-set on ``updated_at``: the UPDATE only matches
    the row when the stored token equals the one the caller read, so a racing
    writer can never be overwritten silently.
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Mapping helpers
    # ------------------------------------------------------------------
    @staticmethod
    def to_spot(record: SpotRecord) -> Spot:
        """Convert a row to a validated spot; inconsistent rows are rejected."""

        try:
            return Spot(
                id=record.id,
                piece_id=record.piece_id,
                title=record.title or "",
                description=record.description,
                notes=record.notes,
                page_number=record.page_number,
                x=record.x,
                y=record.y,
                width=record.width,
                height=record.height,
                priority=record.priority,
                color=record.color,
                readiness_level=record.readiness_level,
                practice_count=record.practice_count,
                success_count=record.success_count,
                interval=record.interval_days,
                next_due=record.next_due,
                last_practiced_at=record.last_practiced_at,
                last_outcome=record.last_outcome,
                is_active=bool(record.is_active),
                created_at=record.created_at,
                updated_at=record.updated_at,
            )
        except ValidationError as exc:
            logger.warning("Rejected invalid stored spot", spot_id=record.id, error=exc.message)
            raise ValidationError(
                f"Stored spot {record.id} is invalid: {exc.message}",
                details={"spot_id": record.id, **exc.details},
            ) from exc

    @staticmethod
    def to_log(record: PracticeLogRecord) -> PracticeLog:
        return PracticeLog(
            id=record.id,
            spot_id=record.spot_id,
            outcome=Outcome(record.outcome),
            reviewed_at=ensure_utc(record.reviewed_at),
            level_before=ReadinessLevel(record.level_before),
            level_after=ReadinessLevel(record.level_after),
            interval_before=record.interval_before,
            interval_after=record.interval_after,
            practice_time_minutes=record.practice_time_minutes,
            notes=record.notes,
        )

    def _valid_spots(self, records) -> list[Spot]:
        """Convert listed rows, leaving out the ones ``to_spot`` rejects."""

        spots = []
        for record in records:
            try:
                spots.append(self.to_spot(record))
            except ValidationError:
                continue
        return spots

    def _record(self, spot_id: str) -> SpotRecord:
        record = self.db.get(SpotRecord, spot_id, populate_existing=True)
        if record is None:
            raise NotFoundError(f"Spot {spot_id} not found", details={"spot_id": spot_id})
        return record

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError(f"Failed to {action}", details={"error": str(exc)}) from exc

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------
    def create(self, spot: Spot) -> Spot:
        """Insert a new spot; an id already in storage is a validation error."""

        spot.validate()
        if self.db.get(SpotRecord, spot.id) is not None:
            raise ValidationError(f"Spot {spot.id} already exists", details={"spot_id": spot.id})
        record = SpotRecord(id=spot.id, created_at=spot.created_at, **_spot_values(spot))
        self.db.add(record)
        self._commit("create spot")
        return spot

    def get(self, spot_id: str) -> Spot:
        return self.to_spot(self._record(spot_id))

    def list_by_piece(self, piece_id: str, *, include_inactive: bool = False) -> list[Spot]:
        stmt = select(SpotRecord).where(SpotRecord.piece_id == piece_id)
        if not include_inactive:
            stmt = stmt.where(SpotRecord.is_active.is_(True))
        stmt = stmt.order_by(SpotRecord.page_number, SpotRecord.created_at, SpotRecord.id)
        stmt = stmt.execution_options(populate_existing=True)
        return self._valid_spots(self.db.scalars(stmt))

    def list_all_active(self) -> list[Spot]:
        stmt = (
            select(SpotRecord)
            .where(SpotRecord.is_active.is_(True))
            .order_by(SpotRecord.id)
            .execution_options(populate_existing=True)
        )
        return self._valid_spots(self.db.scalars(stmt))

    def save(
        self,
        spot: Spot,
        *,
        expected_updated_at: datetime | None = None,
        practice_log: PracticeLog | None = None,
    ) -> Spot:
        """Persist ``spot`` if storage still holds the version the caller read.

        ``expected_updated_at`` defaults to ``spot.updated_at``. A practice log,
        when given, is written in the same transaction. The stored token always
        moves forward: a spot stamped at or before ``expected_updated_at`` is
        saved one microsecond after it.
        """

        spot.validate()
        token = ensure_utc(expected_updated_at or spot.updated_at)
        if spot.updated_at <= token:
            spot = replace(spot, updated_at=token + timedelta(microseconds=1))
        stmt = (
            update(SpotRecord)
            .where(SpotRecord.id == spot.id, SpotRecord.updated_at == token)
            .values(**_spot_values(spot))
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            if result.rowcount == 0:
                self.db.rollback()
                stored = self._record(spot.id)
                raise ConflictError(
                    f"Spot {spot.id} was modified concurrently",
                    details={
                        "spot_id": spot.id,
                        "expected_updated_at": token.isoformat(),
                        "stored_updated_at": ensure_utc(stored.updated_at).isoformat(),
                    },
                )
            if practice_log is not None:
                self.db.add(_log_record(practice_log))
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError("Failed to save spot", details={"error": str(exc)}) from exc
        self._commit("save spot")
        return spot

    def delete(self, spot_id: str) -> Spot:
        """Soft delete: the spot leaves scheduling but keeps its history."""

        current = self.get(spot_id)
        if not current.is_active:
            return current
        return self.save(deactivate_spot(current), expected_updated_at=current.updated_at)

    def purge(self, spot_id: str) -> None:
        """Remove a spot for good; refused once it has practice history."""

        current = self.get(spot_id)
        logged = self.db.scalar(
            select(func.count()).select_from(PracticeLogRecord).where(PracticeLogRecord.spot_id == spot_id)
        )
        if current.practice_count > 0 or logged:
            raise ValidationError(
                "Spots with practice history can only be deactivated",
                details={"spot_id": spot_id, "practice_count": current.practice_count},
            )
        self.db.execute(delete(SpotRecord).where(SpotRecord.id == spot_id))
        self._commit("purge spot")

    def history(self, spot_id: str, *, limit: int = 50) -> list[PracticeLog]:
        self._record(spot_id)
        stmt = (
            select(PracticeLogRecord)
            .where(PracticeLogRecord.spot_id == spot_id)
            .order_by(PracticeLogRecord.reviewed_at.desc(), PracticeLogRecord.id)
            .limit(limit)
        )
        return [self.to_log(record) for record in self.db.scalars(stmt)]


class SpotService:
    """Create, edit and retire spots, announcing each change."""

    def __init__(self, repository: SpotRepository, *, events: QueueEvents | None = None) -> None:
        self.repository = repository
        self.events = events

    def _publish(self, spot: Spot, reason: str) -> None:
        if self.events is not None:
            self.events.publish(spot_id=spot.id, piece_id=spot.piece_id, reason=reason)

    def create_spot(self, *, now: datetime | None = None, **fields: Any) -> Spot:
        spot = self.repository.create(new_spot(now=now, **fields))
        logger.info("Spot created", spot_id=spot.id, piece_id=spot.piece_id, page=spot.page_number)
        self._publish(spot, "created")
        return spot

    def edit_spot(
        self,
        spot_id: str,
        *,
        expected_updated_at: datetime,
        now: datetime | None = None,
        **changes: Any,
    ) -> Spot:
        """Apply a descriptive edit guarded by the caller's ``updated_at`` token."""

        current = self.repository.get(spot_id)
        edited = edit_spot(current, now=now or utcnow(), **changes)
        saved = self.repository.save(edited, expected_updated_at=expected_updated_at)
        logger.info("Spot edited", spot_id=spot_id, fields=sorted(changes))
        self._publish(saved, "edited")
        return saved

    def deactivate(self, spot_id: str) -> Spot:
        spot = self.repository.delete(spot_id)
        logger.info("Spot deactivated", spot_id=spot_id)
        self._publish(spot, "deactivated")
        return spot
