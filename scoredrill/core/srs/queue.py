"""Due-queue construction across every piece in the library."""
from __future__ import annotations

import heapq
from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime
from typing import overload

from scoredrill.core.srs.models import Spot, ensure_utc


def queue_key(spot: Spot) -> tuple:
    """Sort key: priority desc, readiness asc, next_due asc (None first), id asc."""

    if spot.next_due is None:
        due_key: tuple = (0,)
    else:
        due_key = (1, spot.next_due)
    return (-spot.priority.rank, spot.readiness_level.rank, due_key, spot.id)


class DueQueue(Sequence[Spot]):
    """Immutable, re-iterable ranking of the spots due at ``now``."""

    __slots__ = ("now", "_spots")

    def __init__(self, spots: Iterable[Spot], now: datetime) -> None:
        self.now = now
        self._spots: tuple[Spot, ...] = tuple(spots)

    @overload
    def __getitem__(self, index: int) -> Spot: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Spot, ...]: ...

    def __getitem__(self, index):
        return self._spots[index]

    def __len__(self) -> int:
        return len(self._spots)

    def __iter__(self) -> Iterator[Spot]:
        return iter(self._spots)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<DueQueue size={len(self._spots)} now={self.now.isoformat()}>"

    def head(self) -> Spot | None:
        return self._spots[0] if self._spots else None

    def ids(self) -> list[str]:
        return [spot.id for spot in self._spots]


class DueQueueBuilder:
    """Filter and rank spots into the order they should be practised."""

    def _candidates(
        self, spots: Iterable[Spot], now: datetime, piece_id: str | None
    ) -> list[Spot]:
        return [
            spot
            for spot in spots
            if spot.is_due(now) and (piece_id is None or spot.piece_id == piece_id)
        ]

    def build(
        self,
        spots: Iterable[Spot],
        now: datetime,
        *,
        piece_id: str | None = None,
        limit: int | None = None,
    ) -> DueQueue:
        """Return the ranked queue of spots due at ``now``."""

        now = ensure_utc(now)
        ranked = sorted(self._candidates(spots, now, piece_id), key=queue_key)
        if limit is not None:
            ranked = ranked[: max(0, limit)]
        return DueQueue(ranked, now)

    def iter_due(
        self, spots: Iterable[Spot], now: datetime, *, piece_id: str | None = None
    ) -> Iterator[Spot]:
        """Yield due spots in queue order, ranking lazily with a heap."""

        now = ensure_utc(now)
        heap = [
            (queue_key(spot), index, spot)
            for index, spot in enumerate(self._candidates(spots, now, piece_id))
        ]
        heapq.heapify(heap)
        while heap:
            yield heapq.heappop(heap)[2]

    def head(
        self, spots: Iterable[Spot], now: datetime, *, piece_id: str | None = None
    ) -> Spot | None:
        """Return the first spot to practise, or None when nothing is due."""

        return next(self.iter_due(spots, now, piece_id=piece_id), None)


default_queue_builder = DueQueueBuilder()
