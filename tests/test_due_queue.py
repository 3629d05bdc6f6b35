import random
from datetime import timedelta

from scoredrill.core.srs.models import Priority
from scoredrill.core.srs.queue import DueQueueBuilder


def test_priority_beats_readiness(make_spot, now):
    spot_a = make_spot("A", priority="high", readiness_level="young", interval=3, next_due=now - timedelta(days=1))
    spot_b = make_spot("B", priority="critical", readiness_level="mastered", interval=40, next_due=now - timedelta(days=2))

    queue = DueQueueBuilder().build([spot_a, spot_b], now)

    assert queue.ids() == ["B", "A"]
    assert queue.head() is spot_b


def test_readiness_then_due_date_then_id(make_spot, now):
    spots = [
        make_spot("d", readiness_level="young", next_due=now - timedelta(hours=1)),
        make_spot("c", readiness_level="learning", next_due=now - timedelta(hours=1)),
        make_spot("b", readiness_level="learning", next_due=now - timedelta(days=3)),
        make_spot("a", readiness_level="learning", next_due=now - timedelta(days=3)),
        make_spot("e", readiness_level="learning"),
    ]

    queue = DueQueueBuilder().build(spots, now)

    assert queue.ids() == ["e", "a", "b", "c", "d"]


def test_spots_due_exactly_now_are_included(make_spot, now):
    due_now = make_spot("now", next_due=now)
    later = make_spot("later", next_due=now + timedelta(seconds=1))

    queue = DueQueueBuilder().build([due_now, later], now)

    assert queue.ids() == ["now"]
    assert due_now.is_due(now)
    assert not later.is_due(now)


def test_inactive_spots_are_excluded(make_spot, now):
    spots = [make_spot("active"), make_spot("retired", is_active=False)]

    assert DueQueueBuilder().build(spots, now).ids() == ["active"]


def test_piece_filter_and_limit(make_spot, now):
    spots = [
        make_spot("p1-a", piece_id="one", priority="low"),
        make_spot("p1-b", piece_id="one", priority="critical"),
        make_spot("p2-a", piece_id="two", priority="critical"),
    ]
    builder = DueQueueBuilder()

    assert builder.build(spots, now, piece_id="one").ids() == ["p1-b", "p1-a"]
    assert builder.build(spots, now, limit=2).ids() == ["p1-b", "p2-a"]
    assert builder.build(spots, now, limit=0).ids() == []


def test_order_is_deterministic_for_any_input_order(make_spot, now):
    spots = [
        make_spot(f"spot-{index:02d}", priority=list(Priority)[index % 4], next_due=now - timedelta(hours=index % 3))
        for index in range(20)
    ]
    builder = DueQueueBuilder()
    expected = builder.build(spots, now).ids()

    shuffled = list(spots)
    for seed in range(5):
        random.Random(seed).shuffle(shuffled)
        assert builder.build(shuffled, now).ids() == expected
        assert [spot.id for spot in builder.iter_due(shuffled, now)] == expected


def test_building_does_not_change_input(make_spot, now):
    spots = [make_spot("b", priority="low"), make_spot("a", priority="high")]
    snapshot = list(spots)

    DueQueueBuilder().build(spots, now)

    assert spots == snapshot


def test_queue_is_reiterable_sequence(make_spot, now):
    queue = DueQueueBuilder().build([make_spot("a"), make_spot("b")], now)

    assert list(queue) == list(queue)
    assert len(queue) == 2
    assert queue[0].id == "a"
    assert [spot.id for spot in queue[1:]] == ["b"]
    assert queue.now == now


def test_empty_queue(make_spot, now):
    builder = DueQueueBuilder()
    future = make_spot(next_due=now + timedelta(days=1))

    queue = builder.build([future], now)

    assert len(queue) == 0
    assert queue.head() is None
    assert builder.head([future], now) is None


def test_head_matches_build(make_spot, now):
    spots = [make_spot("x", priority="medium"), make_spot("y", priority="critical")]
    builder = DueQueueBuilder()

    assert builder.head(spots, now).id == builder.build(spots, now).head().id == "y"


def test_unscheduled_spot_ranks_after_more_urgent_priority(make_spot, now):
    spot_a = make_spot("A", priority="high", readiness_level="new", interval=0, next_due=None)
    spot_b = make_spot("B", priority="critical", readiness_level="young", interval=3, next_due=now - timedelta(days=1))

    queue = DueQueueBuilder().build([spot_a, spot_b], now)

    assert queue.ids() == ["B", "A"]


def test_unscheduled_spots_are_due_at_any_time(make_spot, now):
    unscheduled = make_spot("fresh", next_due=None)
    scheduled = make_spot("scheduled", next_due=now)
    long_ago = now - timedelta(days=365 * 30)

    queue = DueQueueBuilder().build([unscheduled, scheduled], long_ago)

    assert queue.ids() == ["fresh"]
