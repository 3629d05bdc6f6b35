from scoredrill.services.events import QueueEvents


def test_publish_delivers_to_subscribers():
    events = QueueEvents()
    received = []
    unsubscribe = events.subscribe(received.append)

    first = events.publish(spot_id="s1", piece_id="p1", reason="created")
    unsubscribe()
    events.publish(spot_id="s1", piece_id="p1", reason="edited")

    assert received == [first]
    assert first.version == 1
    assert events.version == 2


def test_failing_subscriber_does_not_block_others():
    events = QueueEvents()
    received = []

    def broken(event):
        raise RuntimeError("subscriber down")

    events.subscribe(broken)
    events.subscribe(received.append)

    events.publish(spot_id="s1", piece_id="p1", reason="reviewed")

    assert len(received) == 1


def test_events_since_returns_newer_events():
    events = QueueEvents()
    for index in range(3):
        events.publish(spot_id=f"s{index}", piece_id="p", reason="created")

    version, changes = events.events_since(1)

    assert version == 3
    assert [event.spot_id for event in changes] == ["s1", "s2"]
    assert events.events_since(3) == (3, [])


def test_buffer_is_bounded():
    events = QueueEvents(buffer_size=2)
    for index in range(5):
        events.publish(spot_id=f"s{index}", piece_id="p", reason="edited")

    version, changes = events.events_since(0)

    assert version == 5
    assert [event.version for event in changes] == [4, 5]


def test_clear_resets_version():
    events = QueueEvents()
    events.subscribe(lambda event: None)
    events.publish(spot_id="s", piece_id="p", reason="created")

    events.clear()

    assert events.version == 0
    assert events.events_since(0) == (0, [])
