import pytest

from skald.mcp.pending import PendingRequestTracker


def test_ids_are_prefixed_and_sequential():
    tracker = PendingRequestTracker()
    assert tracker.send("roots/list") == "s1"
    assert tracker.send("roots/list") == "s2"
    assert len(tracker) == 2


def test_resolve_consumes_exactly_once():
    tracker = PendingRequestTracker()
    request_id = tracker.send("roots/list")
    assert tracker.resolve(request_id) == "roots/list"
    assert tracker.resolve(request_id) is None
    assert len(tracker) == 0


def test_unknown_id_resolves_to_none():
    tracker = PendingRequestTracker()
    assert tracker.resolve("s99") is None
    assert tracker.resolve(7) is None


def test_oldest_entry_is_evicted_at_capacity():
    tracker = PendingRequestTracker(capacity=100)
    ids = [tracker.send(f"purpose-{i}") for i in range(101)]
    assert len(tracker) == 100
    assert ids[0] not in tracker
    assert ids[1] in tracker
    assert tracker.resolve(ids[0]) is None
    assert tracker.resolve(ids[100]) == "purpose-100"


def test_custom_prefix_and_capacity():
    tracker = PendingRequestTracker(capacity=2, id_prefix="srv-")
    assert [tracker.send("a"), tracker.send("b"), tracker.send("c")] == ["srv-1", "srv-2", "srv-3"]
    assert "srv-1" not in tracker
    assert len(tracker) == 2


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        PendingRequestTracker(capacity=0)
