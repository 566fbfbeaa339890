"""Unit tests for EventBus — thread-safe pub/sub messaging.

Tests subscribe/unsubscribe, publish/receive, type filters, queue
overflow (drop oldest), drain, and thread safety.
"""
from __future__ import annotations

import queue
import threading

import pytest

from bastion.comms.event_bus import DEFAULT_QUEUE_SIZE, EventBus, drain


@pytest.mark.unit
class TestEventBusBasics:
    """Core subscribe/publish/unsubscribe functionality."""

    def test_subscribe_returns_queue(self):
        bus = EventBus()
        q = bus.subscribe()
        assert isinstance(q, queue.Queue)
        assert q.maxsize == DEFAULT_QUEUE_SIZE

    def test_publish_delivers_to_subscriber(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.publish("wave_start", {"wave_number": 1})
        msg = q.get_nowait()
        assert msg["type"] == "wave_start"
        assert msg["data"]["wave_number"] == 1

    def test_publish_without_data(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.publish("ping")
        msg = q.get_nowait()
        assert msg["type"] == "ping"
        assert "data" not in msg

    def test_multiple_subscribers(self):
        bus = EventBus()
        q1 = bus.subscribe()
        q2 = bus.subscribe()
        bus.publish("game_over", {"result": "defeat"})
        assert q1.get_nowait()["type"] == "game_over"
        assert q2.get_nowait()["type"] == "game_over"

    def test_unsubscribe_stops_delivery(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.unsubscribe(q)
        bus.publish("after_unsub")
        assert q.empty()
        assert bus.subscriber_count == 0

    def test_unsubscribe_nonexistent_is_safe(self):
        bus = EventBus()
        bus.unsubscribe(queue.Queue())  # Should not raise


@pytest.mark.unit
class TestEventBusFilters:
    def test_single_type_filter(self):
        bus = EventBus()
        q = bus.subscribe("target_eliminated")
        bus.publish("projectile_fired", {"id": 1})
        bus.publish("target_eliminated", {"target_id": 4})
        assert q.qsize() == 1
        assert q.get_nowait()["data"]["target_id"] == 4

    def test_list_filter(self):
        bus = EventBus()
        q = bus.subscribe(["wave_start", "wave_complete"])
        bus.publish("wave_start")
        bus.publish("base_breached")
        bus.publish("wave_complete")
        assert [m["type"] for m in drain(q)] == ["wave_start", "wave_complete"]

    def test_unfiltered_receives_everything(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.publish("a")
        bus.publish("b")
        assert q.qsize() == 2


@pytest.mark.unit
class TestEventBusOverflow:
    """Queue overflow behavior — drop oldest message when full."""

    def test_overflow_drops_oldest(self):
        bus = EventBus()
        q = bus.subscribe(maxsize=3)
        for i in range(5):
            bus.publish("tick", {"i": i})
        assert [m["data"]["i"] for m in drain(q)] == [2, 3, 4]

    def test_drain_empties_queue(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.publish("x")
        assert len(drain(q)) == 1
        assert drain(q) == []


@pytest.mark.unit
class TestEventBusThreadSafety:
    def test_concurrent_publishers(self):
        bus = EventBus()
        q = bus.subscribe(maxsize=10_000)

        def worker(n: int) -> None:
            for i in range(200):
                bus.publish("tick", {"worker": n, "i": i})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert q.qsize() == 800
