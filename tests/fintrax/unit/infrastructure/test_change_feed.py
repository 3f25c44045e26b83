"""Tests for ChangeFeed fan-out."""

import logging

from fintrax.infrastructure.persistence.change_feed import ChangeFeed


def test_events_reach_every_subscriber_in_order():
    feed = ChangeFeed[int]("numbers")
    first, second = [], []
    feed.subscribe(first.append)
    feed.subscribe(second.append)

    feed.emit(1)
    feed.emit(2)

    assert first == [1, 2]
    assert second == [1, 2]


def test_unsubscribe_stops_delivery_and_is_idempotent():
    feed = ChangeFeed[int]("numbers")
    received = []
    unsubscribe = feed.subscribe(received.append)

    unsubscribe()
    unsubscribe()
    feed.emit(1)

    assert received == []
    assert len(feed) == 0


def test_failing_subscriber_does_not_block_others(caplog):
    feed = ChangeFeed[int]("numbers")
    received = []

    def broken(_event):
        raise RuntimeError("boom")

    feed.subscribe(broken)
    feed.subscribe(received.append)

    with caplog.at_level(logging.WARNING):
        feed.emit(7)

    assert received == [7]
    assert "subscriber failed" in caplog.text
