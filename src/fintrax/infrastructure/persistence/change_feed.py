"""Synchronous fan-out of store change events to subscribers."""

from __future__ import annotations

import logging
from itertools import count
from typing import Callable, Generic, TypeVar

from fintrax.domain.ledger.events import Unsubscribe

logger = logging.getLogger(__name__)

E = TypeVar("E")


class ChangeFeed(Generic[E]):
    """
    Delivers each committed change to every registered callback, in order.

    Stores emit while still holding their write lock, so callbacks see events
    in commit order. Callbacks must not block; the aggregate components only
    enqueue.
    """

    def __init__(self, name: str):
        self._name = name
        self._callbacks: dict[int, Callable[[E], None]] = {}
        self._tokens = count()

    def __len__(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callable[[E], None]) -> Unsubscribe:
        token = next(self._tokens)
        self._callbacks[token] = callback

        def unsubscribe() -> None:
            self._callbacks.pop(token, None)

        return unsubscribe

    def emit(self, event: E) -> None:
        logger.debug("%s change: %s", self._name, event)
        for callback in list(self._callbacks.values()):
            try:
                callback(event)
            except Exception as e:
                # The write is already durable; one bad subscriber must not
                # hide it from the others
                logger.warning("%s subscriber failed: %s", self._name, e)
