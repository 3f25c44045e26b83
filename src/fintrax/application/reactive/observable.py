"""Observable aggregate values for the presentation layer.

Each aggregate the engine exposes (current balance, a summary per bucket,
category breakdowns, trends, active monthly expenses) is one ``Observable``.
Subscribers receive the latest state immediately and every later update.
Bound-method subscribers are held through weak references so a discarded
screen or widget never keeps itself alive through the engine.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from dataclasses import dataclass, replace
from inspect import ismethod
from itertools import count
from typing import AsyncIterator, Callable, Generic, Optional, TypeVar

from fintrax.domain.shared.exceptions import ErrorCode

logger = logging.getLogger(__name__)

T = TypeVar("T")

StateCallback = Callable[["AggregateState[T]"], None]


@dataclass(frozen=True)
class AggregateState(Generic[T]):
    """
    Latest value of an aggregate plus its health.

    ``stale`` is set when recomputation failed after all retries; ``value``
    then still holds the last good result and ``error_code`` says why.
    """

    value: T
    version: int = 0
    stale: bool = False
    error_code: Optional[ErrorCode] = None


class Subscription:
    """Handle returned by ``Observable.subscribe``."""

    def __init__(self, observable: Observable, token: int):
        self._observable: Optional[Observable] = observable
        self._token = token

    @property
    def active(self) -> bool:
        return (
            self._observable is not None
            and self._token in self._observable._subscribers  # NOQA: SLF001
        )

    def unsubscribe(self) -> None:
        if self._observable is not None:
            self._observable._remove(self._token)  # NOQA: SLF001
            self._observable = None


class Observable(Generic[T]):
    """Holds one aggregate value and pushes every change to its subscribers."""

    def __init__(self, name: str, initial: T):
        self._name = name
        self._state: AggregateState[T] = AggregateState(value=initial)
        self._subscribers: dict[int, Callable[[], Optional[StateCallback]]] = {}
        self._tokens = count()

    def __repr__(self) -> str:
        return f"Observable({self._name!r}, version={self._state.version})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> AggregateState[T]:
        return self._state

    @property
    def value(self) -> T:
        return self._state.value

    @property
    def stale(self) -> bool:
        return self._state.stale

    @property
    def subscriber_count(self) -> int:
        self._prune()
        return len(self._subscribers)

    def subscribe(self, callback: StateCallback, weak: bool = True) -> Subscription:
        """
        Register ``callback`` and call it with the current state right away.

        Bound methods are referenced weakly unless ``weak=False``; once their
        owner is garbage collected they are dropped silently.
        """
        token = next(self._tokens)
        if weak and ismethod(callback):
            self._subscribers[token] = weakref.WeakMethod(callback)
        else:
            self._subscribers[token] = lambda: callback
        self._deliver(callback, self._state)
        return Subscription(self, token)

    def publish(self, value: T) -> None:
        """Replace the value; clears any stale flag."""
        self._state = AggregateState(value=value, version=self._state.version + 1)
        self._notify()

    def mark_stale(self, error_code: ErrorCode) -> None:
        """Flag the current value as out of date, keeping it as last good."""
        if self._state.stale and self._state.error_code == error_code:
            return
        logger.warning("Aggregate %s marked stale (%s)", self._name, error_code.value)
        self._state = replace(
            self._state,
            version=self._state.version + 1,
            stale=True,
            error_code=error_code,
        )
        self._notify()

    async def states(self) -> AsyncIterator[AggregateState[T]]:
        """Async iterator over the current state and every later one."""
        queue: asyncio.Queue[AggregateState[T]] = asyncio.Queue()
        subscription = self.subscribe(queue.put_nowait, weak=False)
        try:
            while True:
                yield await queue.get()
        finally:
            subscription.unsubscribe()

    def _notify(self) -> None:
        state = self._state
        for token, ref in list(self._subscribers.items()):
            callback = ref()
            if callback is None:
                self._subscribers.pop(token, None)
                continue
            self._deliver(callback, state)

    def _deliver(self, callback: StateCallback, state: AggregateState[T]) -> None:
        try:
            callback(state)
        except Exception as e:
            logger.warning("Subscriber of %s failed: %s", self._name, e)

    def _prune(self) -> None:
        for token, ref in list(self._subscribers.items()):
            if ref() is None:
                self._subscribers.pop(token, None)

    def _remove(self, token: int) -> None:
        self._subscribers.pop(token, None)
