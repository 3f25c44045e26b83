"""Reactive primitives: observable aggregates and subscriptions."""

from fintrax.application.reactive.observable import (
    AggregateState,
    Observable,
    Subscription,
)

__all__ = ["AggregateState", "Observable", "Subscription"]
