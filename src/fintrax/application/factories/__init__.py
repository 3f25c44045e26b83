"""Application factories."""

from fintrax.application.factories.store_factory import StoreFactory

__all__ = ["StoreFactory"]
