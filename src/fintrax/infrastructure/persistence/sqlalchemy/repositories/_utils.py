"""Shared utilities for SQLAlchemy repositories."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError

from fintrax.domain.shared.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def store_errors(operation: str) -> AsyncIterator[None]:
    """
    Translate database failures into StoreUnavailableError.

    Domain exceptions raised inside the block pass through unchanged.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.warning("Store operation %s failed: %s", operation, e)
        msg = f"Store operation '{operation}' failed"
        raise StoreUnavailableError(msg, operation=operation) from e
