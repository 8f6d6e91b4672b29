"""Translate driver/ORM failures into the retryable StorageError."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from app.services.errors import StorageError

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        # Full detail goes to the log only; clients get a generic message.
        logger.exception("Storage failure during %s", operation)
        raise StorageError() from e
