# src/collection_ballot/db/transaction.py
"""Transaction boundaries shared by the ballot services."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from collection_ballot.core.errors import BallotError, StorageFailure

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Run the enclosed block as one transaction.

    Commits when the block finishes and rolls back on any error. Storage
    errors are re-raised as :class:`StorageFailure`; domain errors propagate
    unchanged after the rollback.
    """
    try:
        yield db
        db.commit()
    except BallotError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Rolled back unit of work after storage error: %s", exc)
        raise StorageFailure() from exc
    except Exception:
        db.rollback()
        raise


@contextmanager
def storage_reads(db: Session) -> Iterator[Session]:
    """Report storage errors from reads outside a unit of work as :class:`StorageFailure`."""
    try:
        yield db
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Storage read failed: %s", exc)
        raise StorageFailure() from exc
