from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def backend_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, 'orig', None)
    return str(orig) if orig is not None else str(exc)


def flush_or_raise(db: Session, *, failure: str) -> None:
    """Flush pending writes; on a store error roll back and raise ValueError('<failure>: <raw message>')."""
    try:
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error('%s: %s', failure, exc)
        raise ValueError(f'{failure}: {backend_message(exc)}') from exc


def execute_or_raise(db: Session, statement, *, failure: str):
    try:
        return db.execute(statement)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error('%s: %s', failure, exc)
        raise ValueError(f'{failure}: {backend_message(exc)}') from exc
