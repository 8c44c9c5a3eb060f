"""
Base class for the database-backed services.

Every write runs inside ``_guard``: a rule violation or a database error
rolls the session back before it propagates, so a failed call never leaves
pending changes behind for the next commit.
"""
import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hoopstats.core.errors import GameRuleError
from hoopstats.core.metrics import record_violation

logger = logging.getLogger(__name__)


class BaseService:
    """Holds the session and the shared write guard."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str, **log_extra: Any) -> Iterator[None]:
        """Roll back and log on any failure inside a write."""
        try:
            yield
        except GameRuleError as e:
            self.db.rollback()
            record_violation(e.kind.value)
            logger.warning(
                f"{operation} rejected: {e.kind.value} - {e.message}",
                extra={**log_extra, "error_kind": e.kind.value},
            )
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{operation} failed: {e}", extra=log_extra)
            raise
