"""
Optimistic concurrency for slot and slot-request rows.

Every row carries an opaque ``etag``. A write presents the etag read at
load time; the UPDATE only matches if the stored etag is unchanged, and a
fresh etag is stamped on success. A zero-row match raises
PreconditionFailed, which callers translate into a business conflict
(another request won), never into a retryable infrastructure error.
"""

import logging
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import update
from sqlmodel import Session

logger = logging.getLogger(__name__)


class PreconditionFailed(Exception):
    """Raised when the stored version tag changed since the row was read"""

    def __init__(self, table: str, row_id: Any, expected_etag: str):
        self.table = table
        self.row_id = row_id
        self.expected_etag = expected_etag
        super().__init__(f"{table} row {row_id} changed since it was read (etag {expected_etag})")


def new_etag() -> str:
    return uuid4().hex


def compare_and_swap(
    session: Session, row: Any, changes: Dict[str, Any], expected_etag: Optional[str] = None
) -> Any:
    """
    Apply ``changes`` to ``row`` only if its stored etag still matches.

    The etag compared against is ``expected_etag`` when given, else ``row.etag``.
    Pass the etag captured at read time whenever a commit happened in between,
    since a commit expires ``row`` and the next access reloads the newest etag.

    The write is committed on success and ``row`` is refreshed (new etag
    included). On a version mismatch the session is rolled back and
    PreconditionFailed is raised; the stored row is left untouched.
    """
    model = type(row)
    expected = row.etag if expected_etag is None else expected_etag
    values = dict(changes)
    values["etag"] = new_etag()

    stmt = update(model).where(model.id == row.id, model.etag == expected).values(**values)
    result = session.connection().execute(stmt)
    if result.rowcount != 1:
        session.rollback()
        logger.warning("CAS lost on %s id=%s (expected etag %s)", model.__tablename__, row.id, expected)
        raise PreconditionFailed(model.__tablename__, row.id, expected)

    session.commit()
    session.refresh(row)
    return row


def insert_row(session: Session, row: Any) -> Any:
    """Insert a new keyed row and commit it."""
    if not row.etag:
        row.etag = new_etag()
    session.add(row)
    session.commit()
    session.refresh(row)
    return row
