from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockkeeper.core.errors import DatabaseError
from stockkeeper.models.activity import ActivityLogEntry
from stockkeeper.models.user import User


logger = logging.getLogger(__name__)

CSV_HEADERS = ("Log ID", "Time", "User ID", "Username", "Action", "Details")
CSV_TIME_FORMAT = "%d %b %y, %H:%M:%S"


def record_activity(db: Session, actor: User | None, action: str, details: str | None = None) -> None:
    """Append one audit row for *actor*.

    Runs after the triggering mutation has been committed and never raises:
    a failed write is rolled back and logged, the mutation stands.
    """

    if actor is None:
        logger.warning("Skipping activity log %r: no acting user identified.", action)
        return

    entry = ActivityLogEntry(
        user_id=actor.id,
        username_at_log_time=actor.username,
        action=action,
        details=details or None,
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to write activity log %r for user %s", action, actor.username)


def list_activity(db: Session) -> list[ActivityLogEntry]:
    try:
        rows = (
            db.query(ActivityLogEntry)
            .order_by(ActivityLogEntry.logged_at.desc(), ActivityLogEntry.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch activity log")
        raise DatabaseError(
            "Failed to load the activity log. Check the database connection or the table schema."
        ) from exc
    logger.info("%d activity log entries fetched.", len(rows))
    return rows


def _format_time(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.strftime(CSV_TIME_FORMAT)


def export_activity_csv(entries: Iterable[ActivityLogEntry], today: date | None = None) -> tuple[str, str]:
    """Render entries as RFC 4180 CSV. Returns ``(content, filename)``."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(CSV_HEADERS)
    for entry in entries:
        writer.writerow(
            [
                entry.id,
                _format_time(entry.logged_at),
                "" if entry.user_id is None else entry.user_id,
                entry.username_at_log_time,
                entry.action,
                entry.details or "",
            ]
        )
    stamp = (today or date.today()).isoformat()
    return buffer.getvalue(), f"activity_log_{stamp}.csv"
