# Overview: Write serialization for the register; one writer at a time.

from __future__ import annotations

import threading
from contextlib import contextmanager

from sqlalchemy import text

from ..extensions import db

# Serializes Sale-Commit write phases and inventory edits within the process.
_write_lock = threading.RLock()


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def begin_immediate() -> None:
    """
    Take the SQLite write lock up front so the check phase and the write
    phase see the same snapshot. No-op on other dialects.
    """
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


@contextmanager
def write_lock():
    """
    Critical section around a multi-row write.

    Nothing inside is retried: a failure rolls back and propagates.
    """
    with _write_lock:
        yield
