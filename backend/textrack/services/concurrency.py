# Overview: Row-locking helper shared by the progress and archive write paths.

from __future__ import annotations


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    Product.version_id still rejects a stale write there.
    """
    return query.with_for_update()
