"""In-process feed of committed row changes, folded by listing views.

Changes are collected from the ORM flushes of a session and published only
after the surrounding transaction commits. Bulk deletes and store-level
cascades are not observed. Nothing on the write paths reads this feed.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy import event, inspect
from sqlalchemy.orm import Session, SessionTransaction, sessionmaker

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"

DEFAULT_TABLES = ("services", "observations")

_PENDING_KEY = "pending_changes"


@dataclass(frozen=True)
class ChangeEvent:
    event_type: str
    table: str
    id: Any
    record: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return jsonable_encoder(
            {"eventType": self.event_type, "table": self.table, "id": self.id, "record": self.record}
        )


def _row_snapshot(obj: Any) -> dict[str, Any]:
    """Loaded column values only; server-generated columns may still be unloaded."""
    state = inspect(obj)
    return {attr.key: state.dict[attr.key] for attr in state.mapper.column_attrs if attr.key in state.dict}


class ChangeFeed:
    def __init__(self, tables: Iterable[str] = DEFAULT_TABLES) -> None:
        self.tables = frozenset(tables)
        self._subscribers: list[tuple[str | None, Callable[[ChangeEvent], None]]] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[ChangeEvent], None], *, table: str | None = None) -> Callable[[], None]:
        """Register ``callback`` for one table (or all); returns the unsubscribe function."""
        entry = (table, callback)
        with self._lock:
            self._subscribers.append(entry)

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)

        return unsubscribe

    def publish(self, change: ChangeEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for table, callback in subscribers:
            if table is not None and table != change.table:
                continue
            try:
                callback(change)
            except Exception:
                # subscribers never fail the commit
                logger.exception("Change subscriber failed for %s:%s", change.table, change.id)

    # Session wiring

    def attach(self, session_factory: sessionmaker) -> None:
        event.listen(session_factory, "after_flush", self._collect)
        event.listen(session_factory, "after_commit", self._release)
        event.listen(session_factory, "after_rollback", self._discard)
        event.listen(session_factory, "after_transaction_end", self._forget)

    def _watched(self, obj: Any) -> str | None:
        table = getattr(obj, "__tablename__", None)
        return table if table in self.tables else None

    def _collect(self, session: Session, _flush_context) -> None:
        # each change is tagged with the innermost transaction it was flushed in
        transaction = session.get_nested_transaction() or session.get_transaction()
        pending: list[tuple[SessionTransaction, ChangeEvent]] = session.info.setdefault(_PENDING_KEY, [])
        for obj in session.new:
            table = self._watched(obj)
            if table:
                pending.append((transaction, ChangeEvent(INSERT, table, obj.id, _row_snapshot(obj))))
        for obj in session.dirty:
            table = self._watched(obj)
            if table and session.is_modified(obj, include_collections=False):
                pending.append((transaction, ChangeEvent(UPDATE, table, obj.id, _row_snapshot(obj))))
        for obj in session.deleted:
            table = self._watched(obj)
            if table:
                pending.append((transaction, ChangeEvent(DELETE, table, obj.id, {"id": obj.id})))

    def _release(self, session: Session) -> None:
        if session.in_nested_transaction():
            # savepoint release; wait for the outer commit
            return
        pending = session.info.pop(_PENDING_KEY, [])
        for _transaction, change in pending:
            self.publish(change)

    def _discard(self, session: Session) -> None:
        savepoint = session.get_nested_transaction()
        if savepoint is None:
            session.info.pop(_PENDING_KEY, None)
            return
        # only the rolled-back savepoint (and savepoints inside it) lose their changes
        pending = session.info.get(_PENDING_KEY, [])
        session.info[_PENDING_KEY] = [
            (transaction, change) for transaction, change in pending
            if not _within(transaction, savepoint)
        ]

    def _forget(self, session: Session, transaction: SessionTransaction) -> None:
        if transaction.parent is None:
            session.info.pop(_PENDING_KEY, None)


def _within(transaction: SessionTransaction | None, ancestor: SessionTransaction) -> bool:
    while transaction is not None:
        if transaction is ancestor:
            return True
        transaction = transaction.parent
    return False


def apply_change(rows: list[dict[str, Any]], change: ChangeEvent | dict[str, Any]) -> list[dict[str, Any]]:
    """Fold one change into a listing: inserts go first, updates merge, deletes drop the row."""
    if isinstance(change, ChangeEvent):
        change = change.as_dict()
    event_type = change["eventType"]
    row_id = change["id"]
    record = change.get("record") or {}

    if event_type == INSERT:
        return [record, *[row for row in rows if row.get("id") != row_id]]
    if event_type == UPDATE:
        return [{**row, **record} if row.get("id") == row_id else row for row in rows]
    if event_type == DELETE:
        return [row for row in rows if row.get("id") != row_id]
    return rows
