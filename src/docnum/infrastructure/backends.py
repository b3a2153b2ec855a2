"""Key-value persistence backends.

The numbering engine is storage-agnostic: stores talk to a
:class:`KeyValueBackend` injected at construction. Values are JSON
documents; a backend only needs to map string keys to them.

``put_many`` is the atomicity seam. The generator commits a counter
advance and its used-number entry in a single ``put_many`` call, so a
backend must apply all of its items or none.

``transaction`` is the isolation seam. The generator runs each
read-modify-write of a number type inside one, so two generators over the
same store, in this process or another, never read the same counter and
both commit a number from it.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from docnum.domain.errors import PersistenceError
from docnum.infrastructure.database.schema import numbering_state

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine


class KeyValueBackend(Protocol):
    """Persistent mapping of string keys to JSON-serializable values."""

    def get(self, key: str) -> Any | None: ...

    def put(self, key: str, value: Any) -> None: ...

    def put_many(self, items: Mapping[str, Any]) -> None: ...

    def delete(self, *keys: str) -> None: ...

    def keys(self, prefix: str = "") -> list[str]: ...

    def transaction(self) -> AbstractContextManager[None]: ...


def _encode(key: str, value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as exc:
        msg = f"Value for {key!r} is not JSON-serializable: {exc}"
        raise PersistenceError(msg) from exc


def _decode(key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Corrupt JSON stored under {key!r}: {exc}"
        raise PersistenceError(msg) from exc


# ---------------------------------------------------------------------------
# SQLite (SQLAlchemy Core)
# ---------------------------------------------------------------------------


class SqlKeyValueBackend:
    """Backend over the ``numbering_state`` table.

    Outside :meth:`transaction` every call runs in its own transaction and
    ``put_many`` writes all rows in one. Inside it, the calls made by the
    owning thread share one ``BEGIN IMMEDIATE`` connection, so a
    read-modify-write sequence cannot interleave with another process
    working on the same database file.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._local = threading.local()

    @staticmethod
    def _upsert(conn: Connection, key: str, encoded: str, stamp: str) -> None:
        stmt = sqlite_insert(numbering_state).values(key=key, value=encoded, updated=stamp)
        conn.execute(
            stmt.on_conflict_do_update(
                index_elements=[numbering_state.c.key],
                set_={"value": stmt.excluded.value, "updated": stmt.excluded.updated},
            )
        )

    @contextmanager
    def _connection(self, *, write: bool) -> Iterator[Connection]:
        active: Connection | None = getattr(self._local, "conn", None)
        if active is not None:
            yield active
        elif write:
            with self._engine.begin() as conn:
                yield conn
        else:
            with self._engine.connect() as conn:
                yield conn

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Hold the database write lock for the duration of the block.

        Re-entrant per thread. The block commits on normal exit and rolls
        back when it raises.
        """
        if getattr(self._local, "conn", None) is not None:
            yield
            return
        try:
            with self._engine.connect() as conn:
                conn.execution_options(sqlite_begin="IMMEDIATE")
                with conn.begin():
                    self._local.conn = conn
                    try:
                        yield
                    finally:
                        self._local.conn = None
        except SQLAlchemyError as exc:
            msg = f"Transaction failed: {exc}"
            raise PersistenceError(msg) from exc

    def get(self, key: str) -> Any | None:
        try:
            with self._connection(write=False) as conn:
                row = conn.execute(
                    select(numbering_state.c.value).where(numbering_state.c.key == key)
                ).first()
        except SQLAlchemyError as exc:
            msg = f"Failed to read {key!r}: {exc}"
            raise PersistenceError(msg) from exc
        if row is None:
            return None
        return _decode(key, row.value)

    def put(self, key: str, value: Any) -> None:
        self.put_many({key: value})

    def put_many(self, items: Mapping[str, Any]) -> None:
        if not items:
            return
        encoded = {key: _encode(key, value) for key, value in items.items()}
        stamp = datetime.now(UTC).isoformat()
        try:
            with self._connection(write=True) as conn:
                for key, raw in encoded.items():
                    self._upsert(conn, key, raw, stamp)
        except SQLAlchemyError as exc:
            msg = f"Failed to write {sorted(encoded)}: {exc}"
            raise PersistenceError(msg) from exc

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            with self._connection(write=True) as conn:
                conn.execute(delete(numbering_state).where(numbering_state.c.key.in_(keys)))
        except SQLAlchemyError as exc:
            msg = f"Failed to delete {list(keys)}: {exc}"
            raise PersistenceError(msg) from exc

    def keys(self, prefix: str = "") -> list[str]:
        stmt = select(numbering_state.c.key).order_by(numbering_state.c.key)
        if prefix:
            stmt = stmt.where(numbering_state.c.key.startswith(prefix, autoescape=True))
        try:
            with self._connection(write=False) as conn:
                return [row.key for row in conn.execute(stmt)]
        except SQLAlchemyError as exc:
            msg = f"Failed to list keys with prefix {prefix!r}: {exc}"
            raise PersistenceError(msg) from exc


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


class MemoryKeyValueBackend:
    """Process-local backend for tests and ephemeral use.

    Values are stored JSON-encoded so callers never share mutable state
    with the backend. :meth:`transaction` serializes callers but does not
    roll back writes made inside a failed block.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()
        self._txn_lock = threading.RLock()
        if initial:
            self.put_many(initial)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._txn_lock:
            yield

    def get(self, key: str) -> Any | None:
        with self._lock:
            raw = self._data.get(key)
        return None if raw is None else _decode(key, raw)

    def put(self, key: str, value: Any) -> None:
        self.put_many({key: value})

    def put_many(self, items: Mapping[str, Any]) -> None:
        encoded = {key: _encode(key, value) for key, value in items.items()}
        with self._lock:
            self._data.update(encoded)

    def delete(self, *keys: str) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))
