"""Table handle: CRUD over one SQLite table without hand-written SQL.

Each operation validates its arguments synchronously. Bad arguments come back as
an already-completed Future carrying a ReturnCode and nothing reaches the
engine. Valid calls are queued on the handle's serial executor and resolve to a
Result once the engine has run them; engine failures resolve to ENGINE_ERROR
with the sqlite3 exception attached.

Example::

    with TableHandle(MEMORY) as h:
        h.open("item", ["id INTEGER PRIMARY KEY", "name TEXT", "price INTEGER"])
        h.insert(["name", "price"], [["pen", 100], ["eraser", 50]])
        rows = h.search(["*"], [{"column": "price", "order": "asc"}]).result().value
"""
from __future__ import annotations
import sqlite3
from collections.abc import Mapping, Sequence
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

from . import sql
from .codes import ReturnCode, Result, RowError
from .errors import HandleClosedError, TableNotOpenError
from .executor import SerialExecutor
from .logging_util import debug, info, warn
from .sqlite_backend import MEMORY, BackendConfig, SQLiteBackend

CountCallback = Callable[[int], None]
SearchCallback = Callable[[Optional[BaseException], List[dict]], None]

_DIRECTIONS = {"ASC", "DESC"}
_BINDABLE = (str, int, float, bytes, bytearray, memoryview, type(None))


def _is_sequence(obj: Any) -> bool:
    return isinstance(obj, Sequence) and not isinstance(obj, (str, bytes, bytearray))


def _text_fragments(obj: Any) -> bool:
    """Non-empty sequence of strings (column names or definitions)."""
    return _is_sequence(obj) and len(obj) > 0 and all(isinstance(c, str) for c in obj)


def _invoke(operation: str, callback: Callable[..., None], *args: Any) -> None:
    try:
        callback(*args)
    except Exception as e:
        warn("callback_failed", op=operation, error=repr(e))


def _completed(code: ReturnCode) -> Future:
    fut: Future = Future()
    fut.set_result(Result(code))
    return fut


def _normalize_orders(orders: Sequence[Any]) -> Optional[List[Tuple[str, str]]]:
    """Accept {"column", "order"} mappings or (column, direction) pairs; None if any is malformed."""
    out = []
    for entry in orders:
        if isinstance(entry, Mapping):
            column, direction = entry.get("column"), entry.get("order", "asc")
        elif _is_sequence(entry) and len(entry) == 2:
            column, direction = entry
        else:
            return None
        if not isinstance(column, str) or not column or not isinstance(direction, str):
            return None
        if direction.upper() not in _DIRECTIONS:
            return None
        out.append((column, direction.upper()))
    return out


class TableHandle:
    """One connection plus the active table name.

    ``open`` binds the active table; ``table_name`` may also be given up front
    when the table is known to exist. After ``close`` the handle is terminal.
    """

    def __init__(self, location: Union[str, Path] = MEMORY, table_name: Optional[str] = None,
                 config: Optional[BackendConfig] = None):
        self.backend = SQLiteBackend(location, config)
        self._executor = SerialExecutor(self.backend)
        self.table_name = table_name

    @property
    def location(self) -> str:
        return self.backend.location

    @property
    def closed(self) -> bool:
        return self._executor.closed

    def __enter__(self) -> "TableHandle":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<TableHandle {self.location!r} table={self.table_name!r} {state}>"

    # --- Internal -------------------------------------------------------------------
    def _ensure_usable(self) -> None:
        if self.closed:
            raise HandleClosedError(self.location)

    def _active_table(self, operation: str) -> str:
        self._ensure_usable()
        if self.table_name is None:
            raise TableNotOpenError(operation)
        return self.table_name

    def _submit(self, operation: str, cmd: str, params: Sequence[Any] = (),
                transform: Callable[[sqlite3.Cursor], Any] = lambda cur: None) -> Future:
        debug("sql_command", op=operation, table=self.table_name, sql=cmd)

        def job(conn: sqlite3.Connection) -> Result:
            try:
                cur = conn.execute(cmd, params)
                return Result(ReturnCode.OK, value=transform(cur))
            except sqlite3.Error as e:
                warn("command_failed", op=operation, table=self.table_name, sql=cmd, error=str(e))
                return Result(ReturnCode.ENGINE_ERROR, error=e)

        return self._executor.submit(job)

    # --- Public API -----------------------------------------------------------------
    def open(self, table_name: str, columns: Sequence[str]) -> Future:
        """Bind ``table_name`` and create it from raw column definitions if missing.

        No schema comparison is made against an existing table.
        """
        self._ensure_usable()
        if not _text_fragments(columns):
            return _completed(ReturnCode.COLUMN_ERROR)
        if not isinstance(table_name, str) or not table_name:
            return _completed(ReturnCode.TYPE_ERROR)
        self.table_name = table_name
        return self._submit("open", sql.create_table(table_name, columns))

    def close(self) -> ReturnCode:
        if self._executor.close():
            info("handle_closed", location=self.location, table=self.table_name)
        return ReturnCode.OK

    def count(self, callback: Optional[CountCallback] = None) -> Future:
        table = self._active_table("count")
        fut = self._submit("count", sql.count(table), transform=lambda cur: cur.fetchone()[0])
        if callback is not None:
            def _deliver(f: Future) -> None:
                res = f.result()
                if res.ok:
                    _invoke("count", callback, res.value)
            fut.add_done_callback(_deliver)
        return fut

    def insert(self, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> Future:
        """Insert each row with one prepared command; rows run independently, in order.

        The first row fixes the placeholder count. Rows of another length are
        skipped as VALUE_ERROR; rows the engine rejects are ENGINE_ERROR. Both are
        listed in ``Result.row_errors`` and the remaining rows still run.
        """
        table = self._active_table("insert")
        if not _text_fragments(columns):
            return _completed(ReturnCode.COLUMN_ERROR)
        if not _is_sequence(rows) or len(rows) == 0 or not _is_sequence(rows[0]):
            return _completed(ReturnCode.VALUE_ERROR)
        arity = len(rows[0])
        snapshot = [tuple(r) if _is_sequence(r) else r for r in rows]
        cmd = sql.insert(table, columns, arity)
        debug("sql_command", op="insert", table=table, sql=cmd, rows=len(snapshot))

        def job(conn: sqlite3.Connection) -> Result:
            inserted = 0
            row_errors: List[RowError] = []
            for index, row in enumerate(snapshot):
                if not isinstance(row, tuple) or len(row) != arity:
                    got = len(row) if isinstance(row, tuple) else type(row).__name__
                    warn("insert_row_rejected", table=table, index=index, expected=arity, got=got)
                    row_errors.append(RowError(index, ReturnCode.VALUE_ERROR,
                                               ValueError(f"row {index}: expected {arity} values, got {got}")))
                    continue
                try:
                    conn.execute(cmd, row)
                    inserted += 1
                except sqlite3.Error as e:
                    warn("command_failed", op="insert", table=table, sql=cmd, index=index, error=str(e))
                    row_errors.append(RowError(index, ReturnCode.ENGINE_ERROR, e))
            code = row_errors[0].code if row_errors else ReturnCode.OK
            error = row_errors[0].error if row_errors else None
            return Result(code, value=inserted, error=error, row_errors=row_errors)

        return self._executor.submit(job)

    def update(self, column: str, value: Any, condition: str) -> Future:
        """SET ``column`` to ``value`` (bound, never interpolated) WHERE raw ``condition``."""
        table = self._active_table("update")
        if not isinstance(column, str) or not isinstance(condition, str):
            return _completed(ReturnCode.TYPE_ERROR)
        if not isinstance(value, _BINDABLE):
            return _completed(ReturnCode.TYPE_ERROR)
        return self._submit("update", sql.update(table, column, condition), (value,),
                            transform=lambda cur: cur.rowcount)

    def delete(self, condition: str) -> Future:
        table = self._active_table("delete")
        if not isinstance(condition, str):
            return _completed(ReturnCode.TYPE_ERROR)
        return self._submit("delete", sql.delete(table, condition), transform=lambda cur: cur.rowcount)

    def search(self, columns: Sequence[str], orders: Sequence[Any], condition: Optional[str] = None,
               callback: Optional[SearchCallback] = None) -> Future:
        """Rows as dicts. ``condition`` is raw predicate text and is used only when it is a str.

        ``orders`` items are {"column": ..., "order": "asc"|"desc"} or (column, direction).
        """
        table = self._active_table("search")
        if not _is_sequence(columns):
            return _completed(ReturnCode.COLUMN_ERROR)
        if not _is_sequence(orders):
            return _completed(ReturnCode.ORDER_ERROR)
        if not _text_fragments(columns):
            return _completed(ReturnCode.COLUMN_ERROR)
        normalized = _normalize_orders(orders)
        if normalized is None:
            return _completed(ReturnCode.ORDER_ERROR)
        where = condition if isinstance(condition, str) else None
        cmd = sql.select(table, columns, normalized, where)
        fut = self._submit("search", cmd, transform=lambda cur: [dict(r) for r in cur.fetchall()])
        if callback is not None:
            def _deliver(f: Future) -> None:
                res = f.result()
                _invoke("search", callback, res.error, res.value or [])
            fut.add_done_callback(_deliver)
        return fut

    def print_all(self) -> Future:
        """Log every row of the active table (diagnostic)."""
        table = self._active_table("print_all")
        return self.search(["*"], [], None, lambda err, rows: info("table_rows", table=table, rows=rows))

    def health(self) -> Future:
        self._ensure_usable()
        return self._executor.submit(self.backend.health_check)
