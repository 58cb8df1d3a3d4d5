"""Backend abstraction layer.

Structural types the executor and table handle depend on, so another embedded
engine could stand in for SQLite without touching the handle.

KISS: only what the handle actually calls is described here.
"""
from __future__ import annotations
from typing import Protocol, Any, Dict, Iterable

class CursorLike(Protocol):  # pragma: no cover - structural typing helper
    rowcount: int
    def fetchone(self) -> Any: ...
    def fetchall(self) -> list: ...

class ConnectionLike(Protocol):  # pragma: no cover - structural typing helper
    def execute(self, sql: str, parameters: Iterable[Any] = ...) -> CursorLike: ...
    def close(self) -> None: ...

class Backend(Protocol):
    location: str

    def connect(self) -> ConnectionLike:
        """Open and configure a connection. Must raise if the engine cannot be opened.

        Called on the thread that will own the connection for its whole life.
        """
        ...

    def health_check(self, conn: ConnectionLike) -> Dict[str, Any]:
        """Snapshot of engine settings for an open connection."""
        ...
