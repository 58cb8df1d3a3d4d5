"""SQLite backend for the table handle.

    - Opens a file database or a transient in-memory one (MEMORY sentinel)
    - Environment driven tuning with clamping + sanity logging
    - Autocommit connections: every command the handle issues stands alone
    - Health check helper + optional integrity_check (VERIFY_ON_CONNECT=1)
    - Clear error for directory path misuse
"""
from __future__ import annotations
import sqlite3, os
from dataclasses import dataclass
from pathlib import Path
from .logging_util import warn, debug
from typing import Any, Optional, Dict, Union

MEMORY = ":memory:"

MAX_CACHE_KIB = 512 * 1024        # 512 MiB upper clamp
MIN_CACHE_KIB = 16                # SQLite minimum practical
DEFAULT_CACHE_KIB = 64 * 1024     # 64 MiB
MAX_BUSY_TIMEOUT_MS = 600_000     # 10 min
DEFAULT_BUSY_TIMEOUT_MS = 30_000
DEFAULT_JOURNAL_MODE = "WAL"
JOURNAL_MODES = {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}

@dataclass
class BackendConfig:
    cache_kib: int = DEFAULT_CACHE_KIB
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS
    journal_mode: str = DEFAULT_JOURNAL_MODE
    foreign_keys: bool = True
    verify_on_connect: bool = False

    @classmethod
    def from_env(cls) -> "BackendConfig":
        def _int(name: str, default: int) -> int:
            raw = os.environ.get(name)
            if raw is None:
                return default
            try:
                return int(raw)
            except ValueError:
                warn("invalid_env_int", key=name, value=raw, default=default)
                return default
        cache_kib = _int("CACHE_SIZE_KIB", DEFAULT_CACHE_KIB)
        busy_ms = _int("BUSY_TIMEOUT_MS", DEFAULT_BUSY_TIMEOUT_MS)
        journal = os.environ.get("JOURNAL_MODE", DEFAULT_JOURNAL_MODE).upper()
        if journal not in JOURNAL_MODES:
            warn("invalid_env_choice", key="JOURNAL_MODE", value=journal, default=DEFAULT_JOURNAL_MODE)
            journal = DEFAULT_JOURNAL_MODE
        foreign_keys = os.environ.get("FOREIGN_KEYS", "1") == "1"
        verify = os.environ.get("VERIFY_ON_CONNECT", "0") == "1"
        # Clamp
        adjusted = {}
        if cache_kib < MIN_CACHE_KIB or cache_kib > MAX_CACHE_KIB:
            adjusted["cache_kib"] = cache_kib
            cache_kib = min(MAX_CACHE_KIB, max(MIN_CACHE_KIB, cache_kib))
        if busy_ms < 0 or busy_ms > MAX_BUSY_TIMEOUT_MS:
            adjusted["busy_timeout_ms"] = busy_ms
            busy_ms = min(MAX_BUSY_TIMEOUT_MS, max(0, busy_ms))
        if adjusted:
            final_values = {"cache_kib": cache_kib, "busy_timeout_ms": busy_ms}
            warn("backend_config_clamped", original=adjusted, clamped=final_values)
        return cls(cache_kib=cache_kib, busy_timeout_ms=busy_ms, journal_mode=journal,
                   foreign_keys=foreign_keys, verify_on_connect=verify)

class SQLiteBackend:
    """SQLite backend.

    Responsibilities:
      - Resolve the storage location (file path or MEMORY)
      - Provide autocommit connections with Row factory
      - Apply tuned pragmas with safe clamping
      - Health check utility
    """
    def __init__(self, location: Union[str, Path] = MEMORY, config: Optional[BackendConfig] = None):
        location = str(location)
        if location != MEMORY and os.path.isdir(location):  # directory misuse
            raise ValueError(f"Path points to a directory, expected file: {location}")
        self.location = location
        self.config = config or BackendConfig.from_env()

    @property
    def in_memory(self) -> bool:
        return self.location == MEMORY

    # --- Public API -----------------------------------------------------------------
    def connect(self) -> sqlite3.Connection:
        """Return a configured sqlite3.Connection.

        The connection is bound to the calling thread; the handle's executor calls
        this from its worker so that thread owns the connection for its lifetime.
        Raises sqlite3.OperationalError if the file cannot be opened or created.
        """
        if not self.in_memory:
            parent = os.path.dirname(os.path.abspath(self.location))
            if not os.path.isdir(parent):
                # Friendly pre-check before SQLite cryptic error
                raise sqlite3.OperationalError(f"Parent directory does not exist: {parent}")
        conn = sqlite3.connect(self.location, isolation_level=None)
        conn.row_factory = sqlite3.Row
        self._apply_pragmas(conn)
        if self.config.verify_on_connect:
            try:
                res = conn.execute("PRAGMA integrity_check").fetchone()[0]
                if res != "ok":
                    warn("integrity_check_failed", location=self.location, result=res)
            except sqlite3.Error as e:  # pragma: no cover - unexpected
                warn("integrity_check_error", location=self.location, error=str(e))
        debug("connection_opened", location=self.location)
        return conn

    def health_check(self, conn: sqlite3.Connection) -> Dict[str, Any]:
        """Return current core pragma values and basic status for an open connection."""
        try:
            rows = {
                "foreign_keys": conn.execute("PRAGMA foreign_keys").fetchone()[0],
                "journal_mode": conn.execute("PRAGMA journal_mode").fetchone()[0],
                "busy_timeout": conn.execute("PRAGMA busy_timeout").fetchone()[0],
                "cache_size": conn.execute("PRAGMA cache_size").fetchone()[0],
                "sqlite_version": sqlite3.sqlite_version,
            }
        except sqlite3.Error as e:
            return {"ok": False, "location": self.location, "error": str(e)}
        return {"ok": True, "location": self.location, "in_memory": self.in_memory, **rows}

    # --- Internal -------------------------------------------------------------------
    def _apply_pragmas(self, conn: sqlite3.Connection) -> None:
        pragmas = [
            (f"foreign_keys={'ON' if self.config.foreign_keys else 'OFF'}", "foreign_keys"),
            (f"busy_timeout={self.config.busy_timeout_ms}", "busy_timeout"),
            (f"cache_size=-{self.config.cache_kib}", "cache_size"),  # negative => KiB
        ]
        for p, tag in pragmas:
            try:
                conn.execute(f"PRAGMA {p}")
            except sqlite3.Error as e:
                warn("pragma_failed", pragma=p, tag=tag, location=self.location, error=str(e))
        if self.in_memory:
            return  # journal mode is fixed to MEMORY for transient databases
        try:
            jm = conn.execute(f"PRAGMA journal_mode={self.config.journal_mode}").fetchone()[0]
            if jm.upper() != self.config.journal_mode:
                warn("journal_mode_unexpected", got=jm, wanted=self.config.journal_mode, location=self.location)
        except sqlite3.Error as e:
            warn("pragma_failed", pragma=f"journal_mode={self.config.journal_mode}", location=self.location, error=str(e))


def cli_dump_config(argv=None):  # pragma: no cover - thin CLI wrapper
    """CLI helper: print resolved BackendConfig + health_check JSON."""
    import argparse, json
    ap = argparse.ArgumentParser(description='Dump backend config and health info')
    ap.add_argument('db', nargs='?', default=MEMORY, help='Path to SQLite database (default: in-memory)')
    args = ap.parse_args(argv)
    be = SQLiteBackend(args.db)
    cfg = be.config.__dict__.copy()
    conn = be.connect()
    try:
        hc = be.health_check(conn)
    finally:
        conn.close()
    out = {'config': cfg, 'health_check': hc}
    print(json.dumps(out, indent=2))

if __name__ == '__main__':  # pragma: no cover
    cli_dump_config()
