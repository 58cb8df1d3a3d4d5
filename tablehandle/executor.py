"""Serialized execution queue that owns the database connection.

One worker thread opens the connection, runs every submitted job against it in
submission order, and finally closes it. Callers get a Future per job and never
block unless they ask for the result.

Future callbacks run on the worker thread. Submitting from a callback is fine;
waiting on a Future from a callback is not, since the worker is busy running it.
"""
from __future__ import annotations
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from .base_backend import Backend, ConnectionLike
from .logging_util import debug, warn


class SerialExecutor:
    def __init__(self, backend: Backend):
        self.backend = backend
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tablehandle")
        self._conn: Optional[ConnectionLike] = None
        self._worker_ident: Optional[int] = None
        self._closed = False
        try:
            self._conn = self._pool.submit(self._connect).result()
        except BaseException:
            self._closed = True
            self._pool.shutdown(wait=True)
            raise

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def on_worker(self) -> bool:
        return threading.get_ident() == self._worker_ident

    def submit(self, job: Callable[[ConnectionLike], Any]) -> Future:
        """Queue ``job(conn)``; jobs run one at a time in the order submitted."""
        return self._pool.submit(self._run, job)

    def _connect(self) -> ConnectionLike:
        self._worker_ident = threading.get_ident()
        return self.backend.connect()

    def _run(self, job: Callable[[ConnectionLike], Any]) -> Any:
        return job(self._conn)

    def _close_conn(self) -> None:
        conn, self._conn = self._conn, None
        try:
            conn.close()
        except Exception as e:
            warn("connection_close_failed", location=self.backend.location, error=str(e))
            return
        debug("connection_closed", location=self.backend.location)

    def close(self) -> bool:
        """Queue the connection close behind pending jobs. False if already closed.

        From another thread this waits for the queue to drain. From the worker
        itself (a Future callback) it returns at once; pending jobs and the close
        still run in order once the callback finishes. A later call from another
        thread waits for that drain.
        """
        if self._closed:
            if not self.on_worker:
                self._pool.shutdown(wait=True)
            return False
        self._closed = True
        closing = self._pool.submit(self._close_conn)
        if self.on_worker:
            self._pool.shutdown(wait=False)
            return True
        try:
            closing.result()
        finally:
            self._pool.shutdown(wait=True)
        return True
