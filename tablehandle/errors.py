"""Exceptions for misusing a handle (as opposed to bad arguments, which get codes)."""
from __future__ import annotations


class TableHandleError(RuntimeError):
    pass


class HandleClosedError(TableHandleError):
    def __init__(self, location: str):
        super().__init__(f"Table handle is closed: {location}")
        self.location = location


class TableNotOpenError(TableHandleError):
    def __init__(self, operation: str):
        super().__init__(f"No active table for {operation}(); call open() first")
        self.operation = operation
