"""Return codes and the result record every table operation resolves to.

Validation problems are reported with the small negative codes below and never
reach the engine. ENGINE_ERROR marks a command the engine itself rejected; the
underlying exception rides along on ``Result.error``.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List, Optional


class ReturnCode(IntEnum):
    OK = 0
    COLUMN_ERROR = -1
    VALUE_ERROR = -2
    TYPE_ERROR = -3
    ORDER_ERROR = -4
    ENGINE_ERROR = -5


@dataclass
class RowError:
    """One insert row that did not land (index into the caller's rows)."""
    index: int
    code: ReturnCode
    error: Optional[BaseException] = None


@dataclass
class Result:
    code: ReturnCode
    value: Any = None
    error: Optional[BaseException] = None
    row_errors: List[RowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.code == ReturnCode.OK

    def to_dict(self) -> dict:
        """JSON-friendly view (used by scripts and log lines)."""
        out = {"success": self.ok, "code": int(self.code), "code_name": self.code.name}
        if self.value is not None:
            out["value"] = self.value
        if self.error is not None:
            out["error"] = str(self.error)
        if self.row_errors:
            out["row_errors"] = [
                {"index": r.index, "code": r.code.name, "error": str(r.error) if r.error else None}
                for r in self.row_errors
            ]
        return out
