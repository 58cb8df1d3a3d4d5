"""Table handle package initialization.

Single source of truth for the package version plus the public surface, so
code, tests, and scripts can import from one place.
"""

PACKAGE_VERSION = "0.1.0"  # Keep in sync with pyproject version.

from .codes import ReturnCode, Result, RowError  # noqa: E402
from .errors import TableHandleError, HandleClosedError, TableNotOpenError  # noqa: E402
from .sqlite_backend import MEMORY, BackendConfig, SQLiteBackend  # noqa: E402
from .table import TableHandle  # noqa: E402

__all__ = [
    "PACKAGE_VERSION",
    "MEMORY",
    "BackendConfig",
    "SQLiteBackend",
    "TableHandle",
    "ReturnCode",
    "Result",
    "RowError",
    "TableHandleError",
    "HandleClosedError",
    "TableNotOpenError",
]
