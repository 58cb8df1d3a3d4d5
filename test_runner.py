"""Minimal offline test runner (stdlib only) for core smoke checks.

Usage:
  python test_runner.py                 # runs all checks

Skips full pytest suite; intended as a fallback when pip/pytest unavailable.
"""
from __future__ import annotations
import json, os, sys, tempfile, traceback
from pathlib import Path

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from tablehandle import MEMORY, ReturnCode, TableHandle  # type: ignore

DB_PATH = os.environ.get("TABLEHANDLE_DB")


def check_crud():
    with TableHandle(DB_PATH or MEMORY) as h:
        h.open("smoke", ["id INTEGER PRIMARY KEY", "name TEXT"])
        h.delete("1=1")
        h.insert(["name"], [["a"], ["b"]])
        h.update("name", "c", "id=(SELECT min(id) FROM smoke)")
        rows = h.search(["name"], [("name", "asc")]).result()
        assert rows.ok, rows.to_dict()
        assert [r["name"] for r in rows.value] == ["b", "c"], rows.value
        return {"rows": rows.value, "count": h.count().result().value}


def check_validation():
    with TableHandle(MEMORY) as h:
        codes = {
            "open_empty": h.open("t", []).result().code,
        }
        h.open("t", ["id INTEGER"])
        codes["search_bad_orders"] = h.search(["id"], {"column": "id"}).result().code
        assert codes == {"open_empty": ReturnCode.COLUMN_ERROR, "search_bad_orders": ReturnCode.ORDER_ERROR}
        return {k: v.name for k, v in codes.items()}


def check_health():
    with tempfile.TemporaryDirectory() as d:
        with TableHandle(Path(d) / "health.db") as h:
            health = h.health().result()
    assert health["ok"], f"Health not ok: {health}"
    for k in ["journal_mode", "foreign_keys", "cache_size"]:
        assert k in health, f"Missing key {k} in health"
    return health


def main():
    results = {}
    failures = 0
    for name, fn in [("crud", check_crud), ("validation", check_validation), ("health_check", check_health)]:
        try:
            results[name] = fn()
        except Exception:
            failures += 1
            results[name] = {"error": traceback.format_exc()}
    print(json.dumps({"failures": failures, "results": results}, indent=2))
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
