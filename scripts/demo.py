#!/usr/bin/env python3
"""End-to-end walkthrough of the table handle.

Creates an `item` table, inserts four rows, renames id=1, deletes id=3, then
prints a JSON summary of the ordered search and the row count. Every row is
also logged via print_all (stderr, JSON lines).

Usage:
  python scripts/demo.py                 # transient in-memory database
  python scripts/demo.py /path/to/db     # file database (created if missing)
"""
from __future__ import annotations
import sys, json, pathlib

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from tablehandle import MEMORY, TableHandle  # noqa: E402

COLUMNS = [
    'id INTEGER PRIMARY KEY',
    'name TEXT',
    'price INTEGER',
]
INSERT_COLUMNS = ['name', 'price']
INSERT_ROWS = [
    ['pen', 100],
    ['eraser', 50],
    ['measure', 400],
    ['pen4', 800],
]


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    location = argv[0] if argv else MEMORY
    with TableHandle(location) as conn:
        steps = [
            conn.open('item', COLUMNS),
            conn.insert(INSERT_COLUMNS, INSERT_ROWS),
            conn.update('name', 'hogeeeee', 'id=1'),
            conn.delete('id=3'),
        ]
        search = conn.search(['*'], [{'column': 'price', 'order': 'asc'}], None)
        count = conn.count()
        conn.print_all()
        failed = [r.to_dict() for r in (f.result() for f in steps + [search, count]) if not r.ok]
        out = {
            'success': not failed,
            'rows': search.result().value,
            'count': count.result().value,
        }
        if failed:
            out['failures'] = failed
    print(json.dumps(out, default=str))
    return 0 if not failed else 1

if __name__ == '__main__':
    raise SystemExit(main())
