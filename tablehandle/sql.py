"""Command builders for each table operation.

Pure string assembly, no validation and no I/O: the table handle checks its
arguments first and only then asks for a command. Values always go through
``?`` placeholders; table names, column fragments, and condition text are
caller-trusted and spliced in verbatim.
"""
from __future__ import annotations
from typing import Sequence, Tuple


def create_table(table: str, columns: Sequence[str]) -> str:
    return f"CREATE TABLE IF NOT EXISTS {table}({', '.join(columns)})"


def count(table: str) -> str:
    return f"SELECT count(*) FROM {table}"


def insert(table: str, columns: Sequence[str], arity: int) -> str:
    placeholders = ", ".join("?" * arity)
    return f"INSERT INTO {table}({', '.join(columns)}) VALUES({placeholders})"


def update(table: str, column: str, condition: str) -> str:
    return f"UPDATE {table} SET {column}=? WHERE {condition}"


def delete(table: str, condition: str) -> str:
    return f"DELETE FROM {table} WHERE {condition}"


def select(table: str, columns: Sequence[str], orders: Sequence[Tuple[str, str]] = (),
           condition: str | None = None) -> str:
    """SELECT with optional WHERE then ORDER BY (orders are normalized (column, DIR) pairs)."""
    cmd = f"SELECT {', '.join(columns)} FROM {table}"
    if condition is not None:
        cmd += f" WHERE {condition}"
    if orders:
        cmd += " ORDER BY " + ", ".join(f"{col} {direction}" for col, direction in orders)
    return cmd
