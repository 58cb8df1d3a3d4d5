import sqlite3, pytest
from pathlib import Path
from tablehandle import MEMORY, TableHandle

ITEM_COLUMNS = ['id INTEGER PRIMARY KEY', 'name TEXT', 'price INTEGER']
ITEM_ROWS = [['pen', 100], ['eraser', 50], ['measure', 400], ['pen4', 800]]

@pytest.fixture()
def handle():
    h = TableHandle(MEMORY)
    yield h
    h.close()

@pytest.fixture()
def items(handle):
    """Handle with the `item` table created and the four sample rows inserted."""
    assert handle.open('item', ITEM_COLUMNS).result().ok
    assert handle.insert(['name', 'price'], ITEM_ROWS).result().ok
    return handle

@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / 'test.db'

@pytest.fixture()
def read_rows(db_path):
    """Read a table straight through sqlite3, bypassing the handle."""
    def _read(table='item'):
        conn = sqlite3.connect(db_path)
        try:
            return conn.execute(f'SELECT * FROM {table} ORDER BY id').fetchall()
        finally:
            conn.close()
    return _read
