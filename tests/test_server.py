import logging
import sqlite3

from voxelworld.server.main import PregenServer
from voxelworld.utils import spiral_loop_gen


def test_spiral_starts_at_origin():
    cells = list(spiral_loop_gen(3, 3, lambda x, y: (x, y)))
    assert cells[0] == (0, 0)
    assert sorted(cells) == [(x, y) for x in range(-1, 2) for y in range(-1, 2)]


def test_pregenerates_column(db_path):
    server = PregenServer(db_path, seed=42, radius=0)
    assert list(server.pending_columns) == [(0, 0)]
    assert server.start() == 0
    assert server.world is None
    assert server.chunks_generated == 3
    conn = sqlite3.connect(db_path)
    try:
        rows = sorted(conn.execute('SELECT x, y, z FROM chunks').fetchall())
        seed = conn.execute("SELECT content FROM kvstore WHERE kkey = 'seed'").fetchone()[0]
    finally:
        conn.close()
    assert rows == [(0, 0, -1), (0, 0, 0), (0, 0, 1)]
    assert int.from_bytes(seed, 'little') == 42


def test_ephemeral_run(caplog):
    server = PregenServer(None, seed=1, radius=0)
    with caplog.at_level(logging.WARNING):
        assert server.start() == 0
    assert server.chunks_generated == 3
    assert not server.pending_columns
    assert "World is not persistent" in caplog.text


def test_incompatible_database_fails(db_path):
    conn = sqlite3.connect(db_path)
    conn.execute('PRAGMA application_id = 99')
    conn.close()
    server = PregenServer(db_path, seed=42, radius=0)
    assert server.start() == 1
    # The foreign database is left alone
    conn = sqlite3.connect(db_path)
    try:
        assert conn.execute('PRAGMA application_id').fetchone()[0] == 99
    finally:
        conn.close()


def test_spiral_covers_radius():
    server = PregenServer(None, seed=42, radius=1)
    assert len(server.pending_columns) == 9
    assert server.pending_columns[0] == (0, 0)
    assert set(server.pending_columns) == {(x, y) for x in range(-1, 2) for y in range(-1, 2)}
