import abc
import logging
import sqlite3
from pathlib import Path
from typing import Optional, Union

from typing_extensions import Self

from voxelworld.chunk import ChunkData, Vec3, chunk_grid_pos
from voxelworld.common import KV_KEY_LENGTH, SQLITE_APP_ID, SQLITE_USER_VERSION, TRANSACTION_BATCH_SIZE
from voxelworld.errors import SchemaMismatchError, StorageError
from voxelworld.serialization import deserialize_chunk, serialize_chunk
from voxelworld.utils import autoslots

StrPath = Union[str, Path]


class StorageBackend(abc.ABC):
    """
    Persistence strategy for chunks and global key-value entries.

    Instances are owned by a single thread and do no locking of their own.
    Failures surface as StorageError subclasses.
    """

    @abc.abstractmethod
    def store_chunk(self, pos: Vec3, data: ChunkData) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def load_chunk(self, pos: Vec3) -> Optional[ChunkData]:
        raise NotImplementedError

    @abc.abstractmethod
    def get_global_kv(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    @abc.abstractmethod
    def set_global_kv(self, key: str, content: bytes) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def tick(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class NullStorageBackend(StorageBackend):
    def store_chunk(self, pos: Vec3, data: ChunkData) -> None:
        pass

    def load_chunk(self, pos: Vec3) -> Optional[ChunkData]:
        return None

    def get_global_kv(self, key: str) -> Optional[bytes]:
        return None

    def set_global_kv(self, key: str, content: bytes) -> None:
        pass

    def tick(self) -> None:
        pass

    def __repr__(self) -> str:
        return '<NullStorageBackend>'


@autoslots
class SqliteStorageBackend(StorageBackend):
    """
    Database layout:
        PRAGMA application_id -- SQLITE_APP_ID
        PRAGMA user_version   -- SQLITE_USER_VERSION
        chunks(x, y, z, content) -- x, y and z are chunk grid coordinates
                                    (position // CHUNKSIZE), content is a
                                    chunk blob (see voxelworld.serialization)
        kvstore(kkey, content)   -- named global blobs

    Chunk writes are batched: the first store while idle opens a transaction,
    which commits after TRANSACTION_BATCH_SIZE stores or on the next tick(),
    whichever comes first.
    """
    path: Path
    conn: Optional[sqlite3.Connection]
    writes_left: int

    def __init__(self, conn: sqlite3.Connection, path: Path, freshly_created: bool) -> None:
        self.conn = conn
        self.path = path
        self.writes_left = 0
        try:
            if freshly_created:
                self._init_db()
            else:
                self._expect_user_version()
        except BaseException:
            conn.close()
            self.conn = None
            raise

    @classmethod
    def open_or_create(cls, path: StrPath) -> Self:
        # sqlite3 can't tell us whether it just created the file, so try
        # without auto-creation first.
        path = Path(path).absolute()
        try:
            conn = sqlite3.connect(f'{path.as_uri()}?mode=rw', uri=True, isolation_level=None)
        except sqlite3.OperationalError:
            if path.exists():
                raise StorageError(f'Unable to open existing database {path}')
            logging.info('Creating new world database at %s', path)
            try:
                conn = sqlite3.connect(path, isolation_level=None)
            except sqlite3.Error as e:
                raise StorageError(f'Unable to create database {path}: {e}') from e
            return cls(conn, path, True)
        logging.debug('Opened existing world database at %s', path)
        return cls(conn, path, False)

    def _init_db(self) -> None:
        self._execute(f'PRAGMA application_id = {SQLITE_APP_ID}')
        self._execute(f'PRAGMA user_version = {SQLITE_USER_VERSION}')
        self._execute(
            f'''CREATE TABLE IF NOT EXISTS kvstore (
                kkey VARCHAR({KV_KEY_LENGTH}) PRIMARY KEY,
                content BLOB
            )'''
        )
        self._execute(
            '''CREATE TABLE IF NOT EXISTS chunks (
                x INTEGER,
                y INTEGER,
                z INTEGER,
                content BLOB,
                PRIMARY KEY(x, y, z)
            )'''
        )

    def _expect_user_version(self) -> None:
        try:
            app_id = self._query_one('PRAGMA application_id')
            user_version = self._query_one('PRAGMA user_version')
        except StorageError as e:
            raise SchemaMismatchError(f'{self.path} is not a world database') from e
        if app_id != SQLITE_APP_ID:
            raise SchemaMismatchError(f'Expected application id {SQLITE_APP_ID} but was {app_id} ({self.path})')
        if user_version != SQLITE_USER_VERSION:
            raise SchemaMismatchError(
                f'Expected user_version {SQLITE_USER_VERSION} but was {user_version} ({self.path})'
            )

    def _get_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise StorageError(f'Database {self.path} is closed')
        return self.conn

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        conn = self._get_conn()
        try:
            return conn.execute(sql, params)
        except sqlite3.Error as e:
            raise StorageError(f'Database error on {self.path}: {e}') from e

    def _query_one(self, sql: str, params: tuple = ()) -> Optional[object]:
        row = self._execute(sql, params).fetchone()
        if row is None:
            return None
        return row[0]

    @property
    def in_transaction(self) -> bool:
        return self.conn is not None and self.conn.in_transaction

    def _commit(self) -> None:
        if self.in_transaction:
            self._execute('COMMIT')
        self.writes_left = 0

    def store_chunk(self, pos: Vec3, data: ChunkData) -> None:
        x, y, z = chunk_grid_pos(pos)
        content = serialize_chunk(data)
        if not self.in_transaction:
            self._execute('BEGIN')
            self.writes_left = TRANSACTION_BATCH_SIZE
        self._execute(
            'INSERT OR REPLACE INTO chunks (x, y, z, content) VALUES (?, ?, ?, ?)',
            (x, y, z, content)
        )
        self.writes_left -= 1
        if self.writes_left <= 0:
            self._commit()

    def load_chunk(self, pos: Vec3) -> Optional[ChunkData]:
        x, y, z = chunk_grid_pos(pos)
        content = self._query_one('SELECT content FROM chunks WHERE x = ? AND y = ? AND z = ?', (x, y, z))
        if content is None:
            return None
        return deserialize_chunk(content) # type: ignore

    def get_global_kv(self, key: str) -> Optional[bytes]:
        self._check_key(key)
        return self._query_one('SELECT content FROM kvstore WHERE kkey = ?', (key,)) # type: ignore

    def set_global_kv(self, key: str, content: bytes) -> None:
        self._check_key(key)
        self._execute('INSERT OR REPLACE INTO kvstore (kkey, content) VALUES (?, ?)', (key, bytes(content)))

    def _check_key(self, key: str) -> None:
        if len(key) > KV_KEY_LENGTH:
            raise StorageError(f'Key {key!r} is longer than {KV_KEY_LENGTH} characters')

    def tick(self) -> None:
        self._commit()

    def close(self) -> None:
        if self.conn is None:
            return
        try:
            self._commit()
        finally:
            self.conn.close()
            self.conn = None
        logging.debug('Closed world database %s', self.path)

    def __repr__(self) -> str:
        return f'<SqliteStorageBackend path={str(self.path)!r} writes_left={self.writes_left}>'


def open_storage(path: Optional[StrPath]) -> StorageBackend:
    if path is None:
        logging.info('No world database configured, world will not be saved')
        return NullStorageBackend()
    try:
        return SqliteStorageBackend.open_or_create(path)
    except SchemaMismatchError:
        raise
    except (StorageError, OSError):
        logging.warning('Failed to open world database %s, world will not be saved', path, exc_info=True)
        return NullStorageBackend()
