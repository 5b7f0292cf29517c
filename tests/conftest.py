from pathlib import Path
from typing import Iterator

import pytest

from voxelworld.storage import SqliteStorageBackend
from voxelworld.world_gen.core import MapgenMap

SEED = 42


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / 'world.sqlite'


@pytest.fixture
def sqlite_backend(db_path: Path) -> Iterator[SqliteStorageBackend]:
    backend = SqliteStorageBackend.open_or_create(db_path)
    yield backend
    backend.close()


@pytest.fixture
def mapgen() -> MapgenMap:
    return MapgenMap(SEED)
