import logging
import random
import time
from pathlib import Path
from typing import Callable, Optional, Union

from typing_extensions import Self

from voxelworld.blocks import Block
from voxelworld.chunk import ChunkData, Vec3, block_pos_in_chunk, chunk_pos_for_block, iter_chunk_area
from voxelworld.common import SEED_KEY, WORLD_FLOOR
from voxelworld.storage import NullStorageBackend, StorageBackend, open_storage
from voxelworld.utils import autoslots
from voxelworld.world_gen.core import MapgenMap

ChunkCallback = Callable[[Vec3, ChunkData], object]


def encode_seed(seed: int) -> bytes:
    return seed.to_bytes(4, 'little', signed=False)


def decode_seed(raw: bytes) -> int:
    if len(raw) != 4:
        raise ValueError(f'Stored seed has {len(raw)} bytes, expected 4')
    return int.from_bytes(raw, 'little', signed=False)


@autoslots
class World:
    """
    Chunk access backed by storage first and the generator second.

    Whatever storage has wins. The generator only fills in chunks storage
    doesn't know about, and every chunk it fills in gets stored.
    """
    storage: StorageBackend
    generator: MapgenMap
    loaded_chunks: dict[Vec3, ChunkData]

    def __init__(self, storage: StorageBackend, seed: int, floor: int = WORLD_FLOOR) -> None:
        self.storage = storage
        self.generator = MapgenMap(seed, floor)
        self.loaded_chunks = {}

    @classmethod
    def open(cls, path: Optional[Union[str, Path]], seed: Optional[int] = None) -> Self:
        storage = open_storage(path)
        stored_seed = storage.get_global_kv(SEED_KEY)
        if stored_seed is not None:
            world_seed = decode_seed(stored_seed)
            if seed is not None and seed & 0xffffffff != world_seed:
                logging.warning('Ignoring seed %i, world was created with seed %i', seed, world_seed)
        else:
            world_seed = random.getrandbits(32) if seed is None else seed & 0xffffffff
            storage.set_global_kv(SEED_KEY, encode_seed(world_seed))
        logging.info('Using world seed %i', world_seed)
        return cls(storage, world_seed)

    @property
    def seed(self) -> int:
        return self.generator.seed

    @property
    def persistent(self) -> bool:
        return not isinstance(self.storage, NullStorageBackend)

    def load_area(self,
        pos_min: Vec3,
        pos_max: Vec3,
        callback: Optional[ChunkCallback] = None
    ) -> dict[Vec3, ChunkData]:
        result: dict[Vec3, ChunkData] = {}
        missing: set[Vec3] = set()
        for pos in iter_chunk_area(pos_min, pos_max):
            data = self.loaded_chunks.get(pos)
            if data is None:
                data = self.storage.load_chunk(pos)
                if data is None:
                    missing.add(pos)
                    continue
                self.loaded_chunks[pos] = data
                if callback is not None:
                    callback(pos, data)
            result[pos] = data
        if not missing:
            return result

        def on_stable_chunk(pos: Vec3, data: ChunkData) -> None:
            if pos not in missing:
                return
            data = data.copy()
            self.storage.store_chunk(pos, data)
            self.loaded_chunks[pos] = data
            result[pos] = data
            if callback is not None:
                callback(pos, data)

        start = time.perf_counter()
        self.generator.generate_area(pos_min, pos_max, on_stable_chunk)
        # Chunks the generator handed out before but that were never stored
        for pos in missing.difference(result):
            on_stable_chunk(pos, self.generator.generate_chunk(pos))
        end = time.perf_counter()
        logging.debug('Filled %i missing chunk(s) in %f seconds', len(missing), end - start)
        return result

    def get_chunk(self, pos: Vec3) -> ChunkData:
        pos = chunk_pos_for_block(pos)
        return self.load_area(pos, pos)[pos]

    def get_block(self, pos: Vec3) -> Block:
        return self.get_chunk(pos).get_block(*block_pos_in_chunk(pos))

    def set_block(self, pos: Vec3, block: Block) -> None:
        chunk_pos = chunk_pos_for_block(pos)
        data = self.get_chunk(chunk_pos)
        data.set_block(*block_pos_in_chunk(pos), block)
        self.storage.store_chunk(chunk_pos, data)

    def unload_chunk(self, pos: Vec3) -> bool:
        return self.loaded_chunks.pop(chunk_pos_for_block(pos), None) is not None

    def tick(self) -> None:
        self.storage.tick()

    def close(self) -> None:
        self.storage.close()

    def __repr__(self) -> str:
        return f'<World seed={self.seed} storage={self.storage!r} len(loaded_chunks)={len(self.loaded_chunks)}>'
