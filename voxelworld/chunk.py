from typing import Iterator, Optional

from typing_extensions import Self

from voxelworld import blocks
from voxelworld.blocks import Block, code_to_block, validate_codes
from voxelworld.common import CHUNK_VOLUME, CHUNKSIZE
from voxelworld.errors import TruncatedChunkError
from voxelworld.utils import autoslots

Vec3 = tuple[int, int, int]


def vec_add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def chunk_pos_for_block(pos: Vec3) -> Vec3:
    # Flooring division: block -1 lives in the chunk at -CHUNKSIZE
    return (
        pos[0] // CHUNKSIZE * CHUNKSIZE,
        pos[1] // CHUNKSIZE * CHUNKSIZE,
        pos[2] // CHUNKSIZE * CHUNKSIZE,
    )


def block_pos_in_chunk(pos: Vec3) -> Vec3:
    return (pos[0] % CHUNKSIZE, pos[1] % CHUNKSIZE, pos[2] % CHUNKSIZE)


def chunk_grid_pos(pos: Vec3) -> Vec3:
    return (pos[0] // CHUNKSIZE, pos[1] // CHUNKSIZE, pos[2] // CHUNKSIZE)


def is_chunk_aligned(pos: Vec3) -> bool:
    return all(v % CHUNKSIZE == 0 for v in pos)


def iter_chunk_area(pos_min: Vec3, pos_max: Vec3, padding: int = 0) -> Iterator[Vec3]:
    """
    Yields the origin of every chunk between the chunks owning pos_min and
    pos_max (both inclusive), grown by padding chunks on every side.
    """
    gmin = chunk_grid_pos(pos_min)
    gmax = chunk_grid_pos(pos_max)
    for x in range(gmin[0] - padding, gmax[0] + padding + 1):
        for y in range(gmin[1] - padding, gmax[1] + padding + 1):
            for z in range(gmin[2] - padding, gmax[2] + padding + 1):
                yield (x * CHUNKSIZE, y * CHUNKSIZE, z * CHUNKSIZE)


@autoslots
class ChunkData:
    """
    Block storage for a single chunk.

    Format:
        CHUNKSIZE**3 bytes, one block code per block. The block at local
        (x, y, z) lives at `x * CHUNKSIZE**2 + y * CHUNKSIZE + z`, so every
        vertical column is a contiguous run of CHUNKSIZE bytes.
    """
    blocks: bytearray

    def __init__(self, raw: Optional[bytearray] = None) -> None:
        if raw is None:
            raw = bytearray(CHUNK_VOLUME)
        self.blocks = raw

    @classmethod
    def fully_air(cls) -> Self:
        return cls()

    @classmethod
    def from_bytes(cls, raw: bytes) -> Self:
        if len(raw) != CHUNK_VOLUME:
            raise TruncatedChunkError(f'Expected {CHUNK_VOLUME} block codes, got {len(raw)}')
        validate_codes(raw)
        return cls(bytearray(raw))

    def to_bytes(self) -> bytes:
        return bytes(self.blocks)

    def copy(self) -> 'ChunkData':
        return ChunkData(bytearray(self.blocks))

    @staticmethod
    def _index(x: int, y: int, z: int) -> int:
        if not (0 <= x < CHUNKSIZE and 0 <= y < CHUNKSIZE and 0 <= z < CHUNKSIZE):
            raise IndexError(f'Block position ({x}, {y}, {z}) is outside the chunk')
        return (x * CHUNKSIZE + y) * CHUNKSIZE + z

    def get_block(self, x: int, y: int, z: int) -> Block:
        return code_to_block(self.blocks[self._index(x, y, z)])

    def set_block(self, x: int, y: int, z: int, block: Block) -> None:
        self.blocks[self._index(x, y, z)] = block.id

    def fill_column(self, x: int, y: int, start: int, end: int, block: Block) -> None:
        if start >= end:
            return
        base = self._index(x, y, 0)
        self.blocks[base + start:base + end] = bytes((block.id,)) * (end - start)

    def is_empty(self) -> bool:
        return not any(self.blocks)

    def count(self, block: Block) -> int:
        return self.blocks.count(block.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChunkData):
            return NotImplemented
        return self.blocks == other.blocks

    def __repr__(self) -> str:
        non_air = CHUNK_VOLUME - self.count(blocks.AIR)
        return f'<ChunkData non_air={non_air}>'
