import pytest

from voxelworld import blocks
from voxelworld.chunk import (ChunkData, block_pos_in_chunk, chunk_grid_pos, chunk_pos_for_block, is_chunk_aligned,
                              iter_chunk_area)
from voxelworld.common import CHUNK_VOLUME, CHUNKSIZE
from voxelworld.errors import InvalidBlockError, TruncatedChunkError


@pytest.mark.parametrize(('pos', 'chunk', 'local'), [
    ((0, 0, 0), (0, 0, 0), (0, 0, 0)),
    ((31, 31, 31), (0, 0, 0), (31, 31, 31)),
    ((32, 0, 0), (32, 0, 0), (0, 0, 0)),
    ((-1, 0, 0), (-32, 0, 0), (31, 0, 0)),
    ((-32, -33, -1), (-32, -64, -32), (0, 31, 31)),
    ((0, -64, 65), (0, -64, 64), (0, 0, 1)),
])
def test_block_to_chunk_uses_flooring_division(pos, chunk, local):
    assert chunk_pos_for_block(pos) == chunk
    assert block_pos_in_chunk(pos) == local
    assert tuple(c + l for (c, l) in zip(chunk, local)) == pos


def test_chunk_grid_pos():
    assert chunk_grid_pos((0, 0, 0)) == (0, 0, 0)
    assert chunk_grid_pos((32, -32, 64)) == (1, -1, 2)
    assert chunk_grid_pos((-1, -1, -1)) == (-1, -1, -1)


def test_is_chunk_aligned():
    assert is_chunk_aligned((0, -32, 64))
    assert not is_chunk_aligned((1, 0, 0))
    assert not is_chunk_aligned((0, 0, -31))


def test_iter_chunk_area():
    assert list(iter_chunk_area((0, 0, 0), (0, 0, 0))) == [(0, 0, 0)]
    area = list(iter_chunk_area((0, 0, 0), (32, 0, 0), padding=1))
    assert len(area) == 4 * 3 * 3
    assert (-32, -32, -32) in area
    assert (64, 32, 32) in area
    assert (96, 0, 0) not in area


def test_chunk_defaults_to_air():
    data = ChunkData.fully_air()
    assert len(data.blocks) == CHUNK_VOLUME
    assert data.is_empty()
    assert data.get_block(5, 6, 7) is blocks.AIR


def test_block_layout():
    data = ChunkData()
    data.set_block(1, 2, 3, blocks.STONE)
    assert data.blocks[1 * CHUNKSIZE * CHUNKSIZE + 2 * CHUNKSIZE + 3] == blocks.STONE.id
    assert data.get_block(1, 2, 3) is blocks.STONE
    assert data.count(blocks.STONE) == 1


def test_fill_column():
    data = ChunkData()
    data.fill_column(4, 5, 0, 10, blocks.GROUND)
    data.fill_column(4, 5, 10, CHUNKSIZE, blocks.WATER)
    data.fill_column(4, 5, 3, 3, blocks.COAL)
    assert [data.get_block(4, 5, z) for z in range(CHUNKSIZE)] == [blocks.GROUND] * 10 + [blocks.WATER] * 22
    assert data.get_block(4, 6, 0) is blocks.AIR


@pytest.mark.parametrize('pos', [(-1, 0, 0), (0, CHUNKSIZE, 0), (0, 0, 40)])
def test_out_of_chunk_positions_rejected(pos):
    with pytest.raises(IndexError):
        ChunkData().get_block(*pos)


def test_from_bytes_validates():
    with pytest.raises(TruncatedChunkError):
        ChunkData.from_bytes(bytes(CHUNK_VOLUME - 1))
    raw = bytearray(CHUNK_VOLUME)
    raw[1234] = 42
    with pytest.raises(InvalidBlockError) as info:
        ChunkData.from_bytes(bytes(raw))
    assert info.value.offset == 1234


def test_copy_is_independent():
    data = ChunkData()
    copy = data.copy()
    copy.set_block(0, 0, 0, blocks.SAND)
    assert data != copy
    assert data.get_block(0, 0, 0) is blocks.AIR
