import random
import zlib

import pytest

from voxelworld import blocks
from voxelworld.blocks import ALL_BLOCKS
from voxelworld.chunk import ChunkData
from voxelworld.common import CHUNK_VOLUME
from voxelworld.errors import ChunkFormatError, InvalidBlockError, TruncatedChunkError, UnsupportedFormatVersionError
from voxelworld.serialization import deserialize_chunk, serialize_chunk


def random_chunk(seed: int) -> ChunkData:
    rand = random.Random(seed)
    return ChunkData(bytearray(rand.choice(ALL_BLOCKS).id for _ in range(CHUNK_VOLUME)))


def test_round_trip_random_chunk():
    data = random_chunk(1)
    assert deserialize_chunk(serialize_chunk(data)) == data


def test_round_trip_air_chunk():
    blob = serialize_chunk(ChunkData())
    assert blob[0] == 0
    assert len(blob) < 200
    assert deserialize_chunk(blob).is_empty()


def test_envelope_layout():
    data = ChunkData()
    data.set_block(0, 0, 0, blocks.COAL)
    blob = serialize_chunk(data)
    assert blob[0] == 0
    assert zlib.decompress(blob[1:]) == data.to_bytes()


@pytest.mark.parametrize('version', range(1, 256))
def test_unknown_version_rejected(version):
    blob = bytearray(serialize_chunk(ChunkData()))
    blob[0] = version
    with pytest.raises(UnsupportedFormatVersionError) as info:
        deserialize_chunk(bytes(blob))
    assert info.value.version == version


def test_invalid_block_code_rejected():
    raw = bytearray(CHUNK_VOLUME)
    raw[-1] = 10
    blob = b'\0' + zlib.compress(bytes(raw))
    with pytest.raises(InvalidBlockError) as info:
        deserialize_chunk(blob)
    assert info.value.code == 10
    assert info.value.offset == CHUNK_VOLUME - 1


@pytest.mark.parametrize('blob', [
    b'',
    b'\0',
    b'\0not zlib at all',
    serialize_chunk(random_chunk(2))[:-20],
    b'\0' + zlib.compress(bytes(CHUNK_VOLUME - 1)),
    b'\0' + zlib.compress(bytes(CHUNK_VOLUME + 1)),
])
def test_truncated_or_corrupt_payload_rejected(blob):
    with pytest.raises(TruncatedChunkError):
        deserialize_chunk(blob)


def test_format_errors_share_a_base():
    assert issubclass(UnsupportedFormatVersionError, ChunkFormatError)
    assert issubclass(TruncatedChunkError, ChunkFormatError)
    assert issubclass(InvalidBlockError, ChunkFormatError)
