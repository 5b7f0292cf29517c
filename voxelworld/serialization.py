"""
Chunk blob format:
    0     -- The format version, stored as a UINT1. Only version 0 exists.
    1:    -- zlib stream. Decompresses to exactly CHUNKSIZE**3 bytes, each a
             block code (see voxelworld.blocks).
"""
import zlib

from voxelworld.chunk import ChunkData
from voxelworld.common import CHUNK_VOLUME, FORMAT_VERSION, ZLIB_LEVEL
from voxelworld.errors import TruncatedChunkError, UnsupportedFormatVersionError


def serialize_chunk(data: ChunkData) -> bytes:
    return bytes((FORMAT_VERSION,)) + zlib.compress(data.to_bytes(), ZLIB_LEVEL)


def deserialize_chunk(blob: bytes) -> ChunkData:
    if not blob:
        raise TruncatedChunkError('Empty chunk blob')
    version = blob[0]
    if version != FORMAT_VERSION:
        raise UnsupportedFormatVersionError(version)
    decomp = zlib.decompressobj()
    try:
        raw = decomp.decompress(blob[1:], CHUNK_VOLUME + 1)
    except zlib.error as e:
        raise TruncatedChunkError(f'Corrupt chunk payload: {e}') from e
    if not decomp.eof:
        raise TruncatedChunkError('Chunk payload is incomplete or too large')
    return ChunkData.from_bytes(raw)
