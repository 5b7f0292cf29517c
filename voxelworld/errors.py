from typing import Optional


class StorageError(Exception):
    pass


class SchemaMismatchError(StorageError):
    pass


class ChunkFormatError(StorageError):
    pass


class UnsupportedFormatVersionError(ChunkFormatError):
    version: int

    def __init__(self, version: int) -> None:
        super().__init__(f'Unsupported chunk format version {version}')
        self.version = version


class TruncatedChunkError(ChunkFormatError):
    pass


class InvalidBlockError(ChunkFormatError):
    code: int
    offset: Optional[int]

    def __init__(self, code: int, offset: Optional[int] = None) -> None:
        if offset is None:
            super().__init__(f'Invalid block code {code}')
        else:
            super().__init__(f'Invalid block code {code} at offset {offset}')
        self.code = code
        self.offset = offset
