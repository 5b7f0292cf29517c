from typing import Optional

from typing_extensions import Self

from voxelworld.errors import InvalidBlockError

BLOCKS: list[Optional['Block']] = [None] * 256


class Block:
    """
    A voxel kind. The id doubles as the persisted block code, so existing ids
    must never change; new kinds only get appended.
    """
    id: int
    name: str
    stamp_priority: int = 0

    def __init__(self, id: int, name: str) -> None:
        if BLOCKS[id] is not None:
            raise ValueError(f'Block id {id} already taken by {BLOCKS[id]!r}')
        self.id = id
        self.name = name
        BLOCKS[id] = self

    def set_stamp_priority(self, priority: int) -> Self:
        self.stamp_priority = priority
        return self

    def __repr__(self) -> str:
        return f'<Block {self.name} id={self.id}>'


def block_to_code(block: Block) -> int:
    return block.id


def code_to_block(code: int) -> Block:
    block = BLOCKS[code] if 0 <= code < len(BLOCKS) else None
    if block is None:
        raise InvalidBlockError(code)
    return block


def validate_codes(raw: bytes) -> None:
    if not raw or max(raw) <= MAX_BLOCK_CODE:
        return
    for (offset, code) in enumerate(raw):
        if code > MAX_BLOCK_CODE:
            raise InvalidBlockError(code, offset)


AIR    = Block(0, 'air')
WATER  = Block(1, 'water')
SAND   = Block(2, 'sand')
GROUND = Block(3, 'ground')
WOOD   = Block(4, 'wood')
STONE  = Block(5, 'stone')
LEAVES = Block(6, 'leaves')
TREE   = Block(7, 'tree').set_stamp_priority(1)
CACTUS = Block(8, 'cactus')
COAL   = Block(9, 'coal')

ALL_BLOCKS: tuple[Block, ...] = tuple(b for b in BLOCKS if b is not None)
MAX_BLOCK_CODE = max(b.id for b in ALL_BLOCKS)
