from typing import Iterable

from voxelworld import blocks
from voxelworld.blocks import Block
from voxelworld.chunk import Vec3
from voxelworld.utils import autoslots

SchematicItem = tuple[Vec3, Block]


def aabb_min_max(items: Iterable[SchematicItem]) -> tuple[Vec3, Vec3]:
    offsets = [pos for (pos, _) in items]
    if not offsets:
        raise ValueError('Schematic must contain at least one block')
    return (
        (min(p[0] for p in offsets), min(p[1] for p in offsets), min(p[2] for p in offsets)),
        (max(p[0] for p in offsets), max(p[1] for p in offsets), max(p[2] for p in offsets)),
    )


@autoslots
class Schematic:
    """
    A read-only list of (offset, block) pairs, relative to the anchor the
    schematic is stamped at. Later items win where offsets repeat.
    """
    items: tuple[SchematicItem, ...]
    aabb_min: Vec3
    aabb_max: Vec3

    def __init__(self, items: Iterable[SchematicItem]) -> None:
        self.items = tuple(items)
        self.aabb_min, self.aabb_max = aabb_min_max(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        return f'<Schematic len={len(self.items)} aabb={self.aabb_min}..{self.aabb_max}>'


def tree_schematic() -> Schematic:
    items: list[SchematicItem] = []
    for x in range(-1, 2):
        for y in range(-1, 2):
            items.append(((x, y, 3), blocks.LEAVES))
            items.append(((x, y, 4), blocks.LEAVES))
            items.append(((x, y, 5), blocks.LEAVES))
    for z in range(4):
        items.append(((0, 0, z), blocks.TREE))
    return Schematic(items)


TREE_SCHEMATIC = tree_schematic()
