from typing import TYPE_CHECKING

from voxelworld.world_gen.phase import AbstractPhase
from voxelworld.world_gen.schematic import TREE_SCHEMATIC, Schematic

if TYPE_CHECKING:
    from voxelworld.world_gen.core import MapChunk, MapgenMap


class TreePhase(AbstractPhase):
    """
    Phase two: stamps a tree at every spawn point phase one left behind.
    Trees may reach into neighbouring chunks.
    """
    schematic: Schematic

    def __init__(self, generator: 'MapgenMap', schematic: Schematic = TREE_SCHEMATIC) -> None:
        super().__init__(generator)
        self.schematic = schematic

    def generate_chunk(self, chunk: 'MapChunk') -> None:
        spawn_points, chunk.tree_spawn_points = chunk.tree_spawn_points, []
        for pos in spawn_points:
            self.generator.stamp_schematic(pos, self.schematic)
