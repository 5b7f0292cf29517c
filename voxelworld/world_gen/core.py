import enum
import logging
import random
import time
from typing import Callable, Optional

from voxelworld.blocks import Block
from voxelworld.chunk import (ChunkData, Vec3, block_pos_in_chunk, chunk_pos_for_block, is_chunk_aligned,
                              iter_chunk_area, vec_add)
from voxelworld.common import PHASE_ONE_PADDING, PHASE_TWO_PADDING, WORLD_FLOOR
from voxelworld.utils import autoslots
from voxelworld.world_gen.phases.terrain import TerrainPhase
from voxelworld.world_gen.phases.trees import TreePhase
from voxelworld.world_gen.schematic import Schematic

StableChunkCallback = Callable[[Vec3, ChunkData], object]


class GenerationPhase(enum.IntEnum):
    # Basic noise, elevation etc
    PHASE_ONE = 0
    # Trees and other features that may reach into neighbours are done
    PHASE_TWO = 1
    # Already handed out by generate_area
    DONE = 2


@autoslots
class MapChunk:
    pos: Vec3
    data: ChunkData
    generation_phase: GenerationPhase
    tree_spawn_points: list[Vec3]

    def __init__(self, pos: Vec3) -> None:
        self.pos = pos
        self.data = ChunkData.fully_air()
        self.generation_phase = GenerationPhase.PHASE_ONE
        self.tree_spawn_points = []

    def __repr__(self) -> str:
        return f'<MapChunk pos={self.pos} phase={self.generation_phase.name} spawns={len(self.tree_spawn_points)}>'


@autoslots
class MapgenMap:
    """
    Lazily generated, in-memory world.

    Chunks are produced in two phases. Phase one only depends on the seed and
    the chunk position. Phase two stamps structures, which can write into
    neighbouring chunks, so a chunk is only final once every neighbour went
    through phase two as well. generate_area takes care of that by padding
    the requested area.

    Generated chunks are kept for the lifetime of the map.
    """
    seed: int
    floor: int
    chunks: dict[Vec3, MapChunk]
    terrain: TerrainPhase
    trees: TreePhase

    def __init__(self, seed: int, floor: int = WORLD_FLOOR) -> None:
        self.seed = seed & 0xffffffff
        self.floor = floor
        self.chunks = {}
        self.terrain = TerrainPhase(self)
        self.trees = TreePhase(self)

    def chunk_random(self, pos: Vec3) -> random.Random:
        return random.Random(f'{self.seed}:{pos[0]}:{pos[1]}:{pos[2]}')

    def get_chunk(self, pos: Vec3) -> Optional[MapChunk]:
        return self.chunks.get(pos)

    def gen_chunk_phase_one(self, pos: Vec3) -> MapChunk:
        chunk = self.chunks.get(pos)
        if chunk is None:
            if not is_chunk_aligned(pos):
                raise ValueError(f'{pos} is not a chunk origin')
            chunk = MapChunk(pos)
            self.terrain.generate_chunk(chunk)
            self.chunks[pos] = chunk
        return chunk

    def gen_chunk_phase_two(self, pos: Vec3) -> None:
        chunk = self.gen_chunk_phase_one(pos)
        if chunk.generation_phase >= GenerationPhase.PHASE_TWO:
            return
        chunk.generation_phase = GenerationPhase.PHASE_TWO
        self.trees.generate_chunk(chunk)

    def get_block(self, pos: Vec3) -> Optional[Block]:
        chunk = self.chunks.get(chunk_pos_for_block(pos))
        if chunk is None:
            return None
        return chunk.data.get_block(*block_pos_in_chunk(pos))

    def stamp_schematic(self, anchor: Vec3, schematic: Schematic) -> None:
        """
        Writes the schematic at anchor, reaching into (and if needed
        generating) whatever chunks it overlaps. An incoming block never
        replaces one of higher stamp priority, which keeps the result the
        same whichever of two overlapping structures gets stamped first.
        """
        for (offset, block) in schematic.items:
            pos = vec_add(anchor, offset)
            chunk = self.gen_chunk_phase_one(chunk_pos_for_block(pos))
            x, y, z = block_pos_in_chunk(pos)
            if chunk.data.get_block(x, y, z).stamp_priority <= block.stamp_priority:
                chunk.data.set_block(x, y, z, block)

    def generate_area(self, pos_min: Vec3, pos_max: Vec3, on_stable_chunk: StableChunkCallback) -> int:
        """
        Brings every chunk between pos_min and pos_max (inclusive, block
        coordinates of chunk origins) to its final state and passes the ones
        not handed out before to on_stable_chunk. Returns how many were.
        """
        if all(
            (chunk := self.chunks.get(pos)) is not None and chunk.generation_phase == GenerationPhase.DONE
            for pos in iter_chunk_area(pos_min, pos_max)
        ):
            return 0
        start = time.perf_counter()
        before = len(self.chunks)
        self._stabilize(pos_min, pos_max)
        delivered = 0
        for pos in iter_chunk_area(pos_min, pos_max):
            chunk = self.chunks[pos]
            if chunk.generation_phase != GenerationPhase.DONE:
                # Mark first, the callback may request this area again
                chunk.generation_phase = GenerationPhase.DONE
                delivered += 1
                on_stable_chunk(pos, chunk.data)
        end = time.perf_counter()
        logging.debug(
            'Generated area %s..%s (%i new chunk(s), %i delivered) in %f seconds',
            pos_min, pos_max, len(self.chunks) - before, delivered, end - start
        )
        return delivered

    def _stabilize(self, pos_min: Vec3, pos_max: Vec3) -> None:
        for pos in iter_chunk_area(pos_min, pos_max, PHASE_ONE_PADDING):
            self.gen_chunk_phase_one(pos)
        for pos in iter_chunk_area(pos_min, pos_max, PHASE_TWO_PADDING):
            self.gen_chunk_phase_two(pos)

    def generate_chunk(self, pos: Vec3) -> ChunkData:
        # Unlike generate_area this does not count as handing the chunk out
        pos = chunk_pos_for_block(pos)
        self._stabilize(pos, pos)
        return self.chunks[pos].data

    def __repr__(self) -> str:
        return f'<MapgenMap seed={self.seed} floor={self.floor} len(chunks)={len(self.chunks)}>'
