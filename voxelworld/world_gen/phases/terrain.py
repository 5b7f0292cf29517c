import random
from typing import TYPE_CHECKING, NamedTuple

import numpy as np
from opensimplex import OpenSimplex

from voxelworld import blocks
from voxelworld.common import CHUNKSIZE
from voxelworld.world_gen.phase import ColumnCachedPhase

if TYPE_CHECKING:
    from voxelworld.world_gen.core import MapChunk, MapgenMap

BASE_FREQ = 0.02356
BASE_SCALE = 8.3
MACRO_FREQ = 0.0018671
MACRO_SCALE = 23.27713
REGIONAL_FREQ = 0.00043571
REGIONAL_SCALE = 137.479131

FOREST_FREQ = 0.018971
TREE_DENSITY = 0.3
TREE_CHANCE = 0.1

SEEDER_OFFSET = 24


class TerrainColumn(NamedTuple):
    # Both indexed [x][y] in chunk-local coordinates
    elevation: list[list[int]]
    forest_density: list[list[float]]


class TerrainPhase(ColumnCachedPhase[TerrainColumn]):
    """
    Phase one: elevation from three noise octaves, stone and water below the
    world floor, ground above it, and tree spawn points in forests.
    """
    noise: OpenSimplex
    macro_noise: OpenSimplex
    regional_noise: OpenSimplex
    forest_noise: OpenSimplex

    def __init__(self, generator: 'MapgenMap') -> None:
        super().__init__(generator)
        seeder = random.Random(generator.seed + SEEDER_OFFSET)
        self.noise = OpenSimplex(seeder.getrandbits(32))
        self.macro_noise = OpenSimplex(seeder.getrandbits(32))
        self.regional_noise = OpenSimplex(seeder.getrandbits(32))
        self.forest_noise = OpenSimplex(seeder.getrandbits(32))

    @staticmethod
    def _sample(simplex: OpenSimplex, x: int, y: int, freq: float) -> np.ndarray:
        xs = (x + np.arange(CHUNKSIZE, dtype=np.float64)) * freq
        ys = (y + np.arange(CHUNKSIZE, dtype=np.float64)) * freq
        # noise2array returns [y][x]
        return simplex.noise2array(xs, ys).T

    def _get_column(self, x: int, y: int) -> TerrainColumn:
        elev = (
            self._sample(self.noise, x, y, BASE_FREQ) * BASE_SCALE
            + self._sample(self.macro_noise, x, y, MACRO_FREQ) * MACRO_SCALE
            + self._sample(self.regional_noise, x, y, REGIONAL_FREQ) * REGIONAL_SCALE
        )
        return TerrainColumn(
            elev.astype(np.int64).tolist(),
            self._sample(self.forest_noise, x, y, FOREST_FREQ).tolist(),
        )

    def get_elevation(self, x: int, y: int) -> int:
        cx = x // CHUNKSIZE * CHUNKSIZE
        cy = y // CHUNKSIZE * CHUNKSIZE
        return self.get_column(cx, cy).elevation[x - cx][y - cy]

    def generate_chunk(self, chunk: 'MapChunk') -> None:
        px, py, pz = chunk.pos
        floor = self.generator.floor
        column = self.get_column(px, py)
        rand = self.generator.chunk_random(chunk.pos)
        data = chunk.data
        for x in range(CHUNKSIZE):
            elevation = column.elevation[x]
            density = column.forest_density[x]
            for y in range(CHUNKSIZE):
                el = max(min(elevation[y] - pz, CHUNKSIZE), 0)
                if pz < floor:
                    data.fill_column(x, y, 0, el, blocks.STONE)
                    data.fill_column(x, y, el, CHUNKSIZE, blocks.WATER)
                    continue
                data.fill_column(x, y, 0, el, blocks.GROUND)
                if pz == floor and el <= 0:
                    data.set_block(x, y, 0, blocks.WATER)
                if 0 < el < CHUNKSIZE and density[y] > 1.0 - TREE_DENSITY:
                    if rand.random() > 1.0 - TREE_CHANCE:
                        chunk.tree_spawn_points.append((px + x, py + y, pz + el))
