import asyncio
import logging
import sys
import threading
import time
from asyncio.events import AbstractEventLoop
from collections import deque
from pathlib import Path
from typing import Iterator, Optional

import colorama
import humanize

from voxelworld.chunk import Vec3
from voxelworld.common import CHUNKSIZE, LOG_FILE, TICK_INTERVAL, TICK_TIME
from voxelworld.errors import SchemaMismatchError
from voxelworld.utils import autoslots, get_opt, init_logger, spiral_loop_gen
from voxelworld.world import World

DEFAULT_RADIUS = 2
# Chunk layers generated for every column, relative to the world floor
COLUMN_LAYERS = range(-1, 2)


@autoslots
class PregenServer:
    """
    Owns a world and generates the chunk columns around the origin, spiralling
    outwards, while committing batched writes once per TICK_INTERVAL.
    """
    world_path: Optional[Path]
    seed: Optional[int]
    radius: int

    loop: AbstractEventLoop
    world: Optional[World]
    running: bool
    pending_columns: deque[tuple[int, int]]
    chunks_generated: int
    last_spt: float

    def __init__(self, world_path: Optional[Path] = None, seed: Optional[int] = None, radius: int = DEFAULT_RADIUS) -> None:
        self.world_path = world_path
        self.seed = seed
        self.radius = radius
        self.world = None
        self.running = False
        self.pending_columns = deque(spiral_loop_gen(2 * radius + 1, 2 * radius + 1, lambda x, y: (x, y)))
        self.chunks_generated = 0
        self.last_spt = 0

    def start(self) -> int:
        with colorama.colorama_text():
            logging.info('Starting pregeneration...')
            self.loop = asyncio.new_event_loop()
            try:
                self.loop.run_until_complete(self.main())
            except SchemaMismatchError:
                logging.critical('Refusing to open incompatible world database', exc_info=True)
                return 1
            except BaseException as e:
                if isinstance(e, Exception):
                    logging.critical('Pregeneration crashed hard with exception', exc_info=True)
                    return 1
                elif isinstance(e, KeyboardInterrupt):
                    logging.info('Closing due to keyboard interrupt.')
                else:
                    raise
            finally:
                self.loop.run_until_complete(self.shutdown())
                self.loop.close()
            logging.info('Pregeneration finished')
        return 0

    def column_chunks(self, cx: int, cy: int) -> Iterator[Vec3]:
        assert self.world is not None
        floor = self.world.generator.floor
        for layer in COLUMN_LAYERS:
            yield (cx * CHUNKSIZE, cy * CHUNKSIZE, floor + layer * CHUNKSIZE)

    async def main(self) -> None:
        self.world = World.open(self.world_path, self.seed)
        if not self.world.persistent:
            logging.warning('World is not persistent, generated chunks will be discarded')
        logging.info('Generating %i chunk column(s)', len(self.pending_columns))
        self.running = True
        time_since_last_tick = 0.0
        while self.running and self.pending_columns:
            start = time.perf_counter()
            self.step()
            end = time.perf_counter()
            self.last_spt = end - start
            await asyncio.sleep(max(TICK_TIME - self.last_spt, 0))
            time_since_last_tick += max(self.last_spt, TICK_TIME)
            if self.last_spt > 1:
                logging.warning('Is the server overloaded? Step took %f seconds', self.last_spt)
            if time_since_last_tick >= TICK_INTERVAL:
                time_since_last_tick = 0
                self.world.tick()

    def step(self) -> None:
        assert self.world is not None
        cx, cy = self.pending_columns.popleft()
        chunks = list(self.column_chunks(cx, cy))
        loaded = self.world.load_area(chunks[0], chunks[-1])
        self.chunks_generated += len(loaded)
        logging.debug('Column (%i, %i) ready, %i column(s) left', cx, cy, len(self.pending_columns))

    async def shutdown(self) -> None:
        if self.world is None:
            return
        logging.info('Saving world...')
        start = time.perf_counter()
        self.world.close()
        end = time.perf_counter()
        logging.info('World saved (%i chunk(s) handled) in %f seconds', self.chunks_generated, end - start)
        if self.world_path is not None and self.world_path.exists():
            logging.info('World database is %s', humanize.naturalsize(self.world_path.stat().st_size, gnu=True))
        self.world = None

    def __repr__(self) -> str:
        return f'<PregenServer world={str(self.world_path)!r} radius={self.radius} left={len(self.pending_columns)}>'


def main() -> None:
    threading.current_thread().name = 'WorldThread'
    init_logger(LOG_FILE)
    try:
        world_path: Optional[Path] = Path(get_opt('--world'))
    except (ValueError, IndexError):
        world_path = None
    try:
        seed: Optional[int] = int(get_opt('--seed'))
    except (ValueError, IndexError):
        seed = None
    try:
        radius = int(get_opt('--radius'))
    except (ValueError, IndexError):
        radius = DEFAULT_RADIUS
    sys.exit(PregenServer(world_path, seed, radius).start())


if __name__ == '__main__':
    main()
