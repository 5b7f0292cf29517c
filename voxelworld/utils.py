import logging
import sys
from typing import Callable, Generator, TypeVar

_T = TypeVar('_T')
T = TypeVar('T', bound=type)

RESET_SEQ = '\033[0m'
COLOR_SEQ = '\033[%sm'

COLORS = {
    'WARN': '33',
    'DEBUG': '36',
    'SEVERE': '41;37',
    'ERROR': '31'
}

FORMAT = '[%(asctime)s] [%(threadName)s/%(levelname)s] [%(filename)s:%(lineno)i]: %(message)s'
DATA_FORMAT = '%H:%M:%S'

DEBUG = '--debug' in sys.argv


def autoslots(cls: T) -> T:
    slots = set(cls.__slots__) if hasattr(cls, '__slots__') else set()
    slots.update(cls.__annotations__.keys())
    cls.__slots__ = slots
    return cls


class ColoredFormatter(logging.Formatter):
    use_color: bool

    def __init__(self, use_color: bool = True) -> None:
        super().__init__(FORMAT, DATA_FORMAT)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        message = super().format(record)
        if self.use_color and levelname in COLORS:
            message = COLOR_SEQ % COLORS[levelname] + message + RESET_SEQ
        return message


def get_opt(opt: str, offset: int = 1) -> str:
    return sys.argv[sys.argv.index(opt) + offset]


def spiral_loop_gen(w: int, h: int, cb: Callable[[int, int], _T]) -> Generator[_T, None, None]:
    x = y = 0
    dx = 0
    dy = -1
    for i in range(max(w, h)**2):
        if (-w/2 < x <= w/2) and (-h/2 < y <= h/2):
            yield cb(x, y)
        if x == y or (x < 0 and x == -y) or (x > 0 and x == 1-y):
            dx, dy = -dy, dx
        x, y = x+dx, y+dy


def init_logger(log_file: str) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if DEBUG else logging.INFO)
    logging.addLevelName(logging.WARN, 'WARN')
    logging.addLevelName(logging.CRITICAL, 'SEVERE')
    handlers: list[logging.Handler] = [
        logging.StreamHandler(),
        logging.FileHandler(log_file, 'w', encoding='utf-8'),
    ]
    handlers[0].setFormatter(ColoredFormatter(True))
    handlers[1].setFormatter(ColoredFormatter(False))
    for handler in handlers:
        root.addHandler(handler)
