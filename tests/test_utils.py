import logging

from voxelworld.utils import COLOR_SEQ, RESET_SEQ, ColoredFormatter, autoslots


def make_record(level: int, levelname: str) -> logging.LogRecord:
    record = logging.LogRecord('root', level, __file__, 1, 'hello %s', ('world',), None)
    record.levelname = levelname
    return record


def test_colored_formatter():
    message = ColoredFormatter(True).format(make_record(logging.WARNING, 'WARN'))
    assert message.startswith(COLOR_SEQ % '33')
    assert message.endswith('hello world' + RESET_SEQ)


def test_plain_formatter():
    message = ColoredFormatter(False).format(make_record(logging.WARNING, 'WARN'))
    assert '\033' not in message
    assert '/WARN]' in message


def test_info_is_never_colored():
    message = ColoredFormatter(True).format(make_record(logging.INFO, 'INFO'))
    assert '\033' not in message


def test_autoslots_collects_annotations():
    @autoslots
    class Thing:
        a: int
        b: str

    assert Thing.__slots__ == {'a', 'b'}
