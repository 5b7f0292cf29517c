import pytest

from voxelworld import blocks
from voxelworld.blocks import ALL_BLOCKS, MAX_BLOCK_CODE, block_to_code, code_to_block, validate_codes
from voxelworld.errors import InvalidBlockError


def test_code_table_is_stable():
    assert [(b.id, b.name) for b in ALL_BLOCKS] == [
        (0, 'air'),
        (1, 'water'),
        (2, 'sand'),
        (3, 'ground'),
        (4, 'wood'),
        (5, 'stone'),
        (6, 'leaves'),
        (7, 'tree'),
        (8, 'cactus'),
        (9, 'coal'),
    ]
    assert MAX_BLOCK_CODE == 9


@pytest.mark.parametrize('block', ALL_BLOCKS, ids=lambda b: b.name)
def test_codec_round_trip(block):
    assert code_to_block(block_to_code(block)) is block


@pytest.mark.parametrize('code', [10, 11, 128, 255, -1, 256])
def test_unknown_code_rejected(code):
    with pytest.raises(InvalidBlockError) as info:
        code_to_block(code)
    assert info.value.code == code


def test_validate_codes_reports_offset():
    validate_codes(bytes(range(10)))
    validate_codes(b'')
    with pytest.raises(InvalidBlockError) as info:
        validate_codes(bytes([0, 5, 9, 10, 3]))
    assert info.value.code == 10
    assert info.value.offset == 3


def test_duplicate_id_rejected():
    with pytest.raises(ValueError):
        blocks.Block(3, 'dirt')


def test_only_trunk_outranks_other_blocks_when_stamping():
    assert blocks.TREE.stamp_priority > blocks.LEAVES.stamp_priority
    assert {b.stamp_priority for b in ALL_BLOCKS if b is not blocks.TREE} == {0}
