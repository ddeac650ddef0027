import pytest

from mastermind.codec.packing import HistoryPacker, clue_packer, guess_packer
from mastermind.codec.state_word import pack_reward_slot, pack_turn, unpack_reward_slot, unpack_turn
from mastermind.errors import IndexOutOfRange, InvalidEncoding


def test_pack_is_most_significant_first():
    p = HistoryPacker(3, 4)
    assert p.pack([1, 2, 3]) == 0x123
    assert p.pack([1]) == 0x100
    assert p.unpack(0x123) == [1, 2, 3]


def test_history_widths():
    assert guess_packer().total_bits == 98
    assert clue_packer().total_bits == 56
    agg = guess_packer().pack([1234, 7654, 9999])
    assert guess_packer().unpack(agg) == [1234, 7654, 9999, 0, 0, 0, 0]


def test_pack_rejects_oversized_input():
    p = HistoryPacker(2, 3)
    with pytest.raises(InvalidEncoding):
        p.pack([8])
    with pytest.raises(InvalidEncoding):
        p.pack([1, 2, 3])
    with pytest.raises(InvalidEncoding):
        p.unpack(1 << 6)


def test_write_then_read_touches_one_slot():
    p = clue_packer()
    agg = p.pack([10, 20, 30, 40, 50, 60, 70])
    for i in range(p.capacity):
        updated = p.write_at(agg, i, 255)
        assert p.read_at(updated, i) == 255
        for j in range(p.capacity):
            if j != i:
                assert p.read_at(updated, j) == p.read_at(agg, j)
    assert p.read_at(agg, 0) == 10


@pytest.mark.parametrize("index", [-1, 7, 100])
def test_slot_access_out_of_range(index):
    p = clue_packer()
    with pytest.raises(IndexOutOfRange):
        p.read_at(0, index)
    with pytest.raises(IndexOutOfRange):
        p.write_at(0, index, 1)


def test_turn_word():
    assert pack_turn(3, 7, 1) == 30701
    assert unpack_turn(30701) == (3, 7, 1)
    for bad in [(100, 7, 0), (3, 100, 0), (3, 7, 2)]:
        with pytest.raises(InvalidEncoding):
            pack_turn(*bad)
    with pytest.raises(InvalidEncoding):
        unpack_turn(30705)


def test_reward_slot_word():
    assert pack_reward_slot(5, 9) == 5 * 2**32 + 9
    assert unpack_reward_slot(5 * 2**32 + 9) == (5, 9)
    top = pack_reward_slot(2**64 - 1, 2**32 - 1)
    assert top < 2**96
    assert unpack_reward_slot(top) == (2**64 - 1, 2**32 - 1)
    with pytest.raises(InvalidEncoding):
        pack_reward_slot(2**64, 0)
    with pytest.raises(InvalidEncoding):
        unpack_reward_slot(2**96)


def test_wide_slots_stay_exact():
    p = HistoryPacker(2, 64)
    agg = p.pack([2**63, 1])
    assert p.read_at(agg, 0) == 2**63
    assert p.read_at(agg, 1) == 1
    agg = p.write_at(agg, 1, 2**64 - 1)
    assert p.unpack(agg) == [2**63, 2**64 - 1]
    with pytest.raises(InvalidEncoding):
        p.write_at(agg, 0, 2**64)
