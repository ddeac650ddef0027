from __future__ import annotations

from mastermind.constants import REWARD_BITS, SLOT_BITS, TURN_FIELD_LIMIT, TURN_RADIX
from mastermind.errors import InvalidEncoding

SLOT_RADIX = 1 << SLOT_BITS


def pack_turn(turn_count: int, max_attempts: int, solved: int) -> int:
    """turn_count * 10000 + max_attempts * 100 + solved."""
    if not 0 <= turn_count < TURN_FIELD_LIMIT:
        raise InvalidEncoding("turn count must be less than 100")
    if not 0 <= max_attempts < TURN_FIELD_LIMIT:
        raise InvalidEncoding("max attempts must be less than 100")
    if solved not in (0, 1):
        raise InvalidEncoding("solved flag must be 0 or 1")
    return turn_count * TURN_RADIX * TURN_RADIX + max_attempts * TURN_RADIX + solved


def unpack_turn(word: int) -> tuple[int, int, int]:
    word = int(word)
    fields = (word // (TURN_RADIX * TURN_RADIX), (word // TURN_RADIX) % TURN_RADIX, word % TURN_RADIX)
    if pack_turn(*fields) != word:
        raise InvalidEncoding(f"turn word {word} does not round-trip")
    return fields


def pack_reward_slot(reward: int, finalize_slot: int) -> int:
    if not 0 <= reward < (1 << REWARD_BITS):
        raise InvalidEncoding("reward must fit in 64 bits")
    if not 0 <= finalize_slot < SLOT_RADIX:
        raise InvalidEncoding("finalize slot must fit in 32 bits")
    return reward * SLOT_RADIX + finalize_slot


def unpack_reward_slot(word: int) -> tuple[int, int]:
    # base-2**32 digits: high, mid, low; reward spans the top two
    word = int(word)
    high, rest = divmod(word, SLOT_RADIX * SLOT_RADIX)
    mid, low = divmod(rest, SLOT_RADIX)
    reward = high * SLOT_RADIX + mid
    if pack_reward_slot(reward, low) != word:
        raise InvalidEncoding(f"reward word {word} does not round-trip")
    return reward, low
