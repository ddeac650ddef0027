from __future__ import annotations
from typing import Sequence

from mastermind.codec.packing import HistoryPacker
from mastermind.constants import BLOW, CLUE_FIELD_BITS, COMBINATION_LENGTH, HIT, NO_MATCH

CLUE_PACKER = HistoryPacker(COMBINATION_LENGTH, CLUE_FIELD_BITS)


def score(guess: Sequence[int], solution: Sequence[int]) -> list[int]:
    """
    Per-position clue: 2 for each aligned match plus 1 for every match against
    another solution position. A guess digit equal to several non-aligned
    solution digits collects one blow per match.
    """
    clue = [NO_MATCH] * COMBINATION_LENGTH
    for i in range(COMBINATION_LENGTH):
        for j in range(COMBINATION_LENGTH):
            if guess[i] == solution[j]:
                clue[i] += HIT if i == j else BLOW
    return clue


def is_solved(clue: Sequence[int]) -> bool:
    return all(c == HIT for c in clue)


def compress_clue(clue: Sequence[int]) -> int:
    """Four 2-bit fields, position 0 most significant."""
    return CLUE_PACKER.pack(clue)


def expand_clue(word: int) -> list[int]:
    return CLUE_PACKER.unpack(word)
