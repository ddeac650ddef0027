"""Four-digit secret/guess encoding.

Public values are base-10 positional: digits [d0, d1, d2, d3] become
d0*1000 + d1*100 + d2*10 + d3, so every encoded combination lies in
[1000, 9999] and fits a 14-bit history slot.
"""

from __future__ import annotations
from typing import Sequence

from mastermind.constants import COMBINATION_LENGTH, MAX_COMBINATION, MAX_DIGIT, MIN_COMBINATION
from mastermind.errors import DuplicateDigit, InvalidEncoding, ZeroDigit

PLACE_VALUES = (1000, 100, 10, 1)


def encode(digits: Sequence[int]) -> int:
    """Positional weighted sum. No validation; see `validate`."""
    return sum(int(d) * w for d, w in zip(digits, PLACE_VALUES))


def decode(value: int) -> list[int]:
    value = int(value)
    if not MIN_COMBINATION <= value <= MAX_COMBINATION:
        raise InvalidEncoding(f"combination must be a four-digit value, got {value}")
    digits = [value // 1000, (value // 100) % 10, (value // 10) % 10, value % 10]
    if encode(digits) != value:
        raise InvalidEncoding(f"combination {value} does not round-trip")
    return digits


def validate(digits: Sequence[int]) -> None:
    """
    Enforce the game rules on a digit list.

    The first digit is exempt from the zero check: a leading zero would drop
    the value below four digits, which `decode` already rejects.
    """
    if len(digits) != COMBINATION_LENGTH:
        raise InvalidEncoding(f"combination needs {COMBINATION_LENGTH} digits, got {len(digits)}")
    for i, d in enumerate(digits):
        if not 0 <= d <= MAX_DIGIT:
            raise InvalidEncoding(f"combination digit {i + 1} must be in [0, {MAX_DIGIT}], got {d}")
    for i in range(1, COMBINATION_LENGTH):
        if digits[i] == 0:
            raise ZeroDigit(f"combination digit {i + 1} should not be zero")
    for i in range(COMBINATION_LENGTH):
        for j in range(i + 1, COMBINATION_LENGTH):
            if digits[i] == digits[j]:
                raise DuplicateDigit(f"combination digit {j + 1} is not unique")


def parse(value: int) -> list[int]:
    """Decode a public combination value and check it against the game rules."""
    digits = decode(value)
    validate(digits)
    return digits
