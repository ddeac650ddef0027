"""
Fixed-width packing of bounded sequences into one aggregate integer.

Element 0 sits in the most significant `width` bits. Slot access goes through
an equality mask over every slot position, so an index that does not select
exactly one slot fails instead of silently reading or writing nothing.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from mastermind.constants import CLUE_BITS, COMBINATION_BITS, MAX_ATTEMPTS
from mastermind.errors import IndexOutOfRange, InvalidEncoding

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HistoryPacker:
    capacity: int  # N
    width: int     # W, bits per element

    @property
    def total_bits(self) -> int:
        return self.capacity * self.width

    def pack(self, elements: Sequence[int]) -> int:
        if len(elements) > self.capacity:
            raise InvalidEncoding(f"{len(elements)} elements exceed capacity {self.capacity}")
        limit = 1 << self.width
        agg = 0
        for i in range(self.capacity):
            e = int(elements[i]) if i < len(elements) else 0
            if not 0 <= e < limit:
                raise InvalidEncoding(f"element {i} ({e}) does not fit in {self.width} bits")
            agg = (agg << self.width) | e
        return agg

    def unpack(self, aggregate: int) -> list[int]:
        aggregate = int(aggregate)
        if not 0 <= aggregate < (1 << self.total_bits):
            raise InvalidEncoding(f"aggregate does not fit in {self.total_bits} bits")
        mask = (1 << self.width) - 1
        out = [0] * self.capacity
        for i in range(self.capacity):
            shift = (self.capacity - 1 - i) * self.width
            out[i] = (aggregate >> shift) & mask
        return out

    def _select(self, index: int) -> np.ndarray:
        matches = np.arange(self.capacity) == index
        if int(matches.sum()) != 1:
            raise IndexOutOfRange(f"index {index} out of bounds for {self.capacity} slots")
        return matches

    def read_at(self, aggregate: int, index: int) -> int:
        matches = self._select(index)
        return sum(v for v, m in zip(self.unpack(aggregate), matches) if m)

    def write_at(self, aggregate: int, index: int, value: int) -> int:
        matches = self._select(index)
        updated = [int(value) if m else v for v, m in zip(self.unpack(aggregate), matches)]
        logger.debug("slot %d <- %d (width=%d)", index, value, self.width)
        return self.pack(updated)


def guess_packer(max_attempts: int = MAX_ATTEMPTS) -> HistoryPacker:
    return HistoryPacker(max_attempts, COMBINATION_BITS)


def clue_packer(max_attempts: int = MAX_ATTEMPTS) -> HistoryPacker:
    return HistoryPacker(max_attempts, CLUE_BITS)
