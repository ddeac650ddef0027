from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from mastermind.constants import MAX_ATTEMPTS

@dataclass(frozen=True, slots=True)
class GameState:
    max_attempts: int = MAX_ATTEMPTS
    turn_count: int = 0             # odd: codebreaker to act, even > 0: codemaster
    is_solved: bool = False         # false -> true only
    reward_amount: int = 0          # 0 once distributed
    finalize_slot: int = 0          # fixed at accept
    last_played_slot: int = 0
    code_master_id: Optional[str] = None
    code_breaker_id: Optional[str] = None
    solution_hash: Optional[str] = None
    forfeited_id: Optional[str] = None  # designated loser of a forced forfeit
    guess_history: int = 0          # max_attempts x 14 bits
    clue_history: int = 0           # max_attempts x 8 bits

    @property
    def phase(self) -> str:
        if self.solution_hash is None:
            return "uninitialized"
        if self.code_breaker_id is None:
            return "initialized"
        return "accepted"
