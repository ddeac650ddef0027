from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class NewGameEvent:
    code_master_id: str
    reward_amount: int
    max_attempts: int


@dataclass(frozen=True, slots=True)
class GameAcceptEvent:
    code_breaker_id: str
    finalize_slot: int


@dataclass(frozen=True, slots=True)
class ProofSubmissionEvent:
    turn_count: int
    is_solved: bool


@dataclass(frozen=True, slots=True)
class RewardClaimEvent:
    claimer_id: str
    amount: int


@dataclass(frozen=True, slots=True)
class ForfeitGameEvent:
    loser_id: str
    winner_id: str
    amount: int
