from __future__ import annotations
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Optional

import numpy as np

from mastermind.codec.combination import decode, parse
from mastermind.codec.packing import clue_packer, guess_packer
from mastermind.constants import ACTIONS, MAX_ATTEMPTS, PER_TURN_GAME_DURATION
from mastermind.crypto import solution_commitment
from mastermind.errors import (AlreadyFinalized, CommitmentMismatch, IdentityMismatch,
                               InvalidEncoding, NotYetFinalized, StaleChain,
                               TurnSequenceViolation)
from mastermind.rules.clue import compress_clue, expand_clue, is_solved, score
from mastermind.state import GameState

if TYPE_CHECKING:
    from mastermind.config import FullConfig
    from mastermind.steps.program import StepOutput

logger = logging.getLogger(__name__)


def guess_slot(turn_count: int) -> int:
    return turn_count // 2


def clue_slot(turn_count: int) -> int:
    return turn_count // 2 - 1


class RulesFSM:
    """
    Authoritative transition function. Every method takes a GameState and
    returns a fresh one; a failed guard raises before anything is built.
    """

    def __init__(self, max_attempts: int = MAX_ATTEMPTS,
                 per_turn_duration: int = PER_TURN_GAME_DURATION,
                 referee_id: Optional[str] = None):
        self.max_attempts = max_attempts
        self.per_turn_duration = per_turn_duration
        self.referee_id = referee_id
        self.guesses = guess_packer(max_attempts)
        self.clues = clue_packer(max_attempts)

    @classmethod
    def from_config(cls, cfg: FullConfig, referee_id: Optional[str] = None) -> RulesFSM:
        return cls(cfg.game.max_attempts, cfg.game.per_turn_duration, referee_id)

    @property
    def max_turns(self) -> int:
        return 2 * self.max_attempts

    def new_game(self) -> GameState:
        return GameState(max_attempts=self.max_attempts)

    # -- shared with the step programs --------------------------------------

    def codebreaker_may_act(self, turn_count: int) -> bool:
        return turn_count % 2 == 1 and turn_count < self.max_turns

    def codemaster_may_act(self, turn_count: int) -> bool:
        return turn_count % 2 == 0 and 0 < turn_count <= self.max_turns

    def record_guess(self, guess_history: int, turn_count: int, guess: int) -> int:
        if not self.codebreaker_may_act(turn_count):
            raise TurnSequenceViolation(f"codebreaker cannot act at turn {turn_count}")
        parse(guess)
        return self.guesses.write_at(guess_history, guess_slot(turn_count), guess)

    def record_clue(self, guess_history: int, clue_history: int, turn_count: int,
                    secret: int) -> tuple[int, list[int]]:
        if not self.codemaster_may_act(turn_count):
            raise TurnSequenceViolation(f"codemaster cannot act at turn {turn_count}")
        idx = clue_slot(turn_count)
        guess = decode(self.guesses.read_at(guess_history, idx))
        clue = score(guess, decode(secret))
        return self.clues.write_at(clue_history, idx, compress_clue(clue)), clue

    # -- lifecycle -----------------------------------------------------------

    def initialize(self, s: GameState, *, actor_id: str, secret: int, salt, address: str,
                   reward: int, now: int) -> GameState:
        if s.phase != "uninitialized":
            raise TurnSequenceViolation("game already initialized")
        # reward 0 marks a distributed pot
        if reward <= 0:
            raise InvalidEncoding(f"reward must be positive, got {reward}")
        parse(secret)
        ns = replace(s, max_attempts=self.max_attempts, code_master_id=actor_id,
                     solution_hash=solution_commitment(secret, salt, address),
                     turn_count=1, reward_amount=reward, last_played_slot=now)
        logger.info("game %s initialized, reward=%d", address, reward)
        return ns

    def accept(self, s: GameState, *, actor_id: str, reward: int, now: int) -> GameState:
        if s.phase != "initialized":
            raise TurnSequenceViolation(f"cannot accept a game in phase {s.phase}")
        if reward < 0:
            raise InvalidEncoding(f"stake must not be negative, got {reward}")
        finalize = now + self.max_attempts * self.per_turn_duration
        return replace(s, code_breaker_id=actor_id, reward_amount=s.reward_amount + reward,
                       finalize_slot=finalize, last_played_slot=now)

    def is_finalized(self, s: GameState, now: int) -> bool:
        if s.phase != "accepted":
            return False
        return (s.is_solved or s.forfeited_id is not None
                or s.turn_count > self.max_turns or now > s.finalize_slot)

    def _check_open(self, s: GameState, now: int) -> None:
        if s.phase != "accepted":
            raise TurnSequenceViolation(f"game is {s.phase}, not in progress")
        if s.is_solved:
            raise AlreadyFinalized("secret already solved")
        if self.is_finalized(s, now):
            raise AlreadyFinalized("game is over")

    def submit_guess(self, s: GameState, *, actor_id: str, guess: int, now: int) -> GameState:
        self._check_open(s, now)
        if s.turn_count % 2 == 0 or s.turn_count >= self.max_turns:
            raise TurnSequenceViolation(f"not the codebreaker's turn (turn {s.turn_count})")
        if actor_id != s.code_breaker_id:
            raise IdentityMismatch("only the codebreaker can submit a guess")
        history = self.record_guess(s.guess_history, s.turn_count, guess)
        return replace(s, guess_history=history, turn_count=s.turn_count + 1, last_played_slot=now)

    def submit_clue(self, s: GameState, *, actor_id: str, secret: int, salt, address: str,
                    now: int) -> GameState:
        self._check_open(s, now)
        if not self.codemaster_may_act(s.turn_count):
            raise TurnSequenceViolation(f"not the codemaster's turn (turn {s.turn_count})")
        if actor_id != s.code_master_id:
            raise IdentityMismatch("only the codemaster can submit a clue")
        if solution_commitment(secret, salt, address) != s.solution_hash:
            raise CommitmentMismatch("secret and salt do not match the stored commitment")
        history, clue = self.record_clue(s.guess_history, s.clue_history, s.turn_count, secret)
        solved = is_solved(clue)
        if solved:
            logger.info("game %s solved at turn %d", address, s.turn_count)
        return replace(s, clue_history=history, is_solved=solved,
                       turn_count=s.turn_count + 1, last_played_slot=now)

    def settle(self, s: GameState, output: StepOutput, now: int) -> GameState:
        """Apply the final public output of a step chain in one transition."""
        self._check_open(s, now)
        if output.code_master_id != s.code_master_id or output.code_breaker_id != s.code_breaker_id:
            raise IdentityMismatch("step chain players differ from the stored players")
        if output.solution_hash != s.solution_hash:
            raise CommitmentMismatch("step chain commits to a different solution")
        if output.turn_count <= s.turn_count:
            raise StaleChain(f"chain turn {output.turn_count} is not ahead of stored turn {s.turn_count}")
        if output.turn_count > self.max_turns + 1:
            raise TurnSequenceViolation(f"chain turn {output.turn_count} exceeds the turn bound")
        solved = is_solved(expand_clue(output.last_compressed_clue))
        logger.info("settled step chain at turn %d (solved=%s)", output.turn_count, solved)
        return replace(s, turn_count=output.turn_count, guess_history=output.packed_guess_history,
                       clue_history=output.packed_clue_history, is_solved=solved,
                       last_played_slot=now)

    # -- outcome -------------------------------------------------------------

    def winner(self, s: GameState, now: int) -> Optional[str]:
        """Identity of the winner, or None while the game is undecided."""
        if s.phase != "accepted":
            return None
        if s.forfeited_id is not None:
            return s.code_breaker_id if s.forfeited_id == s.code_master_id else s.code_master_id
        if s.is_solved:
            return s.code_breaker_id
        if s.turn_count > self.max_turns or now > s.finalize_slot:
            return s.code_master_id
        return None

    def claim_reward(self, s: GameState, *, actor_id: str, now: int) -> tuple[GameState, int]:
        if s.reward_amount == 0:
            raise AlreadyFinalized("reward already distributed")
        w = self.winner(s, now)
        if w is None:
            raise NotYetFinalized("game has no winner yet")
        if actor_id != w:
            raise IdentityMismatch("only the winner can claim the reward")
        return replace(s, reward_amount=0, last_played_slot=now), s.reward_amount

    def forfeit(self, s: GameState, *, actor_id: str, target_id: str,
                now: int) -> tuple[GameState, str, int]:
        """Referee-forced loss for `target_id`; returns (state, winner_id, payout)."""
        if self.referee_id is None or actor_id != self.referee_id:
            raise IdentityMismatch("only the referee can force a forfeit")
        if s.phase != "accepted":
            raise TurnSequenceViolation(f"cannot forfeit a game in phase {s.phase}")
        if s.reward_amount == 0 or self.is_finalized(s, now):
            raise AlreadyFinalized("game is already over")
        if target_id == s.code_master_id:
            winner_id = s.code_breaker_id
        elif target_id == s.code_breaker_id:
            winner_id = s.code_master_id
        else:
            raise IdentityMismatch("forfeit target is not a player of this game")
        ns = replace(s, forfeited_id=target_id, reward_amount=0, last_played_slot=now)
        return ns, winner_id, s.reward_amount

    def legal_actions(self, s: GameState, actor_id: Optional[str], now: int) -> dict[str, np.ndarray]:
        mask = np.zeros(len(ACTIONS), dtype=bool)
        accepted = s.phase == "accepted"
        open_ = accepted and not self.is_finalized(s, now)
        mask[ACTIONS.index("initialize")] = s.phase == "uninitialized"
        mask[ACTIONS.index("accept")] = s.phase == "initialized"
        mask[ACTIONS.index("guess")] = (open_ and actor_id == s.code_breaker_id
                                        and self.codebreaker_may_act(s.turn_count))
        mask[ACTIONS.index("clue")] = (open_ and actor_id == s.code_master_id
                                       and self.codemaster_may_act(s.turn_count))
        mask[ACTIONS.index("claim")] = (s.reward_amount > 0 and actor_id is not None
                                        and self.winner(s, now) == actor_id)
        mask[ACTIONS.index("forfeit")] = (open_ and self.referee_id is not None
                                          and actor_id == self.referee_id and s.reward_amount > 0)
        mask[ACTIONS.index("submit_proof")] = open_ and actor_id in (s.code_master_id, s.code_breaker_id)
        return {"action": mask}
