"""
Ledger-side game instance.

Storage is a handful of words: three identity digests, the commitment, the
packed turn word, the packed reward/deadline word and the two packed
histories. Each entry point loads a GameState from those words, runs one
RulesFSM transition and writes the words back only if it returned.
"""

from __future__ import annotations
import logging
from typing import Callable, Optional

from mastermind.codec.state_word import pack_reward_slot, pack_turn, unpack_reward_slot, unpack_turn
from mastermind.config import FullConfig
from mastermind.crypto import identity_hash
from mastermind.errors import IdentityMismatch, MastermindError
from mastermind.ledger.events import (ForfeitGameEvent, GameAcceptEvent, NewGameEvent,
                                      ProofSubmissionEvent, RewardClaimEvent)
from mastermind.rules.fsm import RulesFSM
from mastermind.state import GameState
from mastermind.steps.program import Attestation, Attestor, StepOutput

logger = logging.getLogger(__name__)


class MastermindContract:

    def __init__(self, address: str, fsm: Optional[RulesFSM] = None,
                 attestor: Optional[Attestor] = None):
        self.address = address
        self.fsm = fsm or RulesFSM()
        self.attestor = attestor
        self.events: list = []
        self.code_master_id: Optional[str] = None
        self.code_breaker_id: Optional[str] = None
        self.solution_hash: Optional[str] = None
        self.forfeited_id: Optional[str] = None
        self.turn_word = pack_turn(0, self.fsm.max_attempts, 0)
        self.reward_word = pack_reward_slot(0, 0)
        self.last_played_slot = 0
        self.guess_history = 0
        self.clue_history = 0

    @classmethod
    def from_config(cls, address: str, cfg: FullConfig,
                    attestor: Optional[Attestor] = None) -> MastermindContract:
        referee = cfg.arbiter.referee_public_key
        referee_id = identity_hash(bytes.fromhex(referee)) if referee else None
        return cls(address, RulesFSM.from_config(cfg, referee_id), attestor)

    # -- storage -------------------------------------------------------------

    def state(self) -> GameState:
        turn_count, max_attempts, solved = unpack_turn(self.turn_word)
        reward, finalize_slot = unpack_reward_slot(self.reward_word)
        return GameState(max_attempts=max_attempts, turn_count=turn_count, is_solved=bool(solved),
                         reward_amount=reward, finalize_slot=finalize_slot,
                         last_played_slot=self.last_played_slot,
                         code_master_id=self.code_master_id, code_breaker_id=self.code_breaker_id,
                         solution_hash=self.solution_hash, forfeited_id=self.forfeited_id,
                         guess_history=self.guess_history, clue_history=self.clue_history)

    def _store(self, s: GameState) -> None:
        # pack first so an encoding failure leaves storage untouched
        turn_word = pack_turn(s.turn_count, s.max_attempts, int(s.is_solved))
        reward_word = pack_reward_slot(s.reward_amount, s.finalize_slot)
        self.turn_word, self.reward_word = turn_word, reward_word
        self.code_master_id, self.code_breaker_id = s.code_master_id, s.code_breaker_id
        self.solution_hash, self.forfeited_id = s.solution_hash, s.forfeited_id
        self.last_played_slot = s.last_played_slot
        self.guess_history, self.clue_history = s.guess_history, s.clue_history

    def _run(self, action: str, transition: Callable[[GameState], GameState]) -> GameState:
        try:
            ns = transition(self.state())
            self._store(ns)
        except MastermindError as e:
            logger.warning("%s on %s rejected: %s", action, self.address, e)
            raise
        return ns

    def winner(self, now: int) -> Optional[str]:
        return self.fsm.winner(self.state(), now)

    # -- entry points --------------------------------------------------------

    def initialize(self, sender: bytes, secret: int, salt, reward: int, now: int) -> GameState:
        actor = identity_hash(sender)
        ns = self._run("initialize", lambda s: self.fsm.initialize(
            s, actor_id=actor, secret=secret, salt=salt, address=self.address, reward=reward, now=now))
        self.events.append(NewGameEvent(actor, reward, ns.max_attempts))
        return ns

    def accept(self, sender: bytes, reward: int, now: int) -> GameState:
        actor = identity_hash(sender)
        ns = self._run("accept", lambda s: self.fsm.accept(s, actor_id=actor, reward=reward, now=now))
        self.events.append(GameAcceptEvent(actor, ns.finalize_slot))
        logger.info("game %s accepted, finalize slot %d", self.address, ns.finalize_slot)
        return ns

    def submit_guess(self, sender: bytes, guess: int, now: int) -> GameState:
        actor = identity_hash(sender)
        return self._run("guess", lambda s: self.fsm.submit_guess(s, actor_id=actor, guess=guess, now=now))

    def submit_clue(self, sender: bytes, secret: int, salt, now: int) -> GameState:
        actor = identity_hash(sender)
        return self._run("clue", lambda s: self.fsm.submit_clue(
            s, actor_id=actor, secret=secret, salt=salt, address=self.address, now=now))

    def submit_proof(self, sender: bytes, output: StepOutput, attestation: Attestation, now: int,
                     claimed_winner: Optional[bytes] = None) -> GameState:
        """
        Settle a whole step chain in one transition. With `claimed_winner`, the
        reward is paid out in the same call; if that claim fails, so does the
        settlement.
        """
        actor = identity_hash(sender)
        paid: list[tuple[str, int]] = []

        def transition(s: GameState) -> GameState:
            if actor not in (s.code_master_id, s.code_breaker_id):
                raise IdentityMismatch("only a player of this game can submit a proof")
            if self.attestor is None or not self.attestor.verify(output, attestation):
                raise IdentityMismatch("step chain attestation does not verify")
            ns = self.fsm.settle(s, output, now)
            if claimed_winner is not None:
                claimer = identity_hash(claimed_winner)
                ns, amount = self.fsm.claim_reward(ns, actor_id=claimer, now=now)
                paid.append((claimer, amount))
            return ns

        ns = self._run("submit_proof", transition)
        self.events.append(ProofSubmissionEvent(ns.turn_count, ns.is_solved))
        for claimer, amount in paid:
            self.events.append(RewardClaimEvent(claimer, amount))
        return ns

    def claim_reward(self, sender: bytes, now: int) -> int:
        actor = identity_hash(sender)
        paid: list[int] = []

        def transition(s: GameState) -> GameState:
            ns, amount = self.fsm.claim_reward(s, actor_id=actor, now=now)
            paid.append(amount)
            return ns

        self._run("claim", transition)
        self.events.append(RewardClaimEvent(actor, paid[0]))
        logger.info("reward %d claimed on %s", paid[0], self.address)
        return paid[0]

    def forfeit(self, sender: bytes, target: bytes, now: int) -> str:
        """Referee-only; returns the winner's identity."""
        actor = identity_hash(sender)
        result: list[tuple[str, int]] = []

        def transition(s: GameState) -> GameState:
            ns, winner_id, amount = self.fsm.forfeit(s, actor_id=actor, target_id=identity_hash(target), now=now)
            result.append((winner_id, amount))
            return ns

        ns = self._run("forfeit", transition)
        winner_id, amount = result[0]
        self.events.append(ForfeitGameEvent(ns.forfeited_id, winner_id, amount))
        logger.info("game %s forfeited, %d to winner", self.address, amount)
        return winner_id
