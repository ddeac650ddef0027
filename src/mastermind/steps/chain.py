from __future__ import annotations
import logging
from typing import Optional, Sequence

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from mastermind.codec.combination import parse
from mastermind.crypto import public_bytes, sign
from mastermind.errors import (AlreadyFinalized, CommitmentMismatch, IdentityMismatch,
                               InvalidEncoding, TurnSequenceViolation)
from mastermind.rules.fsm import RulesFSM, clue_slot, guess_slot
from mastermind.steps.program import Attestation, Attestor, StepOutput, StepProgram, step_message

logger = logging.getLogger(__name__)


class StepChain:
    """
    One game's append-only log of steps. Players hold their own signing keys;
    the chain only threads each output and attestation into the next step.
    """

    def __init__(self, program: StepProgram, address: str):
        self.program = program
        self.address = address
        self.outputs: list[StepOutput] = []
        self.attestations: list[Attestation] = []

    @property
    def latest(self) -> tuple[StepOutput, Attestation]:
        if not self.outputs:
            raise TurnSequenceViolation("chain has no create step")
        return self.outputs[-1], self.attestations[-1]

    def _append(self, result: tuple[StepOutput, Attestation]) -> StepOutput:
        out, att = result
        self.outputs.append(out)
        self.attestations.append(att)
        return out

    def _signed(self, sk: Ed25519PrivateKey) -> dict:
        pk = public_bytes(sk)
        return {"public_key": pk, "signature": sign(sk, step_message(pk, self.address))}

    def create(self, sk: Ed25519PrivateKey, secret: int, salt) -> StepOutput:
        if self.outputs:
            raise TurnSequenceViolation("chain already has a create step")
        return self._append(self.program.create_step(secret=secret, salt=salt, address=self.address,
                                                     **self._signed(sk)))

    def guess(self, sk: Ed25519PrivateKey, guess: int) -> StepOutput:
        prev, att = self.latest
        return self._append(self.program.guess_step(guess=guess, address=self.address,
                                                    previous=prev, previous_attestation=att,
                                                    **self._signed(sk)))

    def clue(self, sk: Ed25519PrivateKey, secret: int, salt) -> StepOutput:
        prev, att = self.latest
        return self._append(self.program.clue_step(secret=secret, salt=salt, address=self.address,
                                                   previous=prev, previous_attestation=att,
                                                   **self._signed(sk)))

    def validate(self) -> StepOutput:
        return validate_chain(self.outputs, self.program.fsm, self.attestations, self.program.attestor)


def validate_chain(outputs: Sequence[StepOutput], fsm: Optional[RulesFSM] = None,
                   attestations: Optional[Sequence[Attestation]] = None,
                   attestor: Optional[Attestor] = None) -> StepOutput:
    """
    Check a chain of public outputs independently of the proving backend and
    return its final output.

    Turn counts must start at 1 and grow by exactly one per step, players and
    the commitment carry forward unchanged, and each step may only fill the
    one history slot its turn owns. When attestations are given, each must
    verify and link to the one before it.
    """
    fsm = fsm or RulesFSM()
    if not outputs:
        raise TurnSequenceViolation("empty step chain")
    first = outputs[0]
    if (first.turn_count != 1 or first.code_breaker_id is not None
            or first.packed_guess_history or first.packed_clue_history
            or first.last_compressed_guess or first.last_compressed_clue):
        raise TurnSequenceViolation("chain does not start with a create step")

    for prev, cur in zip(outputs, outputs[1:]):
        if cur.turn_count != prev.turn_count + 1:
            raise TurnSequenceViolation(f"turn {prev.turn_count} followed by turn {cur.turn_count}")
        if prev.is_solved:
            raise AlreadyFinalized(f"step after the secret was solved at turn {prev.turn_count}")
        if cur.code_master_id != prev.code_master_id:
            raise IdentityMismatch(f"codemaster changed at turn {cur.turn_count}")
        if prev.code_breaker_id is not None and cur.code_breaker_id != prev.code_breaker_id:
            raise IdentityMismatch(f"codebreaker changed at turn {cur.turn_count}")
        if cur.solution_hash != prev.solution_hash:
            raise CommitmentMismatch(f"solution commitment changed at turn {cur.turn_count}")

        if fsm.codebreaker_may_act(prev.turn_count):
            parse(cur.last_compressed_guess)
            expected = fsm.guesses.write_at(prev.packed_guess_history, guess_slot(prev.turn_count),
                                            cur.last_compressed_guess)
            intact = (cur.packed_guess_history == expected and cur.code_breaker_id is not None
                      and cur.packed_clue_history == prev.packed_clue_history
                      and cur.last_compressed_clue == prev.last_compressed_clue)
        elif fsm.codemaster_may_act(prev.turn_count):
            expected = fsm.clues.write_at(prev.packed_clue_history, clue_slot(prev.turn_count),
                                          cur.last_compressed_clue)
            intact = (cur.packed_clue_history == expected
                      and cur.packed_guess_history == prev.packed_guess_history
                      and cur.last_compressed_guess == prev.last_compressed_guess
                      and cur.code_breaker_id == prev.code_breaker_id)
        else:
            raise TurnSequenceViolation(f"no player may act at turn {prev.turn_count}")
        if not intact:
            raise InvalidEncoding(f"history rewritten at turn {cur.turn_count}")

    if attestations is not None:
        if attestor is None or len(attestations) != len(outputs):
            raise IdentityMismatch("attestations do not cover the chain")
        prev_digest = None
        for out, att in zip(outputs, attestations):
            if att.previous != prev_digest or not attestor.verify(out, att):
                raise IdentityMismatch(f"attestation for turn {out.turn_count} does not verify")
            prev_digest = att.digest

    logger.debug("validated chain of %d steps", len(outputs))
    return outputs[-1]
