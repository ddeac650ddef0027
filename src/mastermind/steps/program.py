"""
Off-ledger step programs.

Each step takes the previous step's public output (none for the first one),
checks continuity, appends one action and returns a new public output plus an
attestation. The proving engine is opaque here: `Attestor` is the seam, and
`HashChainAttestor` is a keyed, hash-linked stand-in for it.
"""

from __future__ import annotations
import hashlib
import hmac
import logging
import secrets
from dataclasses import asdict, dataclass, replace
from typing import Optional, Protocol

from mastermind.codec.combination import parse
from mastermind.crypto import identity_hash, solution_commitment, verify_signature
from mastermind.errors import (AlreadyFinalized, CommitmentMismatch, IdentityMismatch,
                               TurnSequenceViolation)
from mastermind.rules.clue import compress_clue, expand_clue, is_solved
from mastermind.rules.fsm import RulesFSM

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StepOutput:
    code_master_id: str
    solution_hash: str
    turn_count: int
    code_breaker_id: Optional[str] = None
    last_compressed_guess: int = 0
    last_compressed_clue: int = 0
    packed_guess_history: int = 0
    packed_clue_history: int = 0

    @property
    def is_solved(self) -> bool:
        return is_solved(expand_clue(self.last_compressed_clue))

    def fingerprint(self) -> str:
        fields = asdict(self)
        return "|".join(f"{k}={fields[k]}" for k in sorted(fields))


@dataclass(frozen=True, slots=True)
class Attestation:
    step: str
    previous: Optional[str]  # digest of the attestation this step consumed
    digest: str


class Attestor(Protocol):
    def attest(self, step: str, output: StepOutput, previous: Optional[Attestation]) -> Attestation: ...

    def verify(self, output: StepOutput, attestation: Attestation) -> bool: ...


class HashChainAttestor:
    """HMAC-SHA256 over (step, previous digest, output); only key holders can attest."""

    def __init__(self, key: Optional[bytes] = None):
        self._key = key if key is not None else secrets.token_bytes(32)

    def _mac(self, step: str, previous: Optional[str], output: StepOutput) -> str:
        msg = f"{step}|{previous}|{output.fingerprint()}".encode("utf-8")
        return hmac.new(self._key, msg, hashlib.sha256).hexdigest()

    def attest(self, step: str, output: StepOutput, previous: Optional[Attestation]) -> Attestation:
        prev = previous.digest if previous is not None else None
        return Attestation(step, prev, self._mac(step, prev, output))

    def verify(self, output: StepOutput, attestation: Attestation) -> bool:
        expected = self._mac(attestation.step, attestation.previous, output)
        return hmac.compare_digest(expected, attestation.digest)


def step_message(public_key: bytes, address: str) -> bytes:
    """What a player signs for a step: their raw public key bound to one game."""
    return bytes(public_key) + address.encode("utf-8")


class StepProgram:

    def __init__(self, fsm: Optional[RulesFSM] = None, attestor: Optional[Attestor] = None):
        self.fsm = fsm or RulesFSM()
        self.attestor = attestor or HashChainAttestor()

    def _authenticate(self, public_key: bytes, signature: bytes, address: str) -> str:
        if not verify_signature(public_key, step_message(public_key, address), signature):
            raise IdentityMismatch("step signature does not verify")
        return identity_hash(public_key)

    def _check_previous(self, previous: StepOutput, attestation: Attestation) -> None:
        if not self.attestor.verify(previous, attestation):
            raise IdentityMismatch("previous step attestation does not verify")
        if previous.is_solved:
            raise AlreadyFinalized("secret already solved")

    def create_step(self, *, secret: int, salt, address: str, public_key: bytes,
                    signature: bytes) -> tuple[StepOutput, Attestation]:
        parse(secret)
        master = self._authenticate(public_key, signature, address)
        out = StepOutput(code_master_id=master,
                         solution_hash=solution_commitment(secret, salt, address),
                         turn_count=1)
        logger.debug("create step for %s", address)
        return out, self.attestor.attest("create", out, None)

    def guess_step(self, *, guess: int, address: str, public_key: bytes, signature: bytes,
                   previous: StepOutput, previous_attestation: Attestation) -> tuple[StepOutput, Attestation]:
        self._check_previous(previous, previous_attestation)
        if previous.turn_count % 2 == 0:
            raise TurnSequenceViolation(f"not the codebreaker's turn (turn {previous.turn_count})")
        breaker = self._authenticate(public_key, signature, address)
        if previous.code_breaker_id is not None and previous.code_breaker_id != breaker:
            raise IdentityMismatch("guess signed by someone other than the codebreaker")
        history = self.fsm.record_guess(previous.packed_guess_history, previous.turn_count, guess)
        out = replace(previous, code_breaker_id=breaker, turn_count=previous.turn_count + 1,
                      last_compressed_guess=int(guess), packed_guess_history=history)
        logger.debug("guess step %d -> turn %d", guess, out.turn_count)
        return out, self.attestor.attest("guess", out, previous_attestation)

    def clue_step(self, *, secret: int, salt, address: str, public_key: bytes, signature: bytes,
                  previous: StepOutput, previous_attestation: Attestation) -> tuple[StepOutput, Attestation]:
        self._check_previous(previous, previous_attestation)
        if not self.fsm.codemaster_may_act(previous.turn_count):
            raise TurnSequenceViolation(f"not the codemaster's turn (turn {previous.turn_count})")
        master = self._authenticate(public_key, signature, address)
        if master != previous.code_master_id:
            raise IdentityMismatch("clue signed by someone other than the codemaster")
        if solution_commitment(secret, salt, address) != previous.solution_hash:
            raise CommitmentMismatch("secret and salt do not match the committed solution")
        history, clue = self.fsm.record_clue(previous.packed_guess_history,
                                             previous.packed_clue_history,
                                             previous.turn_count, secret)
        out = replace(previous, turn_count=previous.turn_count + 1,
                      last_compressed_clue=compress_clue(clue), packed_clue_history=history)
        logger.debug("clue step %s -> turn %d", clue, out.turn_count)
        return out, self.attestor.attest("clue", out, previous_attestation)
