"""Shared players and rule objects for the game tests."""

import pytest

from mastermind.crypto import generate_keypair, identity_hash
from mastermind.ledger.contract import MastermindContract
from mastermind.rules.fsm import RulesFSM
from mastermind.steps.program import HashChainAttestor, StepProgram

SECRET = 1234
SALT = 987654321
ADDRESS = "game-test"


@pytest.fixture
def master():
    return generate_keypair()


@pytest.fixture
def breaker():
    return generate_keypair()


@pytest.fixture
def referee():
    return generate_keypair()


@pytest.fixture
def fsm(referee):
    return RulesFSM(referee_id=identity_hash(referee[1]))


@pytest.fixture
def program(fsm):
    return StepProgram(fsm, HashChainAttestor(b"k" * 32))


@pytest.fixture
def contract(fsm, program):
    return MastermindContract(ADDRESS, fsm, program.attestor)


@pytest.fixture
def accepted(contract, master, breaker):
    """Contract with 1234 committed and accepted at slot 1 (deadline 15)."""
    contract.initialize(master[1], SECRET, SALT, 100, 0)
    contract.accept(breaker[1], 100, 1)
    return contract
