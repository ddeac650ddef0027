import pytest

from conftest import ADDRESS, SALT, SECRET
from mastermind.codec.state_word import unpack_reward_slot, unpack_turn
from mastermind.crypto import identity_hash
from mastermind.errors import AlreadyFinalized, DuplicateDigit, IdentityMismatch, NotYetFinalized
from mastermind.ledger.contract import MastermindContract
from mastermind.ledger.events import ForfeitGameEvent, GameAcceptEvent, NewGameEvent, RewardClaimEvent


def test_initialize_rejects_bad_secret(contract, master):
    with pytest.raises(DuplicateDigit):
        contract.initialize(master[1], 1123, SALT, 100, 0)
    assert contract.solution_hash is None
    contract.initialize(master[1], 1234, SALT, 100, 0)
    assert isinstance(contract.events[-1], NewGameEvent)


def test_words_hold_the_state(accepted, breaker):
    assert unpack_turn(accepted.turn_word) == (1, 7, 0)
    assert unpack_reward_slot(accepted.reward_word) == (200, 15)
    assert accepted.code_breaker_id == identity_hash(breaker[1])
    assert isinstance(accepted.events[-1], GameAcceptEvent)


def test_solve_in_one_guess(accepted, master, breaker):
    accepted.submit_guess(breaker[1], 1234, 2)
    assert unpack_turn(accepted.turn_word) == (2, 7, 0)
    s = accepted.submit_clue(master[1], SECRET, SALT, 3)
    assert s.is_solved and s.turn_count == 3
    assert unpack_turn(accepted.turn_word) == (3, 7, 1)
    assert accepted.fsm.clues.read_at(accepted.clue_history, 0) == 0b10101010
    with pytest.raises(AlreadyFinalized):
        accepted.submit_clue(master[1], SECRET, SALT, 4)

    assert accepted.claim_reward(breaker[1], 4) == 200
    assert accepted.events[-1] == RewardClaimEvent(identity_hash(breaker[1]), 200)
    with pytest.raises(AlreadyFinalized):
        accepted.claim_reward(breaker[1], 5)


def test_rejected_call_leaves_words_untouched(accepted, master, breaker):
    before = (accepted.turn_word, accepted.guess_history, accepted.clue_history)
    with pytest.raises(IdentityMismatch):
        accepted.submit_guess(master[1], 5671, 2)
    with pytest.raises(DuplicateDigit):
        accepted.submit_guess(breaker[1], 5571, 2)
    assert (accepted.turn_word, accepted.guess_history, accepted.clue_history) == before


def test_seven_misses_exhaust_the_game(accepted, master, breaker):
    now = 1
    for guess in [5671, 5672, 5673, 5674, 5761, 5762, 5763]:
        now += 1
        accepted.submit_guess(breaker[1], guess, now)
        now += 1
        accepted.submit_clue(master[1], SECRET, SALT, now)
    assert unpack_turn(accepted.turn_word) == (15, 7, 0)
    assert accepted.winner(now) == identity_hash(master[1])
    with pytest.raises(IdentityMismatch):
        accepted.claim_reward(breaker[1], now)
    assert accepted.claim_reward(master[1], now) == 200


def test_claim_before_the_end(accepted, breaker):
    with pytest.raises(NotYetFinalized):
        accepted.claim_reward(breaker[1], 2)


def test_forfeit_by_referee(accepted, master, breaker, referee):
    with pytest.raises(IdentityMismatch):
        accepted.forfeit(master[1], breaker[1], 2)
    winner = accepted.forfeit(referee[1], breaker[1], 2)
    assert winner == identity_hash(master[1])
    assert accepted.events[-1] == ForfeitGameEvent(identity_hash(breaker[1]), winner, 200)
    assert unpack_reward_slot(accepted.reward_word)[0] == 0
    with pytest.raises(AlreadyFinalized):
        accepted.forfeit(referee[1], master[1], 3)
    with pytest.raises(AlreadyFinalized):
        accepted.claim_reward(master[1], 3)


def test_from_config_reads_referee(referee):
    from mastermind.config import FullConfig

    cfg = FullConfig.model_validate({"arbiter": {"referee_public_key": referee[1].hex()},
                                     "game": {"max_attempts": 5}})
    c = MastermindContract.from_config(ADDRESS, cfg)
    assert c.fsm.referee_id == identity_hash(referee[1])
    assert c.fsm.guesses.total_bits == 5 * 14
    assert unpack_turn(c.turn_word) == (0, 5, 0)
