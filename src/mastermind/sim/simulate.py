from __future__ import annotations

import argparse
import logging
import secrets
from itertools import permutations
from pathlib import Path

import numpy as np
import pandas as pd

from mastermind.codec.combination import decode, encode
from mastermind.config import FullConfig, configure_logging, load_config
from mastermind.constants import COMBINATION_LENGTH, MAX_DIGIT
from mastermind.crypto import generate_keypair
from mastermind.eval.report import summarize
from mastermind.ledger.contract import MastermindContract
from mastermind.rules.clue import expand_clue, score
from mastermind.rules.fsm import RulesFSM, clue_slot
from mastermind.steps.chain import StepChain
from mastermind.steps.program import HashChainAttestor, StepProgram

logger = logging.getLogger(__name__)

MODES = ("ledger", "steps")


def all_combinations() -> list[int]:
    # leading digit is non-zero too, otherwise the value drops below 1000
    return [encode(p) for p in permutations(range(1, MAX_DIGIT + 1), COMBINATION_LENGTH)]


class ConsistentCodebreaker:
    """Guesses uniformly among combinations that agree with every clue so far."""

    def __init__(self, rng: np.random.Generator):
        self.rng = rng
        self.candidates = all_combinations()

    def propose(self) -> int:
        return int(self.rng.choice(self.candidates))

    def observe(self, guess: int, clue: list[int]) -> None:
        g = decode(guess)
        self.candidates = [c for c in self.candidates if score(g, decode(c)) == clue]


def play_ledger_game(fsm: RulesFSM, rng: np.random.Generator, reward: int, address: str) -> dict:
    _, master_pk = generate_keypair()
    _, breaker_pk = generate_keypair()
    secret = int(rng.choice(all_combinations()))
    salt = secrets.randbelow(2**64)
    contract = MastermindContract(address, fsm)
    now = 0
    contract.initialize(master_pk, secret, salt, reward, now)
    now += 1
    contract.accept(breaker_pk, reward, now)
    breaker = ConsistentCodebreaker(rng)
    # the deadline can pass between a guess and its clue
    while True:
        now += 1
        if fsm.is_finalized(contract.state(), now):
            break
        guess = breaker.propose()
        contract.submit_guess(breaker_pk, guess, now)
        now += 1
        if fsm.is_finalized(contract.state(), now):
            break
        s = contract.submit_clue(master_pk, secret, salt, now)
        breaker.observe(guess, expand_clue(fsm.clues.read_at(s.clue_history, clue_slot(s.turn_count - 1))))
    s = contract.state()
    winner_pk = breaker_pk if s.is_solved else master_pk
    contract.claim_reward(winner_pk, now)
    return _row(contract, secret, now, s.is_solved)


def play_step_game(fsm: RulesFSM, rng: np.random.Generator, reward: int, address: str) -> dict:
    master_sk, master_pk = generate_keypair()
    breaker_sk, breaker_pk = generate_keypair()
    secret = int(rng.choice(all_combinations()))
    salt = secrets.randbelow(2**64)
    program = StepProgram(fsm, HashChainAttestor())
    contract = MastermindContract(address, fsm, program.attestor)
    contract.initialize(master_pk, secret, salt, reward, 0)
    contract.accept(breaker_pk, reward, 1)

    chain = StepChain(program, address)
    out = chain.create(master_sk, secret, salt)
    breaker = ConsistentCodebreaker(rng)
    while not out.is_solved and fsm.codebreaker_may_act(out.turn_count):
        guess = breaker.propose()
        chain.guess(breaker_sk, guess)
        out = chain.clue(master_sk, secret, salt)
        breaker.observe(guess, expand_clue(out.last_compressed_clue))
    chain.validate()

    final, att = chain.latest
    winner_pk = breaker_pk if final.is_solved else master_pk
    contract.submit_proof(breaker_pk, final, att, 2, claimed_winner=winner_pk)
    return _row(contract, secret, 2, final.is_solved)


def _row(contract: MastermindContract, secret: int, now: int, solved: bool) -> dict:
    s = contract.state()
    return {
        "address": contract.address,
        "secret": secret,
        "turns": s.turn_count,
        "guesses": s.turn_count // 2,
        "solved": bool(solved),
        "winner": "codebreaker" if contract.winner(now) == s.code_breaker_id else "codemaster",
        "events": len(contract.events),
    }


def run(cfg: FullConfig) -> pd.DataFrame:
    rng = np.random.default_rng(cfg.sim.seed)
    fsm = RulesFSM.from_config(cfg)
    play = play_ledger_game if cfg.sim.mode == "ledger" else play_step_game
    rows = []
    for g in range(cfg.sim.n_games):
        row = play(fsm, rng, cfg.sim.reward, f"game-{g}")
        row["mode"] = cfg.sim.mode
        rows.append(row)
    logger.info("played %d %s games", len(rows), cfg.sim.mode)
    return pd.DataFrame(rows)


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", type=str, default="")
    ap.add_argument("--n_games", type=int, default=None)
    ap.add_argument("--mode", choices=MODES, default=None)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--out", type=str, default=None)
    args = ap.parse_args()

    cfg = load_config(args.config) if args.config else FullConfig()
    overrides = {k: v for k, v in vars(args).items() if k != "config" and v is not None}
    cfg = cfg.model_copy(update={"sim": cfg.sim.model_copy(update=overrides)})
    configure_logging(cfg.logging)

    df = run(cfg)
    out = Path(cfg.sim.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out, index=False)
    print(summarize(df).to_string())
    print("Saved", out)


if __name__ == "__main__":
    main()
