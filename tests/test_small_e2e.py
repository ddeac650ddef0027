import numpy as np

from mastermind.config import FullConfig, GameCfg, SimCfg
from mastermind.constants import ACTIONS
from mastermind.eval.report import summarize
from mastermind.rules.fsm import RulesFSM
from mastermind.sim.simulate import all_combinations, run

GUESS, CLUE = ACTIONS.index("guess"), ACTIONS.index("clue")


def test_e2e_random_policy_invariants():
    rng = np.random.default_rng(0)
    fsm = RulesFSM()
    combos = all_combinations()
    assert len(combos) == 7 * 6 * 5 * 4
    for _ in range(20):
        secret = int(rng.choice(combos))
        s = fsm.initialize(fsm.new_game(), actor_id="M", secret=secret, salt=7, address="g", reward=1, now=0)
        s = fsm.accept(s, actor_id="B", reward=1, now=1)
        now = 1
        while not fsm.is_finalized(s, now):
            now += 1
            actor = "B" if s.turn_count % 2 else "M"
            mask = fsm.legal_actions(s, actor, now)["action"]
            assert mask[GUESS] != mask[CLUE]
            before = s
            if mask[GUESS]:
                s = fsm.submit_guess(s, actor_id=actor, guess=int(rng.choice(combos)), now=now)
            else:
                s = fsm.submit_clue(s, actor_id=actor, secret=secret, salt=7, address="g", now=now)
            assert s.turn_count == before.turn_count + 1
            assert s.is_solved >= before.is_solved
            assert s.turn_count <= 2 * fsm.max_attempts + 1
            assert all(g == 0 for g in fsm.guesses.unpack(s.guess_history)[s.turn_count // 2:])
        assert fsm.winner(s, now) == ("B" if s.is_solved else "M")


def test_simulated_games_both_modes():
    for mode in ("ledger", "steps"):
        df = run(FullConfig(sim=SimCfg(n_games=6, seed=3, mode=mode)))
        assert len(df) == 6
        assert (df["turns"] <= 15).all()
        assert ((df["winner"] == "codebreaker") == df["solved"]).all()
        assert (df.loc[df["solved"], "turns"] % 2 == 1).all()
        summary = summarize(df)
        assert summary.loc[mode, "n"] == 6
        assert 0.0 <= summary.loc[mode, "solve_rate"] <= 1.0


def test_same_seed_same_games():
    cfg = FullConfig(sim=SimCfg(n_games=4, seed=11))
    a, b = run(cfg), run(cfg)
    assert a["secret"].tolist() == b["secret"].tolist()
    assert a["turns"].tolist() == b["turns"].tolist()


def test_short_turns_end_on_the_deadline():
    cfg = FullConfig(game=GameCfg(per_turn_duration=1), sim=SimCfg(n_games=5, seed=2, mode="ledger"))
    df = run(cfg)
    assert len(df) == 5
    assert ((df["winner"] == "codebreaker") == df["solved"]).all()
    assert (df.loc[~df["solved"], "winner"] == "codemaster").all()
