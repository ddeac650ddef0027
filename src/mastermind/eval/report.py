from __future__ import annotations
import pandas as pd

from mastermind.codec.combination import decode
from mastermind.constants import BLOW, HIT
from mastermind.ledger.contract import MastermindContract
from mastermind.rules.clue import expand_clue


def history_frame(contract: MastermindContract) -> pd.DataFrame:
    """Decode a game's packed history words into one row per played attempt."""
    s = contract.state()
    fsm = contract.fsm
    guesses = fsm.guesses.unpack(s.guess_history)
    clues = fsm.clues.unpack(s.clue_history)
    rows = []
    for attempt in range(s.turn_count // 2):
        played = s.turn_count > 2 * attempt + 2  # clue given for this attempt
        clue = expand_clue(clues[attempt]) if played else None
        rows.append({
            "attempt": attempt + 1,
            "guess": guesses[attempt],
            "digits": decode(guesses[attempt]),
            "clue": clue,
            "hits": clue.count(HIT) if clue else None,
            "blows": clue.count(BLOW) if clue else None,
        })
    return pd.DataFrame(rows, columns=["attempt", "guess", "digits", "clue", "hits", "blows"])


def summarize(sims: pd.DataFrame) -> pd.DataFrame:
    """Per-mode solve rate, guesses used and winner shares."""
    g = sims.groupby("mode")
    out = pd.DataFrame({
        "n": g.size(),
        "solve_rate": g["solved"].mean(),
        "mean_guesses": g["guesses"].mean(),
        "max_guesses": g["guesses"].max(),
        "codebreaker_share": g["winner"].apply(lambda w: float((w == "codebreaker").mean())),
    })
    return out.round(3)
