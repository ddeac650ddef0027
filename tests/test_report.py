import pandas as pd

from conftest import SALT, SECRET
from mastermind.eval.report import history_frame


def test_history_frame_decodes_words(accepted, master, breaker):
    assert history_frame(accepted).empty
    accepted.submit_guess(breaker[1], 5634, 2)
    accepted.submit_clue(master[1], SECRET, SALT, 3)
    accepted.submit_guess(breaker[1], 1234, 4)

    df = history_frame(accepted)
    assert df["attempt"].tolist() == [1, 2]
    assert df["guess"].tolist() == [5634, 1234]
    assert df["digits"].iloc[0] == [5, 6, 3, 4]
    assert df["clue"].iloc[0] == [0, 0, 2, 2]
    assert df["hits"].iloc[0] == 2
    assert df["clue"].iloc[1] is None
    assert pd.isna(df["hits"].iloc[1])
