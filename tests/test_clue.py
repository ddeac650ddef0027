from mastermind.rules.clue import compress_clue, expand_clue, is_solved, score


def test_exact_guess_is_all_hits():
    clue = score([5, 6, 3, 4], [5, 6, 3, 4])
    assert clue == [2, 2, 2, 2]
    assert is_solved(clue)


def test_hits_and_blows_per_position():
    # 5 aligned, 7 and 2 absent, 6 matches solution position 1
    assert score([5, 7, 2, 6], [5, 6, 3, 4]) == [2, 0, 0, 1]
    assert score([4, 3, 6, 5], [5, 6, 3, 4]) == [1, 1, 1, 1]
    assert not is_solved([2, 2, 2, 1])


def test_repeated_digits_collect_a_blow_per_match():
    assert score([1, 1, 1, 1], [1, 2, 1, 3]) == [3, 2, 3, 2]


def test_clue_word_layout():
    assert compress_clue([2, 2, 2, 2]) == 0b10101010
    assert compress_clue([2, 0, 0, 1]) == 0b10000001
    assert expand_clue(0b10000001) == [2, 0, 0, 1]
