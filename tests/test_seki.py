# tests/test_seki.py
from gorules.goban_model import BLACK, WHITE, Board, attempt_move, group_and_liberties

# B(1,0) and W(0,1) share their only two liberties (0,0) and (1,1).
SEKI = [
    ".BW..",
    "W.W..",
    "BBW..",
    ".....",
    ".....",
]


def test_seki_groups_keep_shared_liberties():
    b = Board.from_rows(SEKI)
    assert group_and_liberties(b, 1, 0) == ([(1, 0)], 2)
    assert group_and_liberties(b, 0, 1) == ([(0, 1)], 2)


def test_filling_a_shared_liberty_is_legal_self_atari():
    b = Board.from_rows(SEKI)
    r = attempt_move(b, 0, 0, BLACK, [])
    assert r.ok and r.captured == 0
    stones, libs = group_and_liberties(r.board, 0, 0)
    assert sorted(stones) == [(0, 0), (1, 0)]
    assert libs == 1

    # and the opponent takes the two stones at the remaining liberty
    r2 = attempt_move(r.board, 1, 1, WHITE, [])
    assert r2.ok and r2.captured == 2
    assert r2.board.get((0, 0)) is None
    assert r2.board.get((1, 0)) is None
