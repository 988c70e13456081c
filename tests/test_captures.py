# tests/test_captures.py
from gorules.goban_model import BLACK, WHITE, Board, attempt_move, group_and_liberties


def test_single_capture():
    # white in the centre of a 3x3, black fills the last liberty
    b = Board.from_rows([
        ".B.",
        "BWB",
        "...",
    ])
    r = attempt_move(b, 1, 2, BLACK, [])
    assert r.ok
    assert r.captured == 1
    assert r.board.get((1, 1)) is None
    assert r.board.count(WHITE) == 0


def test_multi_stone_capture():
    b = Board.from_rows([
        ".WW..",
        "WBBW.",
        ".W...",
        ".....",
        ".....",
    ])
    r = attempt_move(b, 2, 2, WHITE, [])
    assert r.ok
    assert r.captured == 2
    assert r.board.get((1, 1)) is None
    assert r.board.get((2, 1)) is None
    assert r.board.count(BLACK) == 0


def test_capture_before_suicide():
    # (0,0) has no liberty of its own, but it takes the last liberty of W(1,0)
    b = Board.from_rows([
        ".WB..",
        "WB...",
        ".....",
        ".....",
        ".....",
    ])
    r = attempt_move(b, 0, 0, BLACK, [])
    assert r.ok
    assert r.captured == 1
    assert r.board.get((1, 0)) is None
    assert r.board.get((0, 1)) == WHITE
    _, libs = group_and_liberties(r.board, 0, 0)
    assert libs == 1


def test_every_qualifying_group_is_captured():
    # the same point removes two separate white stones
    b = Board.from_rows([
        ".WB..",
        "WB...",
        "B....",
        ".....",
        ".....",
    ])
    r = attempt_move(b, 0, 0, BLACK, [])
    assert r.ok
    assert r.captured == 2
    assert r.board.get((1, 0)) is None
    assert r.board.get((0, 1)) is None
    _, libs = group_and_liberties(r.board, 0, 0)
    assert libs == 2


def test_no_capture_while_liberty_remains():
    b = Board.from_rows([
        ".B.",
        "BW.",
        "...",
    ])
    r = attempt_move(b, 1, 2, BLACK, [])
    assert r.ok
    assert r.captured == 0
    assert r.board.get((1, 1)) == WHITE


def test_capture_does_not_touch_input_board():
    b = Board.from_rows([
        ".B.",
        "BWB",
        "...",
    ])
    before = b.copy()
    attempt_move(b, 1, 2, BLACK, [])
    assert b == before
