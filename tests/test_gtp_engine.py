# tests/test_gtp_engine.py
import os
import sys
import pytest
from gorules.goban_model import BLACK, WHITE, Board
from gorules.gtp_engine import EngineConfig, GtpEngine, GtpError, GtpSuggester
from gorules.suggest import PASS, RESIGN, request_suggestion

FAKE_GTP = os.path.join(os.path.dirname(__file__), "fake_gtp.py")


def _engine(answer="D4", **kwargs):
    cfg = EngineConfig(binary_path=sys.executable, extra_args=[FAKE_GTP, answer])
    return GtpEngine(cfg, **kwargs)


def test_engine_command_line():
    cfg = EngineConfig(binary_path="katago", start_option="gtp", model_file="m.bin.gz",
                       config_file="gtp.cfg", threads=4, extra_args=["-quit-without-waiting"])
    assert cfg.command() == [
        "katago", "gtp", "-model", "m.bin.gz", "-config", "gtp.cfg", "-threads", "4",
        "-quit-without-waiting",
    ]


def test_command_before_start_raises():
    with pytest.raises(RuntimeError):
        _engine().send_command("clear_board")


def test_genmove_and_errors():
    with _engine() as engine:
        assert engine.running
        assert engine.genmove("b") == "d4"
        with pytest.raises(GtpError):
            engine.send_command("no_such_command")
        # the engine is still usable after an error
        engine.clear_board()
    assert not engine.running
    assert "fake engine warming up" in engine.log_lines


def test_set_position_sends_every_stone():
    b = Board.from_rows([
        "B....",
        ".....",
        "..W..",
        ".....",
        "....B",
    ])
    with _engine() as engine:
        engine.set_position(b, komi=6.5)
        stones = engine.send_command("list_stones").split(",")
    assert sorted(stones) == ["B A5", "B E1", "W C3"]


def test_suggester_translates_vertex():
    b = Board(size=19)
    with _engine("Q16") as engine:
        suggester = GtpSuggester(engine, komi=6.5)
        assert suggester.suggest_move(b, BLACK, None) == (15, 3)


@pytest.mark.parametrize("answer, expected", [("pass", PASS), ("resign", RESIGN), ("T25", PASS)])
def test_suggester_signals(answer, expected):
    with _engine(answer) as engine:
        assert GtpSuggester(engine)(Board(size=19), WHITE, None) == expected


def test_engine_failure_becomes_pass():
    with _engine("--fail") as engine:
        suggester = GtpSuggester(engine)
        with pytest.raises(GtpError):
            suggester.suggest_move(Board(size=9), BLACK, None)
        assert request_suggestion(suggester, Board(size=9), BLACK, timeout=10) == PASS


def test_engine_timeout_becomes_pass():
    engine = _engine("--hang", command_timeout=0.2)
    engine.start()
    try:
        with pytest.raises(TimeoutError):
            engine.genmove("b")
        assert request_suggestion(GtpSuggester(engine), Board(size=9), BLACK, timeout=0.5) == PASS
    finally:
        engine.stop(timeout=0.5)
    assert not engine.running
