# suggest.py
# Bridge to move-suggestion services. A service is any callable
#   suggest_move(board, player, last_move) -> (x, y) | PASS | RESIGN
# Its answer is never trusted: it is normalized here and re-validated by the
# rule engine before it touches the game. Failures and timeouts become PASS.
import json
import queue
import threading
from typing import Any, Callable, Optional, Tuple, Union

from gorules.goban_model import Board, color_name, format_vertex, parse_vertex

DEBUG = False

PASS = 'pass'
RESIGN = 'resign'

MoveOrSignal = Union[Tuple[int, int], str]
SuggestFn = Callable[[Board, str, Optional[Tuple[int, int]]], Any]


def board_to_text(board: Board) -> str:
    """One row per line, '.' empty, 'B' black, 'W' white."""
    return board.pretty()


def describe_position(board: Board, player: str, last_move: Optional[Tuple[int, int]] = None) -> str:
    """Plain-text request for text based services (language models and the like)."""
    last = f"({last_move[0]}, {last_move[1]})" if last_move else "None"
    n = board.size
    return (
        f"Board size is {n}x{n}. You are playing {color_name(player)}.\n"
        f"Current board ('.' empty, 'B' black, 'W' white), first row is y=0:\n"
        f"{board_to_text(board)}\n"
        f"The last move was at: {last}.\n"
        f"Coordinates are 0-indexed: x is the column (0-{n - 1}), y is the row (0-{n - 1}).\n"
        'Reply with JSON only: {"x": number, "y": number}, {"action": "pass"} or {"action": "resign"}.'
    )


def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def normalize(suggestion, size: int) -> MoveOrSignal:
    """Map whatever a service returned to (x, y), PASS or RESIGN. Anything unusable is PASS."""
    if isinstance(suggestion, str):
        s = suggestion.strip().lower()
        if s == RESIGN:
            return RESIGN
        return PASS
    if isinstance(suggestion, (tuple, list)) and len(suggestion) == 2:
        x, y = suggestion
        if _is_int(x) and _is_int(y) and 0 <= x < size and 0 <= y < size:
            return x, y
    return PASS


def parse_reply(text: Optional[str], size: int) -> MoveOrSignal:
    """Parse a JSON reply of a text based service."""
    if not text:
        return PASS
    try:
        data = json.loads(text)
    except ValueError:
        if DEBUG:
            print("[Suggest] unparsable reply:", text)
        return PASS
    if not isinstance(data, dict):
        return PASS
    action = data.get("action")
    if isinstance(action, str):
        return normalize(action, size)
    return normalize((data.get("x"), data.get("y")), size)


def from_vertex(vertex: Optional[str], size: int) -> MoveOrSignal:
    """Translate a GTP vertex ('D4', 'pass', 'resign')."""
    if not vertex:
        return PASS
    v = vertex.strip().lower()
    if v in (PASS, RESIGN):
        return v
    pt = parse_vertex(v, size)
    return pt if pt is not None else PASS


def request_suggestion(suggest_move: SuggestFn, board: Board, player: str,
                       last_move: Optional[Tuple[int, int]] = None,
                       timeout: float = 30.0) -> MoveOrSignal:
    """
    Ask a service for a move on a private copy of `board`.

    The call runs on a daemon thread. If it raises or does not answer within
    `timeout` seconds the answer is PASS and the late result is dropped.
    """
    snapshot = board.copy()
    answers: "queue.Queue[Tuple[str, Any]]" = queue.Queue(maxsize=1)

    def worker():
        try:
            answers.put(("ok", suggest_move(snapshot, player, last_move)))
        except Exception as e:
            answers.put(("error", e))

    t = threading.Thread(target=worker, daemon=True)
    t.start()
    try:
        kind, value = answers.get(timeout=timeout)
    except queue.Empty:
        if DEBUG:
            print("[Suggest] no answer within", timeout, "s, passing")
        return PASS
    if kind == "error":
        if DEBUG:
            print("[Suggest] service error, passing:", value)
        return PASS
    return normalize(value, board.size)


def play_suggested(game, suggest_move: SuggestFn, timeout: float = 30.0) -> MoveOrSignal:
    """Let a service move for the side to play. Returns what was actually played."""
    suggestion = request_suggestion(suggest_move, game.board, game.to_move, game.last_move, timeout)
    if suggestion == RESIGN:
        game.resign()
        return RESIGN
    if suggestion == PASS:
        game.pass_turn()
        return PASS
    x, y = suggestion
    outcome = game.play(x, y)
    if not outcome.ok:
        game.add_log(f"Suggested move {format_vertex(x, y, game.size)} rejected, passing instead.")
        game.pass_turn()
        return PASS
    return suggestion
