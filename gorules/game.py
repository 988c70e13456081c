# game.py
# Caller-side game state: whose turn it is, prisoners, ko history, passes,
# resignation and the human-readable game log. All board logic is delegated
# to goban_model.attempt_move.
import enum
from collections import namedtuple
from typing import Callable, Dict, List, Optional

from gorules.goban_model import (
    BLACK, DEFAULT_SIZE, KOMI, Board, IllegalMove, MoveOutcome, attempt_move,
    color_name, format_vertex, opponent,
)

DEBUG = False


class GameOver(IllegalMove): pass


class GameStatus(enum.Enum):
    IN_PROGRESS = 'in_progress'
    ENDED = 'ended'


class EndReason(enum.Enum):
    TWO_CONSECUTIVE_PASSES = 'two_consecutive_passes'
    RESIGNATION = 'resignation'


Position = namedtuple('Position', ['board', 'captured_by_black', 'captured_by_white', 'move_number'])

# scorer(final_board, captures, komi) -> winning color or None
Scorer = Callable[[Board, Dict[str, int], float], Optional[str]]


class Game:
    """
    One game between Black and White.

    The official Position is only ever replaced, never mutated. `history`
    gets one board fingerprint per ply (moves and passes) and is the input
    to the ko check.
    """

    def __init__(self, size: int = DEFAULT_SIZE, komi: float = KOMI, superko: bool = False,
                 scorer: Optional[Scorer] = None):
        self.size = size
        self.komi = komi
        self.superko = superko
        self.scorer = scorer
        self.on_log_line: Optional[Callable[[str], None]] = None
        self.reset()

    @classmethod
    def from_settings(cls, settings, scorer: Optional[Scorer] = None) -> "Game":
        return cls(size=settings.board_size, komi=settings.komi, superko=settings.superko, scorer=scorer)

    def reset(self):
        self.position = Position(Board(self.size), 0, 0, 0)
        self.to_move = BLACK
        self.history: List[str] = [self.position.board.fingerprint()]
        self.last_move = None
        self.passes = 0
        self.status = GameStatus.IN_PROGRESS
        self.end_reason: Optional[EndReason] = None
        self.winner: Optional[str] = None
        self.log: List[str] = []
        self.add_log("Game started. Black to play.")

    # --- read-only views ---
    @property
    def board(self) -> Board:
        return self.position.board

    @property
    def captures(self) -> Dict[str, int]:
        return {'B': self.position.captured_by_black, 'W': self.position.captured_by_white}

    @property
    def is_over(self) -> bool:
        return self.status is GameStatus.ENDED

    def current_player(self):
        """Return color to move as 'B' or 'W'."""
        return self.to_move

    # --- log ---
    def add_log(self, line: str):
        self.log.append(line)
        if DEBUG:
            print("[Game]", line)
        if self.on_log_line:
            self.on_log_line(line)

    def _label(self, x: int, y: int) -> str:
        if self.board.in_bounds(x, y):
            return format_vertex(x, y, self.size)
        return f"({x}, {y})"

    def _ensure_in_progress(self):
        if self.status is GameStatus.ENDED:
            raise GameOver("Game is over")

    # --- main API ---
    def play(self, x: int, y: int) -> MoveOutcome:
        """Try a stone for the side to move. Illegal attempts leave the game untouched."""
        self._ensure_in_progress()
        color = self.to_move
        outcome = attempt_move(self.board, x, y, color, self.history, superko=self.superko)
        if not outcome.ok:
            self.add_log(f"Illegal move at {self._label(x, y)}: {outcome.error.value}")
            return outcome

        pos = self.position
        black, white = pos.captured_by_black, pos.captured_by_white
        if color == BLACK:
            black += outcome.captured
        else:
            white += outcome.captured
        self.position = Position(outcome.board, black, white, pos.move_number + 1)
        self.history.append(outcome.board.fingerprint())
        self.last_move = (x, y)
        self.passes = 0
        self.to_move = opponent(color)

        msg = f"{color_name(color)} plays {self._label(x, y)}"
        if outcome.captured:
            msg += f" and captures {outcome.captured}"
        self.add_log(msg)
        return outcome

    def play_or_raise(self, x: int, y: int) -> MoveOutcome:
        return self.play(x, y).raise_for_error()

    def pass_turn(self):
        self._ensure_in_progress()
        color = self.to_move
        self.add_log(f"{color_name(color)} passes.")
        pos = self.position
        self.position = pos._replace(move_number=pos.move_number + 1)
        # a pass repeats the unchanged board
        self.history.append(self.board.fingerprint())
        self.passes += 1
        self.to_move = opponent(color)
        if self.passes >= 2:
            self._end(EndReason.TWO_CONSECUTIVE_PASSES)

    def resign(self):
        self._ensure_in_progress()
        loser = self.to_move
        self.winner = opponent(loser)
        self._end(EndReason.RESIGNATION)
        self.add_log(f"{color_name(loser)} resigns. {color_name(self.winner)} wins!")

    def _end(self, reason: EndReason):
        self.status = GameStatus.ENDED
        self.end_reason = reason
        if reason is EndReason.TWO_CONSECUTIVE_PASSES:
            if self.scorer is not None:
                self.winner = self.scorer(self.board, self.captures, self.komi)
                result = f"{color_name(self.winner)} wins." if self.winner else "No winner determined."
                self.add_log(f"Game over after two passes. {result}")
            else:
                self.add_log("Game over after two passes. Score is left to the players.")
