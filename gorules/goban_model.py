# goban_model.py
import enum
import hashlib
from collections import namedtuple
from typing import Iterator, List, Optional, Sequence, Tuple

BLACK = 'B'
WHITE = 'W'
EMPTY = None

DEFAULT_SIZE = 19
KOMI = 6.5

Point = Tuple[int, int]


# Exceptions
class IllegalMove(Exception): pass


class OutOfBounds(IllegalMove): pass


class OccupiedPoint(IllegalMove): pass


class Suicide(IllegalMove): pass


class KoViolation(IllegalMove): pass


class MoveError(enum.Enum):
    OUT_OF_BOUNDS = 'Out of bounds'
    OCCUPIED = 'Occupied'
    SUICIDE = 'Suicide'
    KO_VIOLATION = 'Ko violation'

    @property
    def exception(self):
        return _ERROR_EXCEPTIONS[self]


_ERROR_EXCEPTIONS = {
    MoveError.OUT_OF_BOUNDS: OutOfBounds,
    MoveError.OCCUPIED: OccupiedPoint,
    MoveError.SUICIDE: Suicide,
    MoveError.KO_VIOLATION: KoViolation,
}


class MoveOutcome(namedtuple('MoveOutcome', ['board', 'captured', 'error'])):
    """Result of attempt_move: either (board, captured) or an error kind."""
    __slots__ = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self):
        if self.error is not None:
            raise self.error.exception(self.error.value)
        return self


def opponent(color):
    return WHITE if color == BLACK else BLACK


def color_name(color) -> str:
    return 'Black' if color == BLACK else 'White'


class Board:
    """
    Square Go board stored as a flat list, index = y * size + x.
    Cells hold None (empty), 'B' or 'W'.

    Boards are treated as values: every operation that changes stones
    returns a new Board and never touches the receiver's storage.
    """
    __slots__ = ('size', '_cells')

    def __init__(self, size: int = DEFAULT_SIZE, cells: Optional[Sequence] = None):
        if size < 1:
            raise ValueError(f"Board size must be positive, got {size}")
        self.size = size
        if cells is None:
            self._cells = [EMPTY] * (size * size)
        else:
            if len(cells) != size * size:
                raise ValueError(f"Expected {size * size} cells for a {size}x{size} board, got {len(cells)}")
            for v in cells:
                if v not in (EMPTY, BLACK, WHITE):
                    raise ValueError(f"Invalid cell value: {v!r}")
            self._cells = list(cells)

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "Board":
        """Build a board from text rows of '.', 'B' and 'W' (spaces ignored), top row is y=0."""
        rows = [r.replace(' ', '') for r in rows]
        size = len(rows)
        cells = []
        for row in rows:
            if len(row) != size:
                raise ValueError(f"Row {row!r} does not match board size {size}")
            cells.extend(EMPTY if ch == '.' else ch for ch in row)
        return cls(size, cells)

    # --- helpers ---
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def neighbors(self, x: int, y: int) -> List[Point]:
        n = self.size
        out = []
        if x > 0:
            out.append((x - 1, y))
        if x < n - 1:
            out.append((x + 1, y))
        if y > 0:
            out.append((x, y - 1))
        if y < n - 1:
            out.append((x, y + 1))
        return out

    def get(self, point: Optional[Point]):
        if point is None: return None
        x, y = point
        return self._cells[y * self.size + x]

    def copy(self) -> "Board":
        b = Board.__new__(Board)
        b.size = self.size
        b._cells = self._cells[:]
        return b

    def stones(self) -> Iterator[Tuple[Point, str]]:
        n = self.size
        for i, v in enumerate(self._cells):
            if v is not None:
                yield (i % n, i // n), v

    def count(self, color) -> int:
        return self._cells.count(color)

    def rows(self) -> List[List[Optional[str]]]:
        """Return a nested copy suitable for UI code: list of rows with None/'B'/'W'."""
        n = self.size
        return [self._cells[y * n:(y + 1) * n] for y in range(n)]

    def pretty(self) -> str:
        return '\n'.join(''.join('.' if v is None else v for v in row) for row in self.rows())

    def fingerprint(self) -> str:
        # stones only; captures, move number and side to move are not part of it
        raw = ''.join('.' if v is None else v for v in self._cells).encode('utf-8')
        return hashlib.sha256(raw).hexdigest()

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return self.size == other.size and self._cells == other._cells

    def __hash__(self):
        return hash((self.size, tuple(self._cells)))

    def __repr__(self):
        return f"<Board size={self.size} black={self.count(BLACK)} white={self.count(WHITE)}>"


# GTP column letters, 'I' is skipped
COLUMNS = 'ABCDEFGHJKLMNOPQRSTUVWXYZ'


def format_vertex(x: int, y: int, size: int) -> str:
    """(0, 0) on a 19x19 board is 'A19'; rows count up from the bottom edge."""
    return f"{COLUMNS[x]}{size - y}"


def parse_vertex(vertex: str, size: int) -> Optional[Point]:
    """Inverse of format_vertex. Returns None for anything that is not an on-board vertex."""
    v = vertex.strip().upper()
    if len(v) < 2 or v[0] not in COLUMNS or not v[1:].isdigit():
        return None
    x = COLUMNS.index(v[0])
    y = size - int(v[1:])
    if not (0 <= x < size and 0 <= y < size):
        return None
    return x, y


def in_bounds(board: Board, x: int, y: int) -> bool:
    return board.in_bounds(x, y)


def neighbors(board: Board, x: int, y: int) -> List[Point]:
    return board.neighbors(x, y)


def group_and_liberties(board: Board, x: int, y: int) -> Tuple[List[Point], int]:
    """Return (stones, liberty_count) for the group containing (x, y).

    An empty start point gives ([], 0).
    """
    n = board.size
    cells = board._cells
    color = cells[y * n + x]
    if color is None:
        return [], 0
    seen = bytearray(n * n)
    seen[y * n + x] = 1
    liberties = set()
    stones = []
    stack = [(x, y)]
    while stack:
        p = stack.pop()
        stones.append(p)
        for nx, ny in board.neighbors(*p):
            i = ny * n + nx
            v = cells[i]
            if v is None:
                liberties.add(i)
            elif v == color and not seen[i]:
                seen[i] = 1
                stack.append((nx, ny))
    return stones, len(liberties)


def attempt_move(board: Board, x: int, y: int, player, history: Sequence[str],
                 superko: bool = False) -> MoveOutcome:
    """
    Decide whether `player` may play at (x, y) and compute the resulting board.

    history holds one fingerprint per ply, the latest position last. With the
    default simple ko only history[-2] is compared; superko=True compares the
    whole history instead. Neither input is modified.
    """
    # 1. bounds
    if not board.in_bounds(x, y):
        return MoveOutcome(None, 0, MoveError.OUT_OF_BOUNDS)
    # 2. occupancy
    if board.get((x, y)) is not None:
        return MoveOutcome(None, 0, MoveError.OCCUPIED)

    # 3. tentative placement on a working copy
    work = board.copy()
    n = work.size
    work._cells[y * n + x] = player

    # 4. remove every adjacent enemy group left without liberties
    enemy = opponent(player)
    captured = 0
    for nx, ny in work.neighbors(x, y):
        if work._cells[ny * n + nx] != enemy:
            continue
        stones, libs = group_and_liberties(work, nx, ny)
        if libs == 0:
            for sx, sy in stones:
                work._cells[sy * n + sx] = None
            captured += len(stones)

    # 5. suicide, judged after captures
    _, own_libs = group_and_liberties(work, x, y)
    if own_libs == 0:
        return MoveOutcome(None, 0, MoveError.SUICIDE)

    # 6. repetition
    fp = work.fingerprint()
    if superko:
        if fp in history:
            return MoveOutcome(None, 0, MoveError.KO_VIOLATION)
    elif len(history) > 1 and history[-2] == fp:
        return MoveOutcome(None, 0, MoveError.KO_VIOLATION)

    return MoveOutcome(work, captured, None)
