"""Grid coordinates, moves and immutable per-generation board snapshots."""

import numpy as np
from enum import Enum, IntEnum
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple


class Coordinate(NamedTuple):
    """A (row, col) cell position. Row indices grow downward."""
    row: int
    col: int

    def step(self, move: "Move") -> "Coordinate":
        """Position reached by applying `move` from here."""
        dr, dc = move.delta
        return Coordinate(self.row + dr, self.col + dc)

    def previous(self, move: "Move") -> "Coordinate":
        """Position from which `move` lands here."""
        dr, dc = move.delta
        return Coordinate(self.row - dr, self.col - dc)

    def manhattan(self, other: "Coordinate") -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)


class Move(IntEnum):
    """One agent action; every action costs exactly one generation."""
    WAIT = 1
    UP = 2
    DOWN = 3
    LEFT = 4
    RIGHT = 5

    @property
    def delta(self) -> Tuple[int, int]:
        return _DELTAS[self]

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> "Move":
        for move, sym in _SYMBOLS.items():
            if sym == symbol.upper():
                return move
        raise ValueError(f"unknown move symbol: {symbol!r}")

    @classmethod
    def between(cls, a: Coordinate, b: Coordinate) -> "Move":
        """The move leading from `a` to `b`."""
        delta = (b.row - a.row, b.col - a.col)
        for move, d in _DELTAS.items():
            if d == delta:
                return move
        raise ValueError(f"{a} and {b} are not a single move apart")


_DELTAS = {
    Move.WAIT: (0, 0),
    Move.UP: (-1, 0),
    Move.DOWN: (1, 0),
    Move.LEFT: (0, -1),
    Move.RIGHT: (0, 1),
}

_SYMBOLS = {
    Move.WAIT: "W",
    Move.UP: "U",
    Move.DOWN: "D",
    Move.LEFT: "L",
    Move.RIGHT: "R",
}


class CellState(Enum):
    """Cell variants, valued by their character in the maze text format."""
    OPEN = "0"
    STONE = "1"
    START = "3"
    GOAL = "4"

    @property
    def is_open(self) -> bool:
        return self is not CellState.STONE


class BoundaryPolicy(Enum):
    """How neighbor lookups treat cells outside the grid."""
    OPEN = "open"      # out-of-grid neighbors never count as Stone
    STONE = "stone"    # out-of-grid neighbors always count as Stone
    WRAP = "wrap"      # toroidal grid


class Board:
    """Immutable snapshot of one generation.

    Stone flags live in a read-only boolean array (one byte per cell). The
    Start and Goal markers are fixed for the whole run; a marked cell that is
    Stone in some generation reports STONE for that generation.
    """

    __slots__ = ("_stones", "_generation", "_start", "_goal")

    def __init__(
        self,
        stones,
        generation: int = 0,
        start: Optional[Coordinate] = None,
        goal: Optional[Coordinate] = None,
    ):
        arr = np.array(stones, dtype=bool)
        if arr.ndim != 2 or arr.size == 0:
            raise ValueError(f"board must be a non-empty 2D grid, got shape {arr.shape}")
        arr.setflags(write=False)
        self._stones = arr
        self._generation = int(generation)
        self._start = self._check_marker(start, "start")
        self._goal = self._check_marker(goal, "goal")

    def _check_marker(self, coord: Optional[Sequence[int]], name: str) -> Optional[Coordinate]:
        if coord is None:
            return None
        coord = Coordinate(*coord)
        if not self.in_bounds(coord):
            raise ValueError(f"{name} {tuple(coord)} is outside the {self.height}x{self.width} grid")
        return coord

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[CellState]], generation: int = 0) -> "Board":
        """Build a board from rows of cell states, picking up the markers."""
        start = goal = None
        stones = []
        for i, row in enumerate(rows):
            stones.append([state is CellState.STONE for state in row])
            for j, state in enumerate(row):
                if state is CellState.START:
                    start = Coordinate(i, j)
                elif state is CellState.GOAL:
                    goal = Coordinate(i, j)
        widths = {len(r) for r in stones}
        if len(widths) > 1:
            raise ValueError("all rows must have the same length")
        return cls(stones, generation=generation, start=start, goal=goal)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def start(self) -> Optional[Coordinate]:
        return self._start

    @property
    def goal(self) -> Optional[Coordinate]:
        return self._goal

    @property
    def stones(self) -> np.ndarray:
        """Read-only (height, width) array of Stone flags."""
        return self._stones

    @property
    def open_mask(self) -> np.ndarray:
        return ~self._stones

    @property
    def shape(self) -> Tuple[int, int]:
        return self._stones.shape

    @property
    def height(self) -> int:
        return self._stones.shape[0]

    @property
    def width(self) -> int:
        return self._stones.shape[1]

    def stone_count(self) -> int:
        return int(np.count_nonzero(self._stones))

    def in_bounds(self, coord: Sequence[int]) -> bool:
        row, col = coord
        return 0 <= row < self.height and 0 <= col < self.width

    def state(self, coord: Sequence[int]) -> CellState:
        coord = Coordinate(*coord)
        if not self.in_bounds(coord):
            raise KeyError(coord)
        if self._stones[coord]:
            return CellState.STONE
        if coord == self._start:
            return CellState.START
        if coord == self._goal:
            return CellState.GOAL
        return CellState.OPEN

    def is_open(self, coord: Sequence[int]) -> bool:
        """True when `coord` is inside the grid and not Stone."""
        return self.in_bounds(coord) and not self._stones[tuple(coord)]

    def with_stones(self, stones, generation: int) -> "Board":
        """A board with the same markers and the given Stone layout."""
        return Board(stones, generation=generation, start=self._start, goal=self._goal)

    def to_rows(self) -> List[List[CellState]]:
        return [[self.state((i, j)) for j in range(self.width)] for i in range(self.height)]

    def to_bytes(self) -> bytes:
        """Bit-packed Stone layout."""
        return np.packbits(self._stones, axis=None).tobytes()

    def __getitem__(self, coord: Sequence[int]) -> CellState:
        return self.state(coord)

    def __contains__(self, coord) -> bool:
        try:
            return self.in_bounds(coord)
        except (TypeError, ValueError):
            return False

    def __iter__(self) -> Iterator[Coordinate]:
        for i in range(self.height):
            for j in range(self.width):
                yield Coordinate(i, j)

    def items(self) -> Iterator[Tuple[Coordinate, CellState]]:
        for coord in self:
            yield coord, self.state(coord)

    def __len__(self) -> int:
        return self._stones.size

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self._generation == other._generation
            and self._start == other._start
            and self._goal == other._goal
            and self.shape == other.shape
            and np.array_equal(self._stones, other._stones)
        )

    def __hash__(self):
        return hash((self._generation, self.shape, self._start, self._goal, self.to_bytes()))

    def __repr__(self):
        return (
            f"Board(generation={self._generation}, shape={self.height}x{self.width}, "
            f"stones={self.stone_count()})"
        )
