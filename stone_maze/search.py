"""Earliest-arrival search over the time-expanded (coordinate, generation) graph.

Every action, including waiting, costs exactly one generation, so the
earliest arrival is found by a breadth-first layering on generation: the
whole frontier of generation g is expanded into generation g+1 before
anything at g+2 is looked at. The graph itself is never built; openness of a
cell at a generation is looked up on the board source.
"""

import hashlib
import logging
import numpy as np
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Sequence, Set, Tuple, Union

from .automaton import BoardSource
from .board import Board, Coordinate, Move
from .path import Path, SearchState, reconstruct_path

logger = logging.getLogger(__name__)

# Move codes stored in the per-generation predecessor layers.
_UNREACHED = 0
_ORIGIN = 255

# Fixed candidate order; the first move that reaches a cell in a layer wins.
ALL_MOVES = (Move.WAIT, Move.UP, Move.DOWN, Move.LEFT, Move.RIGHT)

LOG_INTERVAL = 1000


@dataclass
class SearchStats:
    """Work counters for one `find_path` call."""
    generations_explored: int = 0
    states_expanded: int = 0
    peak_frontier: int = 0


@dataclass(frozen=True)
class PathFound:
    path: Path
    stats: SearchStats = field(default_factory=SearchStats, compare=False)
    found: ClassVar[bool] = True
    status: ClassVar[str] = "found"

    @property
    def arrival_generation(self) -> int:
        return self.path.arrival_generation


@dataclass(frozen=True)
class Unreachable:
    """No path exists: the frontier emptied, or the search state started repeating."""
    generation: int
    reason: str
    stats: SearchStats = field(default_factory=SearchStats, compare=False)
    found: ClassVar[bool] = False
    status: ClassVar[str] = "unreachable"


@dataclass(frozen=True)
class BudgetExceeded:
    """The generation ceiling was hit; whether a path exists is unknown."""
    max_generation: int
    stats: SearchStats = field(default_factory=SearchStats, compare=False)
    found: ClassVar[bool] = False
    status: ClassVar[str] = "budget_exceeded"


@dataclass(frozen=True)
class StartBlocked:
    """The start cell is Stone at generation 0."""
    start: Coordinate
    found: ClassVar[bool] = False
    status: ClassVar[str] = "start_blocked"


SearchOutcome = Union[PathFound, Unreachable, BudgetExceeded, StartBlocked]


class VisitationRecord:
    """Predecessor layers and first-arrival bookkeeping for one search.

    Layer g holds, for every cell entered at generation g, the move that
    entered it. A layer is written once, when it is published, and never
    touched again. The settled record keeps the generation at which each
    coordinate was first reached; once set it is never overwritten.
    """

    def __init__(self, shape: Tuple[int, int], start: Coordinate):
        self.shape = shape
        self.start = Coordinate(*start)
        origin = np.zeros(shape, dtype=np.uint8)
        origin[self.start] = _ORIGIN
        self.layers: List[np.ndarray] = [origin]
        self._settled_at = np.full(shape, -1, dtype=np.int64)
        self._settled_at[self.start] = 0

    @property
    def latest_generation(self) -> int:
        return len(self.layers) - 1

    def in_bounds(self, coord: Sequence[int]) -> bool:
        row, col = coord
        return 0 <= row < self.shape[0] and 0 <= col < self.shape[1]

    def frontier(self, g: int) -> np.ndarray:
        """Mask of cells occupied at generation `g`."""
        return self.layers[g] != _UNREACHED

    def reached(self, coord: Sequence[int], g: int) -> bool:
        if not 0 <= g < len(self.layers) or not self.in_bounds(coord):
            return False
        return bool(self.layers[g][tuple(coord)] != _UNREACHED)

    def move_into(self, coord: Sequence[int], g: int) -> Optional[Move]:
        """Move that entered (coord, g); None for the origin or unreached states."""
        if not self.reached(coord, g):
            return None
        code = int(self.layers[g][tuple(coord)])
        if code == _ORIGIN:
            return None
        return Move(code)

    def add_layer(self, codes: np.ndarray) -> np.ndarray:
        """Publish the next generation's layer; returns the newly settled mask."""
        codes.setflags(write=False)
        g = len(self.layers)
        self.layers.append(codes)
        return self.settle(codes != _UNREACHED, g)

    def settle(self, reached: np.ndarray, g: int) -> np.ndarray:
        """Record `g` as the first arrival for reached cells not settled before.

        Already settled cells keep their generation. Returns the mask of
        cells settled by this call.
        """
        if reached.shape != self.shape:
            raise ValueError(f"mask shape {reached.shape} does not match grid {self.shape}")
        fresh = reached & (self._settled_at < 0)
        self._settled_at[fresh] = g
        return fresh

    def settled_generation(self, coord: Sequence[int]) -> Optional[int]:
        """First generation `coord` was reached; None if never, or off the grid."""
        if not self.in_bounds(coord):
            return None
        g = int(self._settled_at[tuple(coord)])
        return None if g < 0 else g

    def predecessor(self, coord: Sequence[int]) -> Optional[SearchState]:
        """State the agent came from when `coord` was first settled."""
        g = self.settled_generation(coord)
        if g is None:
            return None
        move = self.move_into(coord, g)
        if move is None:
            return None
        return SearchState(Coordinate(*coord).previous(move), g - 1)

    def settled_count(self) -> int:
        return int(np.count_nonzero(self._settled_at >= 0))


def shift_mask(mask: np.ndarray, move: Move) -> np.ndarray:
    """Cells reached by applying `move` from every set cell; nothing wraps."""
    dr, dc = move.delta
    h, w = mask.shape
    out = np.zeros_like(mask)
    out[max(0, dr):h - max(0, -dr), max(0, dc):w - max(0, -dc)] = \
        mask[max(0, -dr):h - max(0, dr), max(0, -dc):w - max(0, dc)]
    return out


class TimeExpandedSearch:
    """Breadth-first earliest-arrival search driven by a board source."""

    def __init__(
        self,
        source: BoardSource,
        allow_wait: bool = True,
        release_boards: bool = False,
        detect_cycles: bool = True,
    ):
        self.source = source
        self.allow_wait = allow_wait
        self.release_boards = release_boards
        self.detect_cycles = detect_cycles
        self.moves = ALL_MOVES if allow_wait else ALL_MOVES[1:]
        self.record: Optional[VisitationRecord] = None

    def expand(self, frontier: np.ndarray, open_next: np.ndarray) -> np.ndarray:
        """Predecessor codes for the layer after `frontier`.

        A cell enters the next layer iff it is Open there and some frontier
        cell reaches it with one allowed move.
        """
        codes = np.zeros(frontier.shape, dtype=np.uint8)
        for move in self.moves:
            arrived = shift_mask(frontier, move) & open_next & (codes == _UNREACHED)
            codes[arrived] = move
        return codes

    @staticmethod
    def _fingerprint(board: Board, frontier: np.ndarray) -> bytes:
        digest = hashlib.blake2b(board.to_bytes(), digest_size=32)
        digest.update(np.packbits(frontier, axis=None).tobytes())
        return digest.digest()

    def find_path(
        self,
        start: Sequence[int],
        goal: Sequence[int],
        max_generation: int,
    ) -> SearchOutcome:
        """Earliest arrival at `goal` from `start` at generation 0.

        Returns a PathFound, Unreachable, BudgetExceeded or StartBlocked
        outcome. Generations up to the arrival layer (at most
        `max_generation`) are requested from the source, in order.
        """
        start, goal = Coordinate(*start), Coordinate(*goal)
        if max_generation < 0:
            raise ValueError("max_generation must be >= 0")

        board = self.source.generation(0)
        for name, coord in (("start", start), ("goal", goal)):
            if not board.in_bounds(coord):
                raise ValueError(f"{name} {tuple(coord)} is outside the {board.height}x{board.width} grid")

        if not board.is_open(start):
            logger.info("Start %s is Stone at generation 0", tuple(start))
            return StartBlocked(start)

        record = VisitationRecord(board.shape, start)
        self.record = record
        stats = SearchStats(peak_frontier=1)
        frontier = record.frontier(0)

        if start == goal:
            return PathFound(reconstruct_path(record, start, goal, 0), stats)

        seen: Optional[Set[bytes]] = None
        if self.detect_cycles and self.source.markovian:
            seen = {self._fingerprint(board, frontier)}

        g = 0
        while g < max_generation:
            next_board = self.source.generation(g + 1)
            if next_board.shape != board.shape:
                raise ValueError(
                    f"board shape changed from {board.shape} to {next_board.shape} at generation {g + 1}"
                )
            stats.states_expanded += int(np.count_nonzero(frontier))

            codes = self.expand(frontier, next_board.open_mask)
            # Layer g+1 is complete; only now is it published.
            record.add_layer(codes)
            g += 1
            frontier = codes != _UNREACHED
            size = int(np.count_nonzero(frontier))
            stats.generations_explored = g
            stats.peak_frontier = max(stats.peak_frontier, size)

            if self.release_boards:
                self.source.release_before(g)
            if g % LOG_INTERVAL == 0:
                logger.debug(
                    "Generation %d: frontier=%d settled=%d", g, size, record.settled_count()
                )

            if size == 0:
                logger.info("Frontier exhausted at generation %d", g)
                return Unreachable(g, "frontier exhausted", stats)

            if frontier[goal]:
                path = reconstruct_path(record, start, goal, g)
                logger.info("Reached goal %s at generation %d", tuple(goal), g)
                return PathFound(path, stats)

            if seen is not None:
                key = self._fingerprint(next_board, frontier)
                if key in seen:
                    logger.info("Search state at generation %d repeats an earlier one", g)
                    return Unreachable(g, "search state repeats an earlier generation", stats)
                seen.add(key)

            board = next_board

        logger.info("Generation budget %d exhausted", max_generation)
        return BudgetExceeded(max_generation, stats)


def find_path(
    source: BoardSource,
    start: Sequence[int],
    goal: Sequence[int],
    max_generation: int,
    allow_wait: bool = True,
) -> SearchOutcome:
    """One-shot convenience wrapper around TimeExpandedSearch."""
    return TimeExpandedSearch(source, allow_wait=allow_wait).find_path(start, goal, max_generation)
