"""Witness paths through the time-expanded graph."""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from .board import Coordinate, Move
from .errors import CorruptPredecessorChain, InvalidGeneration


@dataclass(frozen=True)
class SearchState:
    """Agent at `coordinate` at generation `generation`."""
    coordinate: Coordinate
    generation: int


@dataclass(frozen=True)
class Path:
    """Forward-ordered search states from (start, 0) to (goal, arrival)."""
    states: Tuple[SearchState, ...]

    @property
    def start(self) -> Coordinate:
        return self.states[0].coordinate

    @property
    def goal(self) -> Coordinate:
        return self.states[-1].coordinate

    @property
    def arrival_generation(self) -> int:
        return self.states[-1].generation

    def moves(self) -> List[Move]:
        return [
            Move.between(a.coordinate, b.coordinate)
            for a, b in zip(self.states, self.states[1:])
        ]

    def to_string(self) -> str:
        """Space-separated move letters, e.g. 'D R R W U'."""
        return " ".join(m.symbol for m in self.moves())

    def __len__(self) -> int:
        return len(self.states)

    def __iter__(self) -> Iterator[SearchState]:
        return iter(self.states)


def reconstruct_path(record, start: Coordinate, goal: Coordinate, goal_generation: int) -> Path:
    """Walk predecessor links back from (goal, goal_generation) to (start, 0).

    `record` must provide `move_into(coordinate, generation)`, returning the
    move that brought the agent into that state (None for the origin or an
    unreached state), and `in_bounds(coordinate)`.

    Raises:
        CorruptPredecessorChain: the links do not form a valid path.
    """
    start, goal = Coordinate(*start), Coordinate(*goal)
    states = [SearchState(goal, goal_generation)]
    pos, gen = goal, goal_generation
    while gen > 0:
        move: Optional[Move] = record.move_into(pos, gen)
        if move is None:
            raise CorruptPredecessorChain(f"no predecessor recorded for {tuple(pos)} at generation {gen}")
        pos = pos.previous(move)
        gen -= 1
        if not record.in_bounds(pos):
            raise CorruptPredecessorChain(f"predecessor {tuple(pos)} at generation {gen} is off the grid")
        states.append(SearchState(pos, gen))

    states.reverse()
    path = Path(tuple(states))
    _check_chain(path, start, goal, goal_generation)
    return path


def _check_chain(path: Path, start: Coordinate, goal: Coordinate, goal_generation: int) -> None:
    states = path.states
    if len(states) != goal_generation + 1:
        raise CorruptPredecessorChain(
            f"path has {len(states)} states, expected {goal_generation + 1}"
        )
    if states[0] != SearchState(start, 0):
        raise CorruptPredecessorChain(f"path begins at {states[0]}, expected start {tuple(start)} at 0")
    if states[-1] != SearchState(goal, goal_generation):
        raise CorruptPredecessorChain(f"path ends at {states[-1]}, expected goal {tuple(goal)}")
    for a, b in zip(states, states[1:]):
        if b.generation - a.generation != 1 or a.coordinate.manhattan(b.coordinate) > 1:
            raise CorruptPredecessorChain(f"illegal step {a} -> {b}")


def replay_path(path: Path, source) -> List[str]:
    """Check a path against the boards it claims to walk through.

    Returns a list of problems; empty means every state is Open in its
    generation and every step is a wait or a single orthogonal move.
    """
    problems = []
    states: Sequence[SearchState] = path.states
    if not states:
        return ["path is empty"]
    if states[0].generation != 0:
        problems.append(f"path starts at generation {states[0].generation}, not 0")

    for i, state in enumerate(states):
        try:
            board = source.generation(state.generation)
        except InvalidGeneration as e:
            problems.append(f"state {i}: {e}")
            continue
        if not board.is_open(state.coordinate):
            problems.append(
                f"state {i}: {tuple(state.coordinate)} is not open at generation {state.generation}"
            )

    for i, (a, b) in enumerate(zip(states, states[1:]), 1):
        if b.generation != a.generation + 1:
            problems.append(f"step {i}: generation jumps from {a.generation} to {b.generation}")
        if a.coordinate.manhattan(b.coordinate) > 1:
            problems.append(f"step {i}: {tuple(a.coordinate)} -> {tuple(b.coordinate)} is not a single move")

    return problems
