"""Reading and writing the maze text format.

One row per line, cells separated by whitespace: 0 Open, 1 Stone, 3 Start,
4 Goal. Exactly one Start and one Goal are required.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .board import Board, CellState, Coordinate
from .errors import MazeFormatError

_CODES = {state.value: state for state in CellState}


@dataclass(frozen=True)
class Maze:
    """Initial board plus its endpoints."""
    board: Board
    start: Coordinate
    goal: Coordinate
    name: str = ""


def parse_maze(text: str, name: str = "") -> Maze:
    rows = []
    start = goal = None
    for line_no, line in enumerate(text.splitlines(), 1):
        tokens = line.split()
        if not tokens:
            continue
        i = len(rows)
        row = []
        for j, token in enumerate(tokens):
            state = _CODES.get(token)
            if state is None:
                raise MazeFormatError(f"line {line_no}: unknown cell {token!r} at column {j}")
            if state is CellState.START:
                if start is not None:
                    raise MazeFormatError(f"line {line_no}: second start cell at column {j}")
                start = Coordinate(i, j)
            elif state is CellState.GOAL:
                if goal is not None:
                    raise MazeFormatError(f"line {line_no}: second goal cell at column {j}")
                goal = Coordinate(i, j)
            row.append(state)
        if rows and len(row) != len(rows[0]):
            raise MazeFormatError(
                f"line {line_no}: expected {len(rows[0])} cells, found {len(row)}"
            )
        rows.append(row)

    if not rows:
        raise MazeFormatError("maze is empty")
    if start is None or goal is None:
        raise MazeFormatError("maze needs exactly one start (3) and one goal (4)")
    return Maze(board=Board.from_rows(rows), start=start, goal=goal, name=name)


def load_maze(filepath: Union[str, Path]) -> Maze:
    path = Path(filepath)
    return parse_maze(path.read_text(), name=path.stem)


def format_board(board: Board, markers: bool = True) -> str:
    """Render a board back to the text format.

    With `markers=False` only 0/1 Stone flags are written.
    """
    lines = []
    for i in range(board.height):
        cells = []
        for j in range(board.width):
            state = board.state((i, j))
            if not markers and state.is_open:
                state = CellState.OPEN
            cells.append(state.value)
        lines.append(" ".join(cells))
    return "\n".join(lines)
