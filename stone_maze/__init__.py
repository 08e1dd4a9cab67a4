"""Stone Maze - earliest-arrival paths through a grid evolving as a cellular automaton."""

from .automaton import AutomatonEngine, BoardSource
from .board import Board, BoundaryPolicy, CellState, Coordinate, Move
from .config import SolverConfig
from .errors import (
    CorruptPredecessorChain,
    EvictedGeneration,
    InvalidGeneration,
    MazeFormatError,
    StoneMazeError,
)
from .maze_io import Maze, format_board, load_maze, parse_maze
from .path import Path, SearchState, reconstruct_path, replay_path
from .rules import (
    CHALLENGE_RULE,
    ISOLATED_DECAY_RULE,
    CellFunctionRule,
    Neighborhood,
    OuterTotalisticRule,
    StaticRule,
    TransitionRule,
    parse_rule,
)
from .search import (
    BudgetExceeded,
    PathFound,
    SearchStats,
    StartBlocked,
    TimeExpandedSearch,
    Unreachable,
    VisitationRecord,
    find_path,
)
from .solver import SolveReport, build_engine, solve

__all__ = [
    "AutomatonEngine", "BoardSource",
    "Board", "BoundaryPolicy", "CellState", "Coordinate", "Move",
    "SolverConfig",
    "CorruptPredecessorChain", "EvictedGeneration", "InvalidGeneration",
    "MazeFormatError", "StoneMazeError",
    "Maze", "format_board", "load_maze", "parse_maze",
    "Path", "SearchState", "reconstruct_path", "replay_path",
    "CHALLENGE_RULE", "ISOLATED_DECAY_RULE", "CellFunctionRule", "Neighborhood",
    "OuterTotalisticRule", "StaticRule", "TransitionRule", "parse_rule",
    "BudgetExceeded", "PathFound", "SearchStats", "StartBlocked",
    "TimeExpandedSearch", "Unreachable", "VisitationRecord", "find_path",
    "SolveReport", "build_engine", "solve",
]
