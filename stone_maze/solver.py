"""Wires a maze and a configuration into an engine and a search."""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from .automaton import AutomatonEngine
from .config import SolverConfig
from .maze_io import Maze
from .path import replay_path
from .search import PathFound, SearchOutcome, TimeExpandedSearch

logger = logging.getLogger(__name__)


@dataclass
class SolveReport:
    """Outcome of one solve plus timing and path-check results."""
    outcome: SearchOutcome
    elapsed_seconds: float
    problems: List[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.outcome.found

    @property
    def checked_ok(self) -> bool:
        return self.found and not self.problems


def build_engine(maze: Maze, config: SolverConfig) -> AutomatonEngine:
    return AutomatonEngine(
        maze.board,
        config.build_rule(),
        boundary=config.boundary,
        immutable_endpoints=config.immutable_endpoints,
        compact=config.compact,
        evict=config.evict,
        workers=config.workers,
    )


def solve(
    maze: Maze,
    config: Optional[SolverConfig] = None,
    engine: Optional[AutomatonEngine] = None,
) -> SolveReport:
    """Search `maze` for the earliest arrival at its goal."""
    config = config or SolverConfig()
    owns_engine = engine is None
    if engine is None:
        engine = build_engine(maze, config)

    logger.info(
        "Solving %s (%dx%d) with %s, budget %d generations",
        maze.name or "maze", maze.board.height, maze.board.width,
        engine.rule.describe(), config.max_generation,
    )
    search = TimeExpandedSearch(
        engine,
        allow_wait=config.allow_wait,
        release_boards=config.evict,
    )
    began = time.perf_counter()
    try:
        outcome = search.find_path(maze.start, maze.goal, config.max_generation)
        elapsed = time.perf_counter() - began
        report = SolveReport(outcome=outcome, elapsed_seconds=elapsed)
        if config.check and isinstance(outcome, PathFound):
            report.problems = replay_path(outcome.path, engine)
            for problem in report.problems:
                logger.error("Path check failed: %s", problem)
    finally:
        if owns_engine:
            engine.close()

    logger.info("Finished in %.3fs: %s", elapsed, outcome.status)
    return report
