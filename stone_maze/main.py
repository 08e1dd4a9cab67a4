#!/usr/bin/env python3
"""CLI for the Stone automaton maze solver."""

import argparse
import logging
import sys

from .board import BoundaryPolicy
from .config import DEFAULT_MAX_GENERATION, SolverConfig
from .errors import MazeFormatError
from .maze_io import format_board, load_maze
from .rules import RULE_ALIASES, Neighborhood, rule_names
from .search import BudgetExceeded, PathFound, StartBlocked, Unreachable
from .solver import build_engine, solve
from .storage import SolutionRecord, SolutionStore
from .visualize import save_path_animation


def _load(path):
    try:
        return load_maze(path)
    except (OSError, MazeFormatError) as e:
        print(f"Error reading maze '{path}': {e}", file=sys.stderr)
        sys.exit(2)


def _config_from_args(args) -> SolverConfig:
    try:
        return SolverConfig(
            rule=args.rule,
            neighborhood=Neighborhood(args.neighborhood),
            boundary=BoundaryPolicy(args.boundary),
            max_generation=getattr(args, "max_generations", DEFAULT_MAX_GENERATION),
            allow_wait=not getattr(args, "no_wait", False),
            immutable_endpoints=args.immutable_endpoints,
            compact=getattr(args, "compact", False),
            evict=getattr(args, "evict", False),
            workers=getattr(args, "workers", 1),
            check=getattr(args, "check", False),
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        if args.rule.strip().lower() in RULE_ALIASES and args.neighborhood != Neighborhood.MOORE.value:
            print(f"Use --rule to pick a rule for the {args.neighborhood} neighborhood", file=sys.stderr)
        sys.exit(2)


def cmd_solve(args):
    """Find the earliest arrival at the maze goal."""
    maze = _load(args.maze)
    config = _config_from_args(args)

    print(f"Solving {args.maze}")
    print(f"  Grid: {maze.board.height}x{maze.board.width}")
    print(f"  Start: {tuple(maze.start)}  Goal: {tuple(maze.goal)}")
    print(f"  Rule: {config.build_rule().describe()}  Boundary: {config.boundary.value}")
    print(f"  Max generations: {config.max_generation}")
    print()

    with build_engine(maze, config) as engine:
        report = solve(maze, config, engine=engine)
        outcome = report.outcome

        if isinstance(outcome, PathFound):
            print(f"Arrival generation: {outcome.arrival_generation}")
            print(f"Path: {outcome.path.to_string()}")
        elif isinstance(outcome, Unreachable):
            print(f"Unreachable: {outcome.reason} (generation {outcome.generation})")
        elif isinstance(outcome, BudgetExceeded):
            print(f"Budget exceeded: no path within {outcome.max_generation} generations")
        elif isinstance(outcome, StartBlocked):
            print(f"Start {tuple(outcome.start)} is blocked at generation 0")

        stats = getattr(outcome, "stats", None)
        if stats is not None:
            print(f"Explored {stats.generations_explored} generations, "
                  f"{stats.states_expanded} states (peak frontier {stats.peak_frontier})")
        print(f"Elapsed: {report.elapsed_seconds:.3f}s")

        if config.check and isinstance(outcome, PathFound):
            if report.problems:
                print("Path check FAILED:")
                for problem in report.problems:
                    print(f"  {problem}")
            else:
                print("Path check passed")

        if args.animation and isinstance(outcome, PathFound):
            if config.evict:
                print("Skipping animation: old generations were evicted", file=sys.stderr)
            else:
                save_path_animation(engine, outcome.path, args.animation, cell_size=args.cell_size)
                print(f"Saved animation to: {args.animation}")

    if args.database:
        db = SolutionStore(args.database)
        db.add(SolutionRecord.from_report(maze, config.rule, report))
        print(f"Recorded result in {args.database}")

    if not report.found or report.problems:
        sys.exit(1)


def cmd_evolve(args):
    """Print the board at a given generation."""
    maze = _load(args.maze)
    config = _config_from_args(args)
    if args.generation < 0:
        print("Generation must be >= 0", file=sys.stderr)
        sys.exit(2)

    with build_engine(maze, config) as engine:
        board = engine.generation(args.generation)
    print(f"Generation {board.generation} ({board.stone_count()} stones):")
    print(format_board(board, markers=not args.plain))


def cmd_history(args):
    """Show recorded solve results."""
    db = SolutionStore(args.database)

    if len(db) == 0:
        print("No results recorded yet. Run solve with --database first!")
        return

    history = db.get_history(args.top)

    print(f"{'Maze':<20}{'Rule':<16}{'Status':<18}{'Arrival':<10}{'Seconds':<10}")
    print("-" * 74)
    for r in history:
        arrival = "-" if r.arrival_generation is None else str(r.arrival_generation)
        print(f"{r.maze:<20}{r.rule:<16}{r.status:<18}{arrival:<10}{r.elapsed_seconds:<10.3f}")


def cmd_export(args):
    """Export recorded results to CSV."""
    db = SolutionStore(args.database)

    if len(db) == 0:
        print("No results to export.")
        return

    db.export_csv(args.output)
    print(f"Exported {len(db)} results to {args.output}")


def _add_rule_arguments(parser):
    parser.add_argument("--rule", type=str, default="challenge",
                        help=f"Rule: {', '.join(rule_names())} or B/S notation (e.g. B234/S45)")
    parser.add_argument("--neighborhood", choices=[n.value for n in Neighborhood],
                        default=Neighborhood.MOORE.value, help="Neighborhood shape")
    parser.add_argument("--boundary", choices=[b.value for b in BoundaryPolicy],
                        default=BoundaryPolicy.OPEN.value, help="Treatment of cells beyond the edge")
    parser.add_argument("--immutable-endpoints", action="store_true",
                        help="Start and goal cells stay open in every generation")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Stone automaton maze solver - earliest arrival through an evolving grid"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Solve command
    solve_parser = subparsers.add_parser("solve", help="Find the earliest path to the goal")
    solve_parser.add_argument("maze", type=str, help="Maze file (0 open, 1 stone, 3 start, 4 goal)")
    _add_rule_arguments(solve_parser)
    solve_parser.add_argument("--max-generations", type=int, default=DEFAULT_MAX_GENERATION,
                              help="Give up after this many generations")
    solve_parser.add_argument("--no-wait", action="store_true", help="Disallow waiting in place")
    solve_parser.add_argument("--compact", action="store_true", help="Store generations one bit per cell")
    solve_parser.add_argument("--evict", action="store_true", help="Discard generations behind the frontier")
    solve_parser.add_argument("--workers", type=int, default=1, help="Threads per generation step")
    solve_parser.add_argument("--check", action="store_true", help="Replay the path against the automaton")
    solve_parser.add_argument("--database", type=str, default=None, help="Record the result in this file")
    solve_parser.add_argument("--animation", type=str, default=None, help="Write the walk as a GIF")
    solve_parser.add_argument("--cell-size", type=int, default=8, help="Cell size in pixels")
    solve_parser.set_defaults(func=cmd_solve)

    # Evolve command
    evolve_parser = subparsers.add_parser("evolve", help="Print the board at a generation")
    evolve_parser.add_argument("maze", type=str, help="Maze file")
    evolve_parser.add_argument("-g", "--generation", type=int, default=1, help="Generation to show")
    evolve_parser.add_argument("--plain", action="store_true", help="Only 0/1, no start/goal markers")
    _add_rule_arguments(evolve_parser)
    evolve_parser.set_defaults(func=cmd_evolve)

    # History command
    history_parser = subparsers.add_parser("history", help="Show recorded results")
    history_parser.add_argument("-n", "--top", type=int, default=20, help="Number of results to show")
    history_parser.add_argument("--database", type=str, default="solutions.json", help="Database file")
    history_parser.set_defaults(func=cmd_history)

    # Export command
    export_parser = subparsers.add_parser("export", help="Export results to CSV")
    export_parser.add_argument("-o", "--output", type=str, default="solutions.csv", help="Output CSV file")
    export_parser.add_argument("--database", type=str, default="solutions.json", help="Database file")
    export_parser.set_defaults(func=cmd_export)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args.func(args)


if __name__ == "__main__":
    main()
