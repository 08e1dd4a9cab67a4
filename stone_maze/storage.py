"""Persistence layer for solve results."""

import csv
import json
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .maze_io import Maze
from .search import PathFound
from .solver import SolveReport


@dataclass
class SolutionRecord:
    """One solve attempt with its outcome."""
    maze: str
    rule: str
    start: List[int]
    goal: List[int]
    status: str
    arrival_generation: Optional[int]
    moves: str
    elapsed_seconds: float
    solved_at: str
    notes: str = ""

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "SolutionRecord":
        return cls(**data)

    @classmethod
    def from_report(cls, maze: Maze, rule: str, report: SolveReport, notes: str = "") -> "SolutionRecord":
        outcome = report.outcome
        arrival = moves = None
        if isinstance(outcome, PathFound):
            arrival = outcome.arrival_generation
            moves = outcome.path.to_string()
        return cls(
            maze=maze.name,
            rule=rule,
            start=list(maze.start),
            goal=list(maze.goal),
            status=outcome.status,
            arrival_generation=arrival,
            moves=moves or "",
            elapsed_seconds=round(report.elapsed_seconds, 6),
            solved_at=datetime.now().isoformat(),
            notes=notes,
        )


class SolutionStore:
    """JSON-based storage for solve results."""

    def __init__(self, filepath: str = "solutions.json"):
        self.filepath = Path(filepath)
        self.records: List[SolutionRecord] = []
        self._load()

    def _load(self):
        """Load records from file."""
        if self.filepath.exists():
            try:
                with open(self.filepath, "r") as f:
                    data = json.load(f)
                    self.records = [SolutionRecord.from_dict(r) for r in data.get("records", [])]
            except (json.JSONDecodeError, KeyError, TypeError):
                self.records = []
        else:
            self.records = []

    def save(self):
        """Save records to file."""
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": "1.0",
            "updated_at": datetime.now().isoformat(),
            "records": [r.to_dict() for r in self.records],
        }
        with open(self.filepath, "w") as f:
            json.dump(data, f, indent=2)

    def add(self, record: SolutionRecord) -> SolutionRecord:
        self.records.append(record)
        self.save()
        return record

    def get_best(self, maze: str) -> Optional[SolutionRecord]:
        """Earliest recorded arrival for a maze, if any attempt found a path."""
        solved = [
            r for r in self.records
            if r.maze == maze and r.arrival_generation is not None
        ]
        if not solved:
            return None
        return min(solved, key=lambda r: r.arrival_generation)

    def get_history(self, top_n: int = 20) -> List[SolutionRecord]:
        """Most recent records first."""
        return sorted(self.records, key=lambda r: r.solved_at, reverse=True)[:top_n]

    def remove(self, maze: str) -> bool:
        """Remove every record of a maze."""
        kept = [r for r in self.records if r.maze != maze]
        if len(kept) == len(self.records):
            return False
        self.records = kept
        self.save()
        return True

    def clear(self):
        self.records = []
        self.save()

    def export_csv(self, filepath: str):
        """Export records to CSV format."""
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "maze", "rule", "start", "goal", "status", "arrival_generation",
                "elapsed_seconds", "solved_at", "moves", "notes",
            ])
            for r in self.records:
                writer.writerow([
                    r.maze,
                    r.rule,
                    f"{r.start[0]},{r.start[1]}",
                    f"{r.goal[0]},{r.goal[1]}",
                    r.status,
                    "" if r.arrival_generation is None else r.arrival_generation,
                    f"{r.elapsed_seconds:.4f}",
                    r.solved_at,
                    r.moves,
                    r.notes,
                ])

    def __len__(self):
        return len(self.records)

    def __iter__(self):
        return iter(self.records)
