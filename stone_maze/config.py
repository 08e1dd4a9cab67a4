"""Solver configuration."""

from dataclasses import dataclass

from .board import BoundaryPolicy
from .rules import Neighborhood, TransitionRule, parse_rule

DEFAULT_MAX_GENERATION = 50_000


@dataclass(frozen=True)
class SolverConfig:
    """Rule parameters and search knobs for one solve."""

    rule: str = "challenge"
    neighborhood: Neighborhood = Neighborhood.MOORE
    boundary: BoundaryPolicy = BoundaryPolicy.OPEN
    max_generation: int = DEFAULT_MAX_GENERATION
    allow_wait: bool = True
    immutable_endpoints: bool = False
    compact: bool = False
    evict: bool = False
    workers: int = 1
    check: bool = False

    def __post_init__(self) -> None:
        if self.max_generation < 0:
            raise ValueError("max_generation must be >= 0")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.evict and self.check:
            raise ValueError("check replays old generations and cannot be combined with evict")
        # Fail early on a malformed rule string
        self.build_rule()

    def build_rule(self) -> TransitionRule:
        return parse_rule(self.rule, self.neighborhood)
