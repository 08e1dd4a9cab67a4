"""Transition rules for the Stone automaton.

A rule maps the Stone flags of one generation, together with the neighbor
flags of every cell, to the Stone flags of the next generation. Rules are
pure and local: each output cell only looks at its own cell and its own
neighbors, so any band of rows can be evaluated on its own.
"""

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Tuple


class Neighborhood(Enum):
    """Fixed neighbor shapes, offsets listed in row-major order."""
    MOORE = "moore"
    VON_NEUMANN = "von-neumann"

    @property
    def offsets(self) -> Tuple[Tuple[int, int], ...]:
        if self is Neighborhood.MOORE:
            return (
                (-1, -1), (-1, 0), (-1, 1),
                (0, -1), (0, 1),
                (1, -1), (1, 0), (1, 1),
            )
        return ((-1, 0), (0, -1), (0, 1), (1, 0))

    @property
    def size(self) -> int:
        return len(self.offsets)


class TransitionRule(ABC):
    """Deterministic local rule applied uniformly to every cell."""

    neighborhood: Neighborhood = Neighborhood.MOORE

    @abstractmethod
    def apply(self, stones: np.ndarray, neighbors: np.ndarray) -> np.ndarray:
        """Next-generation Stone flags.

        Args:
            stones: (height, width) boolean array for the current generation.
            neighbors: (k, height, width) boolean array; layer i holds the
                Stone flag of each cell's i-th neighbor, boundary already
                resolved.
        """

    def describe(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class OuterTotalisticRule(TransitionRule):
    """Birth/Survival rule on the count of Stone neighbors (e.g. B234/S45)."""
    birth: FrozenSet[int]  # Stone-neighbor counts turning an Open cell to Stone
    survival: FrozenSet[int]  # Stone-neighbor counts keeping a Stone cell
    neighborhood: Neighborhood = Neighborhood.MOORE

    def __post_init__(self):
        object.__setattr__(self, "birth", frozenset(self.birth))
        object.__setattr__(self, "survival", frozenset(self.survival))
        limit = self.neighborhood.size
        for count in self.birth | self.survival:
            if not 0 <= count <= limit:
                raise ValueError(
                    f"neighbor count {count} impossible for a {self.neighborhood.value} "
                    f"neighborhood of {limit} cells"
                )

    @classmethod
    def from_string(
        cls, rule_str: str, neighborhood: Neighborhood = Neighborhood.MOORE
    ) -> "OuterTotalisticRule":
        """Parse rule from string like 'B234/S45' or 'B3S23'."""
        rule_str = rule_str.upper().replace(" ", "")
        if not rule_str.startswith("B") or "S" not in rule_str:
            raise ValueError(f"not a B/S rule: {rule_str!r}")
        birth_part, survival_part = rule_str[1:].split("S", 1)
        birth_part = birth_part.rstrip("/")
        if not (birth_part + survival_part).isdigit() and (birth_part or survival_part):
            raise ValueError(f"not a B/S rule: {rule_str!r}")

        birth = frozenset(int(c) for c in birth_part)
        survival = frozenset(int(c) for c in survival_part)
        return cls(birth=birth, survival=survival, neighborhood=neighborhood)

    def to_string(self) -> str:
        """Convert to standard notation like 'B234/S45'."""
        b_str = "".join(str(i) for i in sorted(self.birth))
        s_str = "".join(str(i) for i in sorted(self.survival))
        return f"B{b_str}/S{s_str}"

    def describe(self) -> str:
        return f"{self.to_string()} ({self.neighborhood.value})"

    def apply(self, stones: np.ndarray, neighbors: np.ndarray) -> np.ndarray:
        counts = neighbors.sum(axis=0, dtype=np.int32)
        born = ~stones & np.isin(counts, sorted(self.birth))
        survived = stones & np.isin(counts, sorted(self.survival))
        return born | survived


class StaticRule(TransitionRule):
    """Every cell keeps its state forever."""

    def __init__(self, neighborhood: Neighborhood = Neighborhood.MOORE):
        self.neighborhood = neighborhood

    def apply(self, stones: np.ndarray, neighbors: np.ndarray) -> np.ndarray:
        return stones.copy()

    def describe(self) -> str:
        return "static"


class CellFunctionRule(TransitionRule):
    """Wraps a per-cell callable `fn(stone, neighbors) -> stone`.

    `neighbors` is a tuple of booleans in the neighborhood's offset order.
    Evaluated one cell at a time, so much slower than the array rules.
    """

    def __init__(
        self,
        fn: Callable[[bool, Tuple[bool, ...]], bool],
        neighborhood: Neighborhood = Neighborhood.MOORE,
        name: str = "",
    ):
        self.fn = fn
        self.neighborhood = neighborhood
        self.name = name or getattr(fn, "__name__", "cell-function")

    def apply(self, stones: np.ndarray, neighbors: np.ndarray) -> np.ndarray:
        h, w = stones.shape
        out = np.zeros((h, w), dtype=bool)
        for i in range(h):
            for j in range(w):
                cell_neighbors = tuple(bool(v) for v in neighbors[:, i, j])
                out[i, j] = bool(self.fn(bool(stones[i, j]), cell_neighbors))
        return out

    def describe(self) -> str:
        return self.name


# Challenge automaton: Stone survives with 4-5 Stone neighbors,
# Open turns Stone with 2-4.
CHALLENGE_RULE = OuterTotalisticRule.from_string("B234/S45")
# A Stone with no Stone neighbor becomes Open; nothing else changes.
ISOLATED_DECAY_RULE = OuterTotalisticRule.from_string("B/S12345678")

RULE_ALIASES = {
    "challenge": "B234/S45",
    "decay": "B/S12345678",
}


def parse_rule(text: str, neighborhood: Neighborhood = Neighborhood.MOORE) -> TransitionRule:
    """Resolve a rule name ('static', 'challenge', 'decay') or B/S notation."""
    key = text.strip().lower()
    if key == "static":
        return StaticRule(neighborhood)
    if key == "decay" and neighborhood is Neighborhood.VON_NEUMANN:
        return OuterTotalisticRule.from_string("B/S1234", neighborhood)
    if key in RULE_ALIASES:
        try:
            return OuterTotalisticRule.from_string(RULE_ALIASES[key], neighborhood)
        except ValueError as e:
            raise ValueError(
                f"rule '{key}' ({RULE_ALIASES[key]}) only fits the moore neighborhood; "
                f"give a B/S rule for {neighborhood.value}"
            ) from e
    return OuterTotalisticRule.from_string(text, neighborhood)


def rule_names() -> Iterable[str]:
    return ["static", *RULE_ALIASES]
