"""Lazy, memoizing Stone automaton engine.

Boards are produced on demand by generation index. Generation 0 is the
supplied initial board; generation g is computed from generation g-1 alone,
so asking for any index in any order always yields the same board.
"""

import logging
import numpy as np
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from numbers import Integral
from typing import List, Optional, Union

from .board import Board, BoundaryPolicy
from .errors import EvictedGeneration, InvalidGeneration
from .rules import Neighborhood, TransitionRule

logger = logging.getLogger(__name__)


class BoardSource(ABC):
    """Board lookup by generation, the only capability the search needs."""

    # True when board g+1 depends on board g and nothing else.
    markovian = False

    @abstractmethod
    def generation(self, g: int) -> Board:
        """Board at generation `g`."""

    def release_before(self, g: int) -> None:
        """Hint that generations older than `g` will not be requested again."""


def neighbor_stack(
    stones: np.ndarray,
    neighborhood: Neighborhood,
    boundary: BoundaryPolicy = BoundaryPolicy.OPEN,
) -> np.ndarray:
    """Stone flags of every cell's neighbors, shape (k, height, width)."""
    if boundary is BoundaryPolicy.WRAP:
        padded = np.pad(stones, 1, mode="wrap")
    else:
        fill = boundary is BoundaryPolicy.STONE
        padded = np.pad(stones, 1, mode="constant", constant_values=fill)

    h, w = stones.shape
    return np.stack([
        padded[1 + dr:1 + dr + h, 1 + dc:1 + dc + w]
        for dr, dc in neighborhood.offsets
    ])


class AutomatonEngine(BoardSource):
    """Owns the generation cache for one run.

    The cache is gap-free from the oldest retained generation up to the newest
    computed one. With `compact` the cache keeps one bit per cell and rebuilds
    Board objects on request. With `evict`, `release_before` drops old
    generations; without it the cache grows for the engine's lifetime.
    """

    markovian = True

    def __init__(
        self,
        initial: Board,
        rule: TransitionRule,
        boundary: BoundaryPolicy = BoundaryPolicy.OPEN,
        immutable_endpoints: bool = False,
        compact: bool = False,
        evict: bool = False,
        workers: int = 1,
    ):
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.rule = rule
        self.boundary = boundary
        self.immutable_endpoints = immutable_endpoints
        self.compact = compact
        self.evict = evict
        self.workers = workers
        self.shape = initial.shape
        self._start = initial.start
        self._goal = initial.goal
        self._pool: Optional[ThreadPoolExecutor] = None
        self._cache: List[Union[Board, np.ndarray]] = []
        self._oldest = 0
        self.steps_computed = 0

        stones = np.array(initial.stones, dtype=bool)
        if initial.generation != 0:
            logger.debug("Relabelling initial board generation %d as 0", initial.generation)
        self._cache.append(self._store(stones, 0))

    # -- cache plumbing ---------------------------------------------------

    def _store(self, stones: np.ndarray, g: int) -> Union[Board, np.ndarray]:
        if self.compact:
            packed = np.packbits(stones, axis=None)
            packed.setflags(write=False)
            return packed
        return Board(stones, generation=g, start=self._start, goal=self._goal)

    def _stones_of(self, entry: Union[Board, np.ndarray]) -> np.ndarray:
        if isinstance(entry, Board):
            return entry.stones
        h, w = self.shape
        return np.unpackbits(entry, count=h * w).reshape(h, w).astype(bool)

    def _load(self, g: int) -> Board:
        entry = self._cache[g - self._oldest]
        if isinstance(entry, Board):
            return entry
        return Board(self._stones_of(entry), generation=g, start=self._start, goal=self._goal)

    @property
    def latest_generation(self) -> int:
        return self._oldest + len(self._cache) - 1

    @property
    def oldest_generation(self) -> int:
        return self._oldest

    @property
    def cached_count(self) -> int:
        return len(self._cache)

    # -- evolution --------------------------------------------------------

    def step(self, stones: np.ndarray) -> np.ndarray:
        """Apply the rule once to a full grid of Stone flags."""
        neighbors = neighbor_stack(stones, self.rule.neighborhood, self.boundary)

        if self.workers == 1 or stones.shape[0] < 2:
            nxt = self.rule.apply(stones, neighbors)
        else:
            bands = np.array_split(np.arange(stones.shape[0]), self.workers)
            bands = [b for b in bands if len(b)]
            pool = self._executor()
            parts = pool.map(
                lambda rows: self.rule.apply(
                    stones[rows[0]:rows[-1] + 1],
                    neighbors[:, rows[0]:rows[-1] + 1],
                ),
                bands,
            )
            # Every band is finished before the generation is published.
            nxt = np.concatenate(list(parts), axis=0)

        nxt = np.asarray(nxt, dtype=bool)
        if nxt.shape != stones.shape:
            raise ValueError(
                f"rule {self.rule.describe()} returned shape {nxt.shape}, expected {stones.shape}"
            )
        if self.immutable_endpoints:
            if nxt is stones or not nxt.flags.writeable:
                nxt = nxt.copy()
            for marker in (self._start, self._goal):
                if marker is not None:
                    nxt[marker] = False
        return nxt

    def _executor(self) -> ThreadPoolExecutor:
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=self.workers)
        return self._pool

    def generation(self, g: int) -> Board:
        """Board at generation `g`, computing and caching any missing ones."""
        if isinstance(g, bool) or not isinstance(g, Integral) or g < 0:
            raise InvalidGeneration(g)
        g = int(g)
        if g < self._oldest:
            raise EvictedGeneration(g, self._oldest)

        if g > self.latest_generation:
            logger.debug(
                "Extending generation cache from %d to %d", self.latest_generation, g
            )
            stones = self._stones_of(self._cache[-1])
            while self.latest_generation < g:
                stones = self.step(stones)
                self.steps_computed += 1
                self._cache.append(self._store(stones, self.latest_generation + 1))

        return self._load(g)

    def release_before(self, g: int) -> None:
        """Drop generations older than `g` when eviction is enabled."""
        if not self.evict:
            return
        cutoff = min(g, self.latest_generation)
        drop = cutoff - self._oldest
        if drop <= 0:
            return
        del self._cache[:drop]
        self._oldest = cutoff
        logger.debug("Evicted %d generations, oldest retained is now %d", drop, cutoff)

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def __repr__(self):
        return (
            f"AutomatonEngine(rule={self.rule.describe()}, boundary={self.boundary.value}, "
            f"generations={self._oldest}..{self.latest_generation})"
        )
