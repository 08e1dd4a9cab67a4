"""Exception types raised by the stone maze solver."""


class StoneMazeError(Exception):
    """Base class for all solver errors."""


class InvalidGeneration(StoneMazeError, ValueError):
    """A generation index that can never be materialized was requested."""

    def __init__(self, generation, message: str = ""):
        self.generation = generation
        super().__init__(message or f"invalid generation index: {generation!r}")


class EvictedGeneration(InvalidGeneration):
    """The requested generation was discarded by the eviction policy."""

    def __init__(self, generation: int, oldest: int):
        self.oldest = oldest
        super().__init__(
            generation,
            f"generation {generation} was evicted (oldest retained: {oldest})",
        )


class CorruptPredecessorChain(StoneMazeError, RuntimeError):
    """Predecessor links do not form a valid path from start to goal."""


class MazeFormatError(StoneMazeError, ValueError):
    """Maze description text could not be parsed."""
