"""Tests for the lazy generation cache."""

import numpy as np
import pytest

from stone_maze.automaton import AutomatonEngine
from stone_maze.board import Board, BoundaryPolicy
from stone_maze.errors import EvictedGeneration, InvalidGeneration
from stone_maze.maze_io import format_board, parse_maze
from stone_maze.rules import CHALLENGE_RULE, ISOLATED_DECAY_RULE, OuterTotalisticRule, StaticRule


def _random_board(seed, size=(12, 15), density=0.4):
    rng = np.random.default_rng(seed)
    return Board(rng.random(size) < density)


class TestGeneration:
    def test_generation_zero_is_initial_board(self, centre_stone_board, decay_engine):
        assert decay_engine.generation(0) == centre_stone_board

    def test_lone_stone_decays_after_one_step(self, decay_engine):
        assert decay_engine.generation(0).stone_count() == 1
        assert decay_engine.generation(1).stone_count() == 0
        assert decay_engine.generation(1).generation == 1

    def test_negative_generation_rejected(self, decay_engine):
        with pytest.raises(InvalidGeneration):
            decay_engine.generation(-1)

    @pytest.mark.parametrize("bad", [1.5, "2", True, None])
    def test_non_integer_generation_rejected(self, decay_engine, bad):
        with pytest.raises(InvalidGeneration):
            decay_engine.generation(bad)

    def test_numpy_integer_generation_accepted(self, decay_engine):
        assert decay_engine.generation(np.int64(2)).generation == 2

    def test_cache_is_extended_lazily(self, decay_engine):
        assert decay_engine.latest_generation == 0
        decay_engine.generation(4)
        assert decay_engine.latest_generation == 4
        assert decay_engine.steps_computed == 4
        decay_engine.generation(2)
        assert decay_engine.steps_computed == 4
        assert decay_engine.cached_count == 5


class TestPurity:
    def test_call_order_does_not_matter(self):
        board = _random_board(7)
        forward = AutomatonEngine(board, CHALLENGE_RULE)
        backward = AutomatonEngine(board, CHALLENGE_RULE)

        expected = [forward.generation(g) for g in range(8)]
        backward.generation(5)
        assert backward.generation(3) == expected[3]
        assert [backward.generation(g) for g in reversed(range(8))] == expected[::-1]

    def test_repeated_calls_are_bit_identical(self):
        engine = AutomatonEngine(_random_board(3), CHALLENGE_RULE)
        first = engine.generation(6).to_bytes()
        engine.generation(10)
        assert engine.generation(6).to_bytes() == first

    def test_engines_do_not_share_state(self):
        board = _random_board(11)
        a = AutomatonEngine(board, CHALLENGE_RULE)
        b = AutomatonEngine(board, StaticRule())
        a.generation(3)
        assert b.latest_generation == 0
        assert b.generation(3).to_bytes() == board.to_bytes()

    def test_one_generation_matches_known_layout(self):
        maze = parse_maze("1 1 1 3\n0 1 0 1\n0 1 1 4\n")
        engine = AutomatonEngine(maze.board, CHALLENGE_RULE)
        assert format_board(engine.generation(1), markers=False) == "0 0 0 1\n1 1 0 0\n1 0 0 1"


class TestStorageModes:
    def test_compact_cache_matches_byte_cache(self):
        board = _random_board(5)
        plain = AutomatonEngine(board, CHALLENGE_RULE)
        packed = AutomatonEngine(board, CHALLENGE_RULE, compact=True)
        for g in range(10):
            assert packed.generation(g) == plain.generation(g)

    def test_workers_produce_identical_boards(self):
        board = _random_board(9, size=(17, 13))
        serial = AutomatonEngine(board, CHALLENGE_RULE)
        with AutomatonEngine(board, CHALLENGE_RULE, workers=4) as parallel:
            for g in range(8):
                assert parallel.generation(g) == serial.generation(g)

    def test_workers_must_be_positive(self, centre_stone_board):
        with pytest.raises(ValueError):
            AutomatonEngine(centre_stone_board, StaticRule(), workers=0)


class TestEviction:
    def test_release_is_noop_without_evict(self, decay_engine):
        decay_engine.generation(5)
        decay_engine.release_before(4)
        assert decay_engine.oldest_generation == 0
        assert decay_engine.generation(0).stone_count() == 1

    def test_release_drops_older_generations(self, centre_stone_board):
        engine = AutomatonEngine(centre_stone_board, ISOLATED_DECAY_RULE, evict=True)
        engine.generation(5)
        engine.release_before(4)
        assert engine.oldest_generation == 4
        assert engine.cached_count == 2
        with pytest.raises(EvictedGeneration):
            engine.generation(3)
        assert engine.generation(7).generation == 7

    def test_newest_generation_is_never_evicted(self, centre_stone_board):
        engine = AutomatonEngine(centre_stone_board, ISOLATED_DECAY_RULE, evict=True)
        engine.generation(2)
        engine.release_before(10)
        assert engine.oldest_generation == 2
        assert engine.generation(3).generation == 3

    def test_evicted_generation_is_invalid_generation(self):
        assert issubclass(EvictedGeneration, InvalidGeneration)


class TestEndpoints:
    def test_immutable_endpoints_stay_open(self):
        # Every Open cell is born Stone under B012345678.
        board = Board([[0, 0, 0], [0, 0, 0]], start=(0, 0), goal=(1, 2))
        rule = OuterTotalisticRule.from_string("B012345678/S012345678")
        engine = AutomatonEngine(board, rule, immutable_endpoints=True)
        nxt = engine.generation(1)
        assert nxt.is_open((0, 0))
        assert nxt.is_open((1, 2))
        assert nxt.stone_count() == 4

    def test_endpoints_evolve_by_default(self):
        board = Board([[0, 0, 0], [0, 0, 0]], start=(0, 0), goal=(1, 2))
        rule = OuterTotalisticRule.from_string("B012345678/S012345678")
        engine = AutomatonEngine(board, rule)
        assert engine.generation(1).stone_count() == 6


class TestBoundaryPolicy:
    def test_stone_boundary_changes_evolution(self):
        board = Board([[0, 0, 0], [0, 0, 0], [0, 0, 0]])
        open_edge = AutomatonEngine(board, CHALLENGE_RULE, boundary=BoundaryPolicy.OPEN)
        stone_edge = AutomatonEngine(board, CHALLENGE_RULE, boundary=BoundaryPolicy.STONE)
        assert open_edge.generation(1).stone_count() == 0
        # Edge midpoints see 3 outside Stones (born), corners see 5 (not born).
        assert format_board(stone_edge.generation(1)) == "0 1 0\n1 0 1\n0 1 0"

    def test_wrap_boundary_on_uniform_grid_is_translation_invariant(self):
        board = Board([[1, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
        engine = AutomatonEngine(board, CHALLENGE_RULE, boundary=BoundaryPolicy.WRAP)
        shifted = AutomatonEngine(
            Board(np.roll(board.stones, (1, 2), axis=(0, 1))), CHALLENGE_RULE, boundary=BoundaryPolicy.WRAP
        )
        for g in range(1, 5):
            expected = np.roll(engine.generation(g).stones, (1, 2), axis=(0, 1))
            assert np.array_equal(shifted.generation(g).stones, expected)
