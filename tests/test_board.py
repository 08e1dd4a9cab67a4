"""Tests for coordinates, moves and board snapshots."""

import numpy as np
import pytest

from stone_maze.board import Board, CellState, Coordinate, Move


class TestCoordinate:
    def test_move_down_and_left(self):
        p0 = Coordinate(3, 5)
        p2 = p0.step(Move.DOWN).step(Move.LEFT)
        assert p2 == Coordinate(4, 4)

    def test_position_before_movement(self):
        p0 = Coordinate(3, 5)
        p1 = p0.step(Move.DOWN)
        p2 = p1.step(Move.LEFT)
        assert p2.previous(Move.LEFT) == p1
        assert p1.previous(Move.DOWN) == p0

    def test_wait_keeps_position(self):
        assert Coordinate(2, 2).step(Move.WAIT) == Coordinate(2, 2)

    def test_manhattan(self):
        assert Coordinate(0, 0).manhattan(Coordinate(2, 3)) == 5


class TestMove:
    def test_between_orthogonal_neighbors(self):
        assert Move.between(Coordinate(1, 1), Coordinate(0, 1)) is Move.UP
        assert Move.between(Coordinate(1, 1), Coordinate(1, 2)) is Move.RIGHT
        assert Move.between(Coordinate(1, 1), Coordinate(1, 1)) is Move.WAIT

    def test_between_rejects_diagonal(self):
        with pytest.raises(ValueError):
            Move.between(Coordinate(0, 0), Coordinate(1, 1))

    def test_symbols_round_trip(self):
        assert "".join(m.symbol for m in Move) == "WUDLR"
        assert Move.from_symbol("d") is Move.DOWN
        with pytest.raises(ValueError):
            Move.from_symbol("X")


class TestBoard:
    def test_dimensions_and_states(self):
        board = Board([[0, 1, 0], [0, 0, 1]], start=(0, 0), goal=(1, 1))
        assert board.shape == (2, 3)
        assert len(board) == 6
        assert board[(0, 1)] is CellState.STONE
        assert board[(0, 0)] is CellState.START
        assert board[(1, 1)] is CellState.GOAL
        assert board[(1, 0)] is CellState.OPEN
        assert board.stone_count() == 2

    def test_is_open_outside_grid_is_false(self):
        board = Board([[0, 0], [0, 0]])
        assert board.is_open((1, 1))
        assert not board.is_open((2, 0))
        assert not board.is_open((0, -1))

    def test_stone_overrides_marker(self):
        board = Board([[1, 0]], start=(0, 0))
        assert board[(0, 0)] is CellState.STONE
        assert not board[(0, 0)].is_open

    def test_stones_are_read_only(self):
        source = np.zeros((2, 2), dtype=bool)
        board = Board(source)
        source[0, 0] = True
        assert not board.stones[0, 0]
        with pytest.raises(ValueError):
            board.stones[0, 0] = True

    def test_rejects_empty_or_flat_grids(self):
        with pytest.raises(ValueError):
            Board([])
        with pytest.raises(ValueError):
            Board([0, 1, 0])

    def test_rejects_marker_outside_grid(self):
        with pytest.raises(ValueError):
            Board([[0, 0]], goal=(3, 0))

    def test_from_rows_finds_markers(self):
        rows = [
            [CellState.START, CellState.STONE],
            [CellState.OPEN, CellState.GOAL],
        ]
        board = Board.from_rows(rows)
        assert board.start == Coordinate(0, 0)
        assert board.goal == Coordinate(1, 1)
        assert board.to_rows() == rows

    def test_iterates_every_coordinate_in_row_major_order(self):
        board = Board([[0, 1], [1, 0]])
        assert list(board) == [Coordinate(0, 0), Coordinate(0, 1), Coordinate(1, 0), Coordinate(1, 1)]
        assert dict(board.items())[Coordinate(0, 1)] is CellState.STONE
        assert (1, 1) in board
        assert (2, 1) not in board

    def test_equality_and_hash(self):
        a = Board([[0, 1], [1, 0]], generation=3)
        b = Board([[0, 1], [1, 0]], generation=3)
        c = Board([[0, 1], [1, 0]], generation=4)
        assert a == b
        assert hash(a) == hash(b)
        assert a != c
        assert a.to_bytes() == c.to_bytes()

    def test_with_stones_keeps_markers(self):
        board = Board([[0, 0]], start=(0, 0), goal=(0, 1))
        nxt = board.with_stones([[0, 1]], generation=1)
        assert nxt.generation == 1
        assert nxt.start == board.start
        assert nxt[(0, 1)] is CellState.STONE
