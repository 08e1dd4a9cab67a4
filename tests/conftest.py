"""Shared fixtures and test doubles."""

import pytest

from stone_maze.automaton import AutomatonEngine, BoardSource
from stone_maze.board import Board
from stone_maze.rules import ISOLATED_DECAY_RULE


class ScriptedBoards(BoardSource):
    """Board source replaying a fixed list of layouts; the last one repeats."""

    def __init__(self, layouts):
        self.layouts = [Board(layout) for layout in layouts]
        self.requested = []

    def generation(self, g):
        self.requested.append(g)
        layout = self.layouts[min(g, len(self.layouts) - 1)]
        return layout.with_stones(layout.stones, generation=g)


@pytest.fixture
def centre_stone_board():
    """3x3 all Open except a lone Stone in the centre."""
    return Board([
        [0, 0, 0],
        [0, 1, 0],
        [0, 0, 0],
    ])


@pytest.fixture
def decay_engine(centre_stone_board):
    return AutomatonEngine(centre_stone_board, ISOLATED_DECAY_RULE)


@pytest.fixture
def scripted_boards():
    return ScriptedBoards


@pytest.fixture
def shortest_path_maze_text():
    """Sample maze whose shortest move-only path takes 14 generations."""
    return """\
3 0 0 1 0 0
0 1 1 0 1 1
0 0 1 1 0 0
0 0 0 0 0 4
"""
