"""Tests for frame rendering and GIF output."""

import numpy as np
from PIL import Image

from stone_maze.automaton import AutomatonEngine
from stone_maze.board import Board
from stone_maze.rules import StaticRule
from stone_maze.search import find_path
from stone_maze.visualize import (
    AGENT_COLOR,
    GOAL_COLOR,
    OPEN_COLOR,
    START_COLOR,
    STONE_COLOR,
    TRAIL_COLOR,
    path_frames,
    render_board,
    render_step,
    save_image,
    save_path_animation,
)


def _corridor():
    board = Board([[0, 1, 0], [0, 0, 0]], start=(0, 0), goal=(0, 2))
    return AutomatonEngine(board, StaticRule())


class TestRender:
    def test_board_colors_and_scale(self):
        board = Board([[0, 1], [0, 0]], start=(0, 0), goal=(1, 1))
        img = render_board(board, cell_size=4)
        assert img.shape == (8, 8, 3)
        assert img.dtype == np.uint8
        assert tuple(img[0, 0]) == START_COLOR
        assert tuple(img[0, 4]) == STONE_COLOR
        assert tuple(img[4, 0]) == OPEN_COLOR
        assert tuple(img[7, 7]) == GOAL_COLOR

    def test_step_paints_trail_and_agent(self):
        board = Board([[0, 0, 0]])
        img = render_step(board, agent=(0, 2), trail=[(0, 0)], cell_size=2)
        assert tuple(img[0, 0]) == TRAIL_COLOR
        assert tuple(img[0, 2]) == OPEN_COLOR
        assert tuple(img[1, 5]) == AGENT_COLOR

    def test_one_frame_per_state(self):
        engine = _corridor()
        outcome = find_path(engine, (0, 0), (0, 2), max_generation=10)
        frames = path_frames(engine, outcome.path, cell_size=3)
        assert len(frames) == len(outcome.path) == 5
        assert all(f.shape == (6, 9, 3) for f in frames)


class TestSave:
    def test_save_png(self, tmp_path):
        out = tmp_path / "board.png"
        save_image(render_board(Board([[0, 1]]), cell_size=5), out)
        with Image.open(out) as img:
            assert img.size == (10, 5)

    def test_save_animation(self, tmp_path):
        engine = _corridor()
        outcome = find_path(engine, (0, 0), (0, 2), max_generation=10)
        out = tmp_path / "walk.gif"
        save_path_animation(engine, outcome.path, out, cell_size=4)
        with Image.open(out) as img:
            assert img.size == (12, 8)
            assert img.n_frames == len(outcome.path)
