"""Rendering of solved paths as PNG frames and animated GIFs."""

import numpy as np
from PIL import Image
from typing import Iterable, List, Optional

from .board import Board, Coordinate
from .path import Path

OPEN_COLOR = (240, 240, 240)
STONE_COLOR = (46, 139, 87)
START_COLOR = (70, 130, 180)
GOAL_COLOR = (220, 20, 60)
TRAIL_COLOR = (255, 215, 0)
AGENT_COLOR = (20, 20, 20)


def render_board(board: Board, cell_size: int = 8) -> np.ndarray:
    """Render a board as an RGB image array."""
    h, w = board.shape
    img = np.empty((h, w, 3), dtype=np.uint8)
    img[:] = OPEN_COLOR
    img[board.stones] = STONE_COLOR
    for marker, color in ((board.start, START_COLOR), (board.goal, GOAL_COLOR)):
        if marker is not None and board.is_open(marker):
            img[marker] = color

    # Upscale grid using repeat
    return np.repeat(np.repeat(img, cell_size, axis=0), cell_size, axis=1)


def render_step(
    board: Board,
    agent: Optional[Coordinate] = None,
    trail: Iterable[Coordinate] = (),
    cell_size: int = 8,
) -> np.ndarray:
    """Render a board with the cells already walked and the agent's position."""
    img = render_board(board, cell_size)
    for coord in trail:
        _paint(img, coord, TRAIL_COLOR, cell_size)
    if agent is not None:
        _paint(img, agent, AGENT_COLOR, cell_size)
    return img


def _paint(img: np.ndarray, coord: Coordinate, color, cell_size: int):
    y0, x0 = coord[0] * cell_size, coord[1] * cell_size
    img[y0:y0 + cell_size, x0:x0 + cell_size] = color


def path_frames(source, path: Path, cell_size: int = 8) -> List[np.ndarray]:
    """One frame per state of the path, rendered on that state's generation."""
    frames = []
    walked: List[Coordinate] = []
    for state in path:
        board = source.generation(state.generation)
        frames.append(render_step(board, state.coordinate, walked, cell_size))
        walked.append(state.coordinate)
    return frames


def save_image(frame: np.ndarray, filepath: str):
    """Save one rendered frame as PNG."""
    Image.fromarray(frame).save(filepath)


def save_path_animation(
    source,
    path: Path,
    filepath: str,
    cell_size: int = 8,
    duration: int = 150,
    loop: int = 0,
):
    """Save the agent's walk as an animated GIF."""
    images = [Image.fromarray(f) for f in path_frames(source, path, cell_size)]
    if images:
        images[0].save(
            filepath,
            save_all=True,
            append_images=images[1:],
            duration=duration,
            loop=loop,
        )
