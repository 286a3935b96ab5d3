"""
Diffing engine that turns grid contents into terminal operations.

Both passes scan the grid in row-major order and batch contiguous cells into
runs. A run is written with one cursor move and one text write; runs spill
across row ends and rely on the terminal's line wrap.

``full_redraw`` rewrites every cell, breaking runs only where the color pair
changes. ``incremental`` compares the front grid against the back grid and
skips cells that are already on screen, breaking runs where the equality
status flips or where the color pair changes inside a differing stretch.

Both passes begin with a reset of the color pair so the physical color
state is known before any text goes out.
"""

from dataclasses import dataclass
from typing import Iterator, Union

from .cell import CellGrid, Color


@dataclass(frozen=True)
class SetColors:
    """Switch the terminal's active color pair."""
    fg: Color
    bg: Color


@dataclass(frozen=True)
class WriteRun:
    """Move to (x, y) and write ``text``."""
    x: int
    y: int
    text: str


Operation = Union[SetColors, WriteRun]


def _run(grid: CellGrid, start: int, end: int) -> WriteRun:
    return WriteRun(
        start % grid.width,
        start // grid.width,
        ''.join(cell.char for cell in grid.cells[start:end]),
    )


def full_redraw(front: CellGrid) -> Iterator[Operation]:
    """Yield operations that repaint every cell of ``front``."""
    colors = (None, None)
    yield SetColors(*colors)

    start = 0
    for i, cell in enumerate(front.cells):
        if cell.colors != colors:
            if start < i:
                yield _run(front, start, i)
            colors = cell.colors
            yield SetColors(*colors)
            start = i
    if start < len(front.cells):
        yield _run(front, start, len(front.cells))


def incremental(front: CellGrid, back: CellGrid) -> Iterator[Operation]:
    """Yield operations that bring a terminal showing ``back`` to ``front``."""
    colors = (None, None)
    yield SetColors(*colors)

    start = 0
    for i, (new, old) in enumerate(zip(front.cells, back.cells)):
        if new == old:
            if start < i:
                yield _run(front, start, i)
            start = i + 1
        elif new.colors != colors:
            if start < i:
                yield _run(front, start, i)
            colors = new.colors
            yield SetColors(*colors)
            start = i
    if start < len(front.cells):
        yield _run(front, start, len(front.cells))
