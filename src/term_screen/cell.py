"""
Styled character cells and the flat grid that stores them.

A grid is a row-major list of cells. Two of them back every screen: the
front grid the application draws into, and the back grid that mirrors what
was last sent to the terminal.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

Color = Optional[Union[int, Tuple[int, int, int], str]]

EMPTY_CHAR = ' '


@dataclass(frozen=True)
class Cell:
    """One character position: a character plus its two colors.

    Colors are ``None`` for the terminal default, an ``int`` palette index,
    an ``(r, g, b)`` tuple, or a blessed color name such as ``'red'``.
    """
    fg: Color = None
    bg: Color = None
    char: str = EMPTY_CHAR

    @property
    def colors(self):
        """The (foreground, background) pair used to batch writes."""
        return (self.fg, self.bg)


EMPTY_CELL = Cell()


class CellGrid:
    """Fixed-size row-major store of cells.

    The length of ``cells`` always equals ``width * height``. A grid is never
    resized in place; :meth:`resized` builds a new one.
    """

    def __init__(self, width: int, height: int, fill: Cell = EMPTY_CELL):
        self.width = width
        self.height = height
        self.cells: List[Cell] = [fill] * (width * height)

    def __len__(self):
        return len(self.cells)

    def __eq__(self, other):
        if not isinstance(other, CellGrid):
            return NotImplemented
        return (self.width, self.height, self.cells) == (other.width, other.height, other.cells)

    def index(self, x: int, y: int) -> int:
        """Flat index of (x, y)."""
        return y * self.width + x

    def get(self, x: int, y: int) -> Cell:
        """Cell at (x, y)."""
        return self.cells[y * self.width + x]

    def set(self, x: int, y: int, cell: Cell):
        """Replace the cell at (x, y)."""
        self.cells[y * self.width + x] = cell

    def fill(self, cell: Cell = EMPTY_CELL):
        """Overwrite every cell."""
        self.cells[:] = [cell] * len(self.cells)

    def fill_range(self, start: int, end: int, cell: Cell = EMPTY_CELL):
        """Overwrite the cells in the flat index range ``[start, end)``."""
        self.cells[start:end] = [cell] * (end - start)

    def copy_from(self, other: 'CellGrid'):
        """Make this grid equal to ``other``, which must have the same size."""
        self.cells[:] = other.cells

    def resized(self, width: int, height: int, fill: Cell = EMPTY_CELL) -> 'CellGrid':
        """Return a new grid at the given size holding this grid's top-left corner.

        The overlapping rectangle is copied row by row; everything outside it
        is left at ``fill``.
        """
        grid = CellGrid(width, height, fill)
        common_width = min(self.width, width)
        common_height = min(self.height, height)
        for row in range(common_height):
            old_start = row * self.width
            new_start = row * width
            grid.cells[new_start:new_start + common_width] = \
                self.cells[old_start:old_start + common_width]
        return grid

    def row_text(self, y: int) -> str:
        """Characters of row ``y`` as a string."""
        start = y * self.width
        return ''.join(cell.char for cell in self.cells[start:start + self.width])

    def lines(self) -> List[str]:
        """Characters of every row, top to bottom."""
        return [self.row_text(y) for y in range(self.height)]
