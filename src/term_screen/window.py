"""
Nested clipping windows.

A window is an absolute rectangle on the grid. Windows are kept on a stack;
the top of the stack is the coordinate space every cursor and drawing
operation works in, and the whole grid stands in when the stack is empty.

Requests that do not fit are clamped rather than rejected, so a window
always lies inside its parent and is at least one cell wide and tall.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class WindowBounds:
    """Window position and size in absolute grid coordinates."""
    x: int
    y: int
    width: int
    height: int

    @staticmethod
    def _clamp(val, minval, maxval):
        """Clamp a value between min and max."""
        return max(minval, min(maxval, val))

    @classmethod
    def constrained(cls, parent: 'WindowBounds', rel_x: int, rel_y: int,
                    width: int, height: int) -> 'WindowBounds':
        """Build a window at an offset inside ``parent``, clamped to fit it.

        The offset is clamped so the origin lands on a cell of the parent;
        width is bounded by the parent's remaining horizontal extent and
        height by its remaining vertical extent.
        """
        x = parent.x + cls._clamp(rel_x, 0, parent.width - 1)
        y = parent.y + cls._clamp(rel_y, 0, parent.height - 1)
        return cls(
            x,
            y,
            cls._clamp(width, 1, parent.x + parent.width - x),
            cls._clamp(height, 1, parent.y + parent.height - y),
        )

    def contains(self, other: 'WindowBounds') -> bool:
        return (
            self.x <= other.x and self.y <= other.y
            and other.x + other.width <= self.x + self.width
            and other.y + other.height <= self.y + self.height
        )


class WindowStack:
    """Ordered stack of nested windows over a grid of a given size."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.windows: List[WindowBounds] = []

    def __len__(self):
        return len(self.windows)

    def __iter__(self):
        return iter(self.windows)

    def root(self) -> WindowBounds:
        """The full-grid rectangle."""
        return WindowBounds(0, 0, self.width, self.height)

    def active(self) -> WindowBounds:
        """The top-most window, or the full grid if none is pushed."""
        return self.windows[-1] if self.windows else self.root()

    def push(self, rel_x: int, rel_y: int, width: int, height: int) -> WindowBounds:
        """Push a window positioned relative to the active one."""
        window = WindowBounds.constrained(self.active(), rel_x, rel_y, width, height)
        self.windows.append(window)
        return window

    def pop(self) -> Optional[WindowBounds]:
        """Pop the top window off the stack."""
        if self.windows:
            return self.windows.pop()
        return None

    def resize(self, width: int, height: int):
        """Change the grid size and re-clamp every window, outermost first."""
        self.width = width
        self.height = height
        parent = old_parent = self.root()
        for i, window in enumerate(self.windows):
            clamped = WindowBounds.constrained(
                parent,
                window.x - old_parent.x,
                window.y - old_parent.y,
                window.width,
                window.height,
            )
            self.windows[i] = clamped
            parent, old_parent = clamped, window
