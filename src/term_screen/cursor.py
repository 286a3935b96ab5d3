"""Cursor position and shape."""

from dataclasses import dataclass
from enum import Enum


@dataclass
class Point:
    """A cursor position, relative to the active window."""
    x: int = 0
    y: int = 0


class CursorStyle(Enum):
    """Cursor shapes, valued by their DECSCUSR parameter."""
    DEFAULT_USER_SHAPE = 0
    BLINKING_BLOCK = 1
    STEADY_BLOCK = 2
    BLINKING_UNDERSCORE = 3
    STEADY_UNDERSCORE = 4
    BLINKING_BAR = 5
    STEADY_BAR = 6

    @property
    def sequence(self) -> str:
        """Escape sequence that selects this shape."""
        return f'\x1b[{self.value} q'
