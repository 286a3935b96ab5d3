"""
Terminal backends.

The screen engine never writes escape sequences itself; it drives an object
satisfying :class:`Backend`. :class:`BlessedBackend` is the implementation on
top of a Blessed ``Terminal``.
"""

import logging
from contextlib import ExitStack
from typing import List, Optional, Protocol, Tuple

from blessed import Terminal

from .cell import Color
from .cursor import CursorStyle

logger = logging.getLogger(__name__)


class Backend(Protocol):
    """Primitive terminal operations the screen engine relies on."""

    def size(self) -> Tuple[int, int]: ...

    def enable_raw_mode(self) -> None: ...

    def disable_raw_mode(self) -> None: ...

    def enter_alternate_screen(self) -> None: ...

    def leave_alternate_screen(self) -> None: ...

    def move_to(self, x: int, y: int) -> None: ...

    def set_colors(self, fg: Color, bg: Color) -> None: ...

    def write(self, text: str) -> None: ...

    def show_cursor(self) -> None: ...

    def hide_cursor(self) -> None: ...

    def set_cursor_style(self, style: CursorStyle) -> None: ...

    def flush(self) -> None: ...


class BlessedBackend:
    """Backend that queues Blessed sequences and writes them on flush.

    Attributes:
        term: Blessed Terminal instance
        stream: File object output is written to, the terminal's stream by default
    """

    def __init__(self, term: Optional[Terminal] = None, stream=None):
        self.term = term or Terminal()
        self.stream = stream if stream is not None else self.term.stream
        self._pending: List[str] = []
        self._raw: Optional[ExitStack] = None

    def size(self) -> Tuple[int, int]:
        """Terminal width and height in cells."""
        return self.term.width, self.term.height

    def enable_raw_mode(self):
        """Put the input side into raw mode until :meth:`disable_raw_mode`."""
        if self._raw is not None:
            return
        stack = ExitStack()
        stack.enter_context(self.term.raw())
        self._raw = stack

    def disable_raw_mode(self):
        """Restore the input mode saved by :meth:`enable_raw_mode`."""
        if self._raw is not None:
            stack, self._raw = self._raw, None
            stack.close()

    def enter_alternate_screen(self):
        """Queue a switch to the alternate screen."""
        self._pending.append(self.term.enter_fullscreen)

    def leave_alternate_screen(self):
        """Queue a switch back to the normal screen."""
        self._pending.append(self.term.exit_fullscreen)

    def move_to(self, x: int, y: int):
        """Queue a cursor move to (x, y)."""
        self._pending.append(self.term.move_xy(x, y))

    def set_colors(self, fg: Color, bg: Color):
        """Queue a color pair; ``normal`` comes first so both channels are reset."""
        self._pending.append(
            self.term.normal + self._foreground(fg) + self._background(bg)
        )

    def write(self, text: str):
        """Queue literal text at the cursor."""
        self._pending.append(text)

    def show_cursor(self):
        """Queue a sequence making the cursor visible."""
        self._pending.append(self.term.normal_cursor)

    def hide_cursor(self):
        """Queue a sequence hiding the cursor."""
        self._pending.append(self.term.hide_cursor)

    def set_cursor_style(self, style: CursorStyle):
        """Queue a DECSCUSR cursor shape change."""
        self._pending.append(style.sequence)

    def flush(self):
        """Write everything queued so far and flush the stream."""
        data, self._pending = ''.join(self._pending), []
        self.stream.write(data)
        self.stream.flush()
        logger.debug("flushed %d characters", len(data))

    def _foreground(self, color: Color) -> str:
        if color is None:
            return ''
        if isinstance(color, int):
            return self.term.color(color)
        if isinstance(color, tuple):
            return self.term.color_rgb(*color)
        return getattr(self.term, color)

    def _background(self, color: Color) -> str:
        if color is None:
            return ''
        if isinstance(color, int):
            return self.term.on_color(color)
        if isinstance(color, tuple):
            return self.term.on_color_rgb(*color)
        return getattr(self.term, f'on_{color}')
