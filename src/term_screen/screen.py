"""
Double-buffered screen.

This module provides :class:`Screen`, which owns the front and back cell
grids, the window stack, the cursor and the active colors, and pushes the
difference between the two grids to a terminal backend on :meth:`Screen.render`.

All drawing goes into the front grid. The back grid holds what the terminal
is believed to show; it is only updated after a render has completed.
"""

import logging
import signal
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .backend import Backend, BlessedBackend
from .cell import EMPTY_CELL, Cell, CellGrid, Color
from .cursor import CursorStyle, Point
from .render import SetColors, WriteRun, full_redraw, incremental
from .window import WindowBounds, WindowStack

logger = logging.getLogger(__name__)


class ClearType(Enum):
    """Regions :meth:`Screen.clear` can blank."""
    ALL = 'all'
    CURRENT_LINE = 'current_line'
    UNTIL_NEWLINE = 'until_newline'
    CURRENT = 'current'


@dataclass
class RenderStats:
    """What a single render sent to the backend."""
    full_redraw: bool = False
    runs: int = 0
    cells: int = 0
    color_changes: int = 0


class Screen:
    """In-memory terminal screen with nested windows and diffed output.

    Geometry is never an error: cursor moves, windows and sizes that do not
    fit are clamped. Only backend I/O failures propagate.

    Attributes:
        backend: Terminal backend receiving output
        width: Grid width in cells
        height: Grid height in cells
        front: Grid the application draws into
        back: Grid mirroring the last rendered frame
        windows: Stack of nested windows; the top one is active
        cursor: Cursor position relative to the active window
        stored_cursor: Position kept by :meth:`save_cursor`
        force_redraw: Whether the next render rewrites every cell
    """

    def __init__(
        self,
        backend: Optional[Backend] = None,
        *,
        width: Optional[int] = None,
        height: Optional[int] = None,
        register_resize_handler: bool = False,
    ):
        self.backend = backend if backend is not None else BlessedBackend()
        if width is None or height is None:
            term_width, term_height = self.backend.size()
            width = term_width if width is None else width
            height = term_height if height is None else height
        self.width = max(1, width)
        self.height = max(1, height)

        self.front = CellGrid(self.width, self.height)
        self.back = CellGrid(self.width, self.height)
        self.windows = WindowStack(self.width, self.height)

        self.cursor = Point()
        self.stored_cursor = Point()
        self.fg_color: Color = None
        self.bg_color: Color = None

        self.cursor_style = CursorStyle.DEFAULT_USER_SHAPE
        self._emitted_cursor_style: Optional[CursorStyle] = CursorStyle.DEFAULT_USER_SHAPE
        self.cursor_visible = True
        self._emitted_cursor_visible: Optional[bool] = True

        self.force_redraw = False
        self._resize_pending = False
        if register_resize_handler:
            signal.signal(signal.SIGWINCH, self._handle_sigwinch)

    # Session

    def begin(self):
        """Switch the terminal to raw mode and the alternate screen."""
        self.backend.enable_raw_mode()
        self.backend.enter_alternate_screen()
        self.backend.move_to(0, 0)
        self.backend.flush()
        logger.debug("screen session started at %dx%d", self.width, self.height)

    def end(self):
        """Restore the cursor and colors, leave the alternate screen and raw mode."""
        try:
            if self._emitted_cursor_visible is not True:
                self.backend.show_cursor()
                self._emitted_cursor_visible = True
            if self._emitted_cursor_style is not CursorStyle.DEFAULT_USER_SHAPE:
                self.backend.set_cursor_style(CursorStyle.DEFAULT_USER_SHAPE)
                self._emitted_cursor_style = CursorStyle.DEFAULT_USER_SHAPE
            self.backend.set_colors(None, None)
            self.backend.leave_alternate_screen()
            self.backend.flush()
        finally:
            self.backend.disable_raw_mode()
        logger.debug("screen session ended")

    def __enter__(self):
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.end()

    # Geometry

    def get_width(self) -> int:
        """Width of the active window."""
        return self.windows.active().width

    def get_height(self) -> int:
        """Height of the active window."""
        return self.windows.active().height

    def get_size(self) -> Tuple[int, int]:
        """Width and height of the active window."""
        window = self.windows.active()
        return window.width, window.height

    @property
    def window_depth(self) -> int:
        """Number of windows currently pushed."""
        return len(self.windows)

    def begin_window(self, x: int, y: int, width: int, height: int) -> WindowBounds:
        """Push a window at (x, y) relative to the active one.

        The window is clamped into its parent. The cursor and stored cursor
        move to the new window's origin.
        """
        window = self.windows.push(x, y, width, height)
        self.cursor = Point()
        self.stored_cursor = Point()
        logger.debug("entered window %s (depth %d)", window, len(self.windows))
        return window

    def end_window(self):
        """Pop the active window, carrying the cursor into the parent's space."""
        window = self.windows.pop()
        if window is None:
            return
        parent = self.windows.active()
        dx = window.x - parent.x
        dy = window.y - parent.y
        self.cursor = Point(self.cursor.x + dx, self.cursor.y + dy)
        self.stored_cursor = Point(self.stored_cursor.x + dx, self.stored_cursor.y + dy)
        logger.debug("left window %s (depth %d)", window, len(self.windows))

    # Cursor

    def get_cursor(self) -> Tuple[int, int]:
        """Cursor position relative to the active window."""
        return self.cursor.x, self.cursor.y

    def move_to(self, x: int, y: int):
        """Move the cursor, clamped to the active window."""
        self.cursor = self._clamp_point(Point(x, y))

    def save_cursor(self):
        """Remember the cursor position for :meth:`restore_cursor`."""
        self.stored_cursor = Point(self.cursor.x, self.cursor.y)

    def restore_cursor(self):
        """Recall the saved cursor, clamped to the active window."""
        self.cursor = self._clamp_point(self.stored_cursor)

    def get_cursor_style(self) -> CursorStyle:
        """Cursor shape to show after the next render."""
        return self.cursor_style

    def set_cursor_style(self, style: CursorStyle):
        """Set the cursor shape; sent at the next render."""
        self.cursor_style = style

    def get_cursor_visibility(self) -> bool:
        """Whether the cursor is shown after the next render."""
        return self.cursor_visible

    def set_cursor_visibility(self, visible: bool):
        """Show or hide the cursor at the next render."""
        self.cursor_visible = visible

    def show_cursor(self):
        """Show the cursor at the next render."""
        self.set_cursor_visibility(True)

    def hide_cursor(self):
        """Hide the cursor at the next render."""
        self.set_cursor_visibility(False)

    def _clamp_point(self, point: Point) -> Point:
        window = self.windows.active()
        return Point(
            WindowBounds._clamp(point.x, 0, window.width - 1),
            WindowBounds._clamp(point.y, 0, window.height - 1),
        )

    # Colors

    @property
    def colors(self) -> Tuple[Color, Color]:
        """Active (foreground, background) pair."""
        return self.fg_color, self.bg_color

    def set_colors(self, fg: Color, bg: Color):
        """Set both colors for subsequently written cells."""
        self.fg_color = fg
        self.bg_color = bg

    def set_foreground_color(self, fg: Color):
        """Set the foreground color for subsequently written cells."""
        self.fg_color = fg

    def set_background_color(self, bg: Color):
        """Set the background color for subsequently written cells."""
        self.bg_color = bg

    def clear_colors(self):
        """Reset both colors to the terminal default."""
        self.fg_color = None
        self.bg_color = None

    # Drawing

    def print(self, text: str):
        """Write text at the cursor with the active colors.

        The cursor advances after every character. A newline, or running off
        the window's right edge, moves to the start of the next row; running
        off the bottom row wraps back to the window's top row.
        """
        window = self.windows.active()
        x, y = self.cursor.x, self.cursor.y
        for char in text:
            if char == '\n':
                x = 0
                y += 1
            else:
                self.front.set(window.x + x, window.y + y,
                               Cell(self.fg_color, self.bg_color, char))
                x += 1
                if x < window.width:
                    continue
                x = 0
                y += 1
            if y >= window.height:
                y = 0
        self.cursor = Point(x, y)

    def print_char(self, char: str):
        """Write a single character, same as :meth:`print`."""
        self.print(char)

    def print_at(self, x: int, y: int, text: str):
        """Move the cursor to (x, y) and print text there."""
        self.move_to(x, y)
        self.print(text)

    def clear(self, kind: ClearType = ClearType.ALL):
        """Blank part of the active window."""
        window = self.windows.active()
        grid = self.front
        row = window.y + self.cursor.y
        match kind:
            case ClearType.ALL:
                if not self.windows:
                    grid.fill(EMPTY_CELL)
                else:
                    for y in range(window.y, window.y + window.height):
                        start = grid.index(window.x, y)
                        grid.fill_range(start, start + window.width)
            case ClearType.CURRENT_LINE:
                start = grid.index(window.x, row)
                grid.fill_range(start, start + window.width)
            case ClearType.UNTIL_NEWLINE:
                start = grid.index(window.x, row)
                grid.fill_range(start + self.cursor.x, start + window.width)
            case ClearType.CURRENT:
                grid.set(window.x + self.cursor.x, row, EMPTY_CELL)

    # Resize

    def resize(self, width: int, height: int):
        """Reallocate both grids, keeping the front grid's top-left corner.

        The back grid starts blank and the next render rewrites everything.
        Pushed windows and both cursors are clamped into the new bounds.
        """
        width = max(1, width)
        height = max(1, height)
        logger.debug("resizing screen %dx%d -> %dx%d", self.width, self.height, width, height)
        self.front = self.front.resized(width, height)
        self.back = CellGrid(width, height)
        self.width = width
        self.height = height
        self.windows.resize(width, height)
        self.cursor = self._clamp_point(self.cursor)
        self.stored_cursor = self._clamp_point(self.stored_cursor)
        self.force_redraw = True

    def sync_size(self) -> bool:
        """Resize to the backend's current size; return whether it changed."""
        width, height = self.backend.size()
        if (width, height) == (self.width, self.height):
            return False
        self.resize(width, height)
        return True

    def _handle_sigwinch(self, signum, frame):
        """Defer the resize to the next render."""
        self._resize_pending = True

    def _process_resize(self):
        self._resize_pending = False
        self.sync_size()

    # Output

    def request_full_redraw(self):
        """Make the next render rewrite every cell and re-send cursor state.

        Call this after a failed render to resynchronise with the terminal.
        """
        self.force_redraw = True
        self._emitted_cursor_style = None
        self._emitted_cursor_visible = None

    def render(self) -> RenderStats:
        """Send pending changes to the backend and flush.

        Raises whatever the backend raises. On failure the back grid is not
        updated; call :meth:`request_full_redraw` before rendering again.
        """
        if self._resize_pending:
            self._process_resize()

        stats = RenderStats(full_redraw=self.force_redraw)
        if self.force_redraw:
            operations = full_redraw(self.front)
        else:
            operations = incremental(self.front, self.back)

        try:
            self._emit(operations, stats)
        except Exception:
            logger.warning("render aborted, terminal may be partially updated", exc_info=True)
            raise

        self.back.copy_from(self.front)
        self.force_redraw = False
        logger.debug("rendered %s", stats)
        return stats

    def _emit(self, operations, stats: RenderStats):
        backend = self.backend
        for op in operations:
            if isinstance(op, WriteRun):
                backend.move_to(op.x, op.y)
                backend.write(op.text)
                stats.runs += 1
                stats.cells += len(op.text)
            elif isinstance(op, SetColors):
                backend.set_colors(op.fg, op.bg)
                stats.color_changes += 1

        if self.cursor_style != self._emitted_cursor_style:
            backend.set_cursor_style(self.cursor_style)
            self._emitted_cursor_style = self.cursor_style

        if self.cursor_visible != self._emitted_cursor_visible:
            if self.cursor_visible:
                backend.show_cursor()
            else:
                backend.hide_cursor()
            self._emitted_cursor_visible = self.cursor_visible

        window = self.windows.active()
        backend.move_to(window.x + self.cursor.x, window.y + self.cursor.y)
        backend.flush()
