"""
Terminal Screen Library

A double-buffered terminal rendering core built on the Blessed library.
Keeps an in-memory grid of styled cells, supports nested clipped windows,
and writes only what changed since the last frame.
"""

from .backend import Backend, BlessedBackend
from .cell import EMPTY_CELL, EMPTY_CHAR, Cell, CellGrid
from .cursor import CursorStyle, Point
from .render import SetColors, WriteRun, full_redraw, incremental
from .screen import ClearType, RenderStats, Screen
from .window import WindowBounds, WindowStack

__all__ = [
    'Backend',
    'BlessedBackend',
    'EMPTY_CELL',
    'EMPTY_CHAR',
    'Cell',
    'CellGrid',
    'CursorStyle',
    'Point',
    'SetColors',
    'WriteRun',
    'full_redraw',
    'incremental',
    'ClearType',
    'RenderStats',
    'Screen',
    'WindowBounds',
    'WindowStack',
]

__version__ = '0.1.0'
