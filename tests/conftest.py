"""Shared fixtures: an in-memory backend that records every call."""

import pytest
from term_screen import Screen


class RecordingBackend:
    """Backend that appends each call to ``calls`` instead of doing I/O."""

    def __init__(self, width=10, height=4):
        self.width = width
        self.height = height
        self.calls = []
        self.fail_on = None

    def _record(self, name, *args):
        if name == self.fail_on:
            raise OSError(f"{name} failed")
        self.calls.append((name, *args))

    def size(self):
        return self.width, self.height

    def enable_raw_mode(self):
        self._record('enable_raw_mode')

    def disable_raw_mode(self):
        self._record('disable_raw_mode')

    def enter_alternate_screen(self):
        self._record('enter_alternate_screen')

    def leave_alternate_screen(self):
        self._record('leave_alternate_screen')

    def move_to(self, x, y):
        self._record('move_to', x, y)

    def set_colors(self, fg, bg):
        self._record('set_colors', fg, bg)

    def write(self, text):
        self._record('write', text)

    def show_cursor(self):
        self._record('show_cursor')

    def hide_cursor(self):
        self._record('hide_cursor')

    def set_cursor_style(self, style):
        self._record('set_cursor_style', style)

    def flush(self):
        self._record('flush')

    def named(self, name):
        return [call for call in self.calls if call[0] == name]

    def written(self):
        return ''.join(call[1] for call in self.named('write'))


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def screen(backend):
    return Screen(backend)
