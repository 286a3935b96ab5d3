"""Tests for the diff engine and Screen.render."""

import logging
from unittest.mock import Mock

import pytest
from term_screen import (
    Cell,
    CellGrid,
    CursorStyle,
    Screen,
    SetColors,
    WriteRun,
    full_redraw,
    incremental,
)


def grid_from(rows, colors=None):
    """Build a grid from strings; ``colors`` maps a character to its (fg, bg)."""
    colors = colors or {}
    grid = CellGrid(len(rows[0]), len(rows))
    for y, row in enumerate(rows):
        for x, char in enumerate(row):
            grid.set(x, y, Cell(*colors.get(char, (None, None)), char))
    return grid


class TestFullRedraw:
    """Tests for the full_redraw pass."""

    def test_single_color_is_one_run(self):
        grid = grid_from(['ab', 'cd'])
        assert list(full_redraw(grid)) == [
            SetColors(None, None),
            WriteRun(0, 0, 'abcd'),
        ]

    def test_runs_split_on_color_change(self):
        grid = grid_from(['abXY', '    '], colors={'X': ('red', None), 'Y': ('red', None)})
        assert list(full_redraw(grid)) == [
            SetColors(None, None),
            WriteRun(0, 0, 'ab'),
            SetColors('red', None),
            WriteRun(2, 0, 'XY'),
            SetColors(None, None),
            WriteRun(0, 1, '    '),
        ]

    def test_colored_first_cell(self):
        grid = grid_from(['Zb'], colors={'Z': (1, 2)})
        assert list(full_redraw(grid)) == [
            SetColors(None, None),
            SetColors(1, 2),
            WriteRun(0, 0, 'Z'),
            SetColors(None, None),
            WriteRun(1, 0, 'b'),
        ]

    def test_text_is_row_major_concatenation(self):
        rows = ['a1b2', 'c3d4', 'e5f6']
        grid = grid_from(rows, colors={'1': ('red', None), '4': (None, 'blue'), '5': (7, 8)})
        text = ''.join(op.text for op in full_redraw(grid) if isinstance(op, WriteRun))
        assert text == ''.join(rows)


class TestIncremental:
    """Tests for the incremental pass."""

    def test_identical_grids_write_nothing(self):
        grid = grid_from(['ab', 'cd'])
        ops = list(incremental(grid, grid_from(['ab', 'cd'])))
        assert ops == [SetColors(None, None)]

    def test_single_changed_cell(self):
        front = grid_from(['abc', 'dXf'])
        back = grid_from(['abc', 'def'])
        assert list(incremental(front, back)) == [
            SetColors(None, None),
            WriteRun(1, 1, 'X'),
        ]

    def test_equality_flip_splits_runs(self):
        front = grid_from(['xbyd'])
        back = grid_from(['abcd'])
        assert list(incremental(front, back)) == [
            SetColors(None, None),
            WriteRun(0, 0, 'x'),
            WriteRun(2, 0, 'y'),
        ]

    def test_run_spans_rows(self):
        front = grid_from(['abXY', 'Zfgh'])
        back = grid_from(['abcd', 'efgh'])
        assert list(incremental(front, back)) == [
            SetColors(None, None),
            WriteRun(2, 0, 'XYZ'),
        ]

    def test_color_change_inside_differing_run(self):
        front = grid_from(['xY..'], colors={'Y': ('red', None)})
        back = grid_from(['....'])
        assert list(incremental(front, back)) == [
            SetColors(None, None),
            WriteRun(0, 0, 'x'),
            SetColors('red', None),
            WriteRun(1, 0, 'Y'),
        ]

    def test_colors_carry_across_equal_stretch(self):
        """Test that a color pair already emitted is not sent again."""
        colors = {'X': ('red', None), 'Y': ('red', None)}
        front = grid_from(['X.Y'], colors=colors)
        back = grid_from(['...'])
        assert list(incremental(front, back)) == [
            SetColors(None, None),
            SetColors('red', None),
            WriteRun(0, 0, 'X'),
            WriteRun(2, 0, 'Y'),
        ]

    def test_color_only_change_is_written(self):
        front = grid_from(['a'], colors={'a': ('red', None)})
        back = grid_from(['a'])
        assert list(incremental(front, back)) == [
            SetColors(None, None),
            SetColors('red', None),
            WriteRun(0, 0, 'a'),
        ]


class TestScreenRender:
    """Tests for Screen.render against the recording backend."""

    def test_full_redraw_calls(self, backend):
        screen = Screen(backend, width=4, height=2)
        screen.print('ab')
        screen.set_colors('red', None)
        screen.print('cd')
        screen.clear_colors()
        screen.force_redraw = True

        stats = screen.render()

        assert backend.calls == [
            ('set_colors', None, None),
            ('move_to', 0, 0),
            ('write', 'ab'),
            ('set_colors', 'red', None),
            ('move_to', 2, 0),
            ('write', 'cd'),
            ('set_colors', None, None),
            ('move_to', 0, 1),
            ('write', '    '),
            ('move_to', 0, 1),
            ('flush',),
        ]
        assert stats.full_redraw is True
        assert stats.runs == 3
        assert stats.cells == 8
        assert stats.color_changes == 3
        assert screen.force_redraw is False

    def test_incremental_calls(self, screen, backend):
        screen.print('ab')
        stats = screen.render()
        assert backend.calls == [
            ('set_colors', None, None),
            ('move_to', 0, 0),
            ('write', 'ab'),
            ('move_to', 2, 0),
            ('flush',),
        ]
        assert stats.full_redraw is False
        assert stats.cells == 2

    def test_second_render_writes_nothing(self, screen, backend):
        screen.set_colors('yellow', 'blue')
        screen.print_at(3, 1, 'hello\nworld')
        screen.render()
        backend.calls.clear()

        stats = screen.render()

        assert backend.named('write') == []
        assert stats.runs == 0
        assert backend.calls[-1] == ('flush',)

    def test_back_grid_synced(self, screen):
        screen.print('xyz')
        screen.render()
        assert screen.back == screen.front

    def test_only_changes_sent(self, screen, backend):
        screen.print('hello')
        screen.render()
        backend.calls.clear()
        screen.print_at(1, 0, 'a')
        screen.render()
        assert backend.named('write') == [('write', 'a')]
        assert ('move_to', 1, 0) in backend.calls

    def test_cursor_moved_to_absolute_position(self, screen, backend):
        screen.begin_window(2, 1, 5, 2)
        screen.move_to(1, 1)
        screen.render()
        assert backend.calls[-2:] == [('move_to', 3, 2), ('flush',)]

    def test_cursor_state_emitted_once(self, screen, backend):
        screen.set_cursor_style(CursorStyle.BLINKING_BAR)
        screen.hide_cursor()
        screen.render()
        assert backend.named('set_cursor_style') == [('set_cursor_style', CursorStyle.BLINKING_BAR)]
        assert backend.named('hide_cursor') == [('hide_cursor',)]

        backend.calls.clear()
        screen.render()
        assert backend.named('set_cursor_style') == []
        assert backend.named('hide_cursor') == []

        screen.show_cursor()
        screen.render()
        assert backend.named('show_cursor') == [('show_cursor',)]

    def test_unchanged_cursor_state_not_emitted(self, screen, backend):
        screen.render()
        assert backend.named('set_cursor_style') == []
        assert backend.named('show_cursor') == []
        assert backend.named('hide_cursor') == []


class TestRenderFailure:
    """Tests for render aborting on backend errors."""

    def test_failure_leaves_back_grid_unsynced(self, screen, backend):
        screen.print('abc')
        backend.fail_on = 'flush'
        with pytest.raises(OSError):
            screen.render()
        assert screen.back != screen.front
        assert screen.back.row_text(0) == ' ' * 10

    def test_failure_aborts_mid_stream(self, screen, backend):
        screen.print('abc')
        backend.fail_on = 'write'
        with pytest.raises(OSError):
            screen.render()
        assert backend.named('flush') == []

    def test_failure_keeps_force_redraw(self, screen, backend):
        screen.resize(8, 3)
        backend.fail_on = 'write'
        with pytest.raises(OSError):
            screen.render()
        assert screen.force_redraw is True

    def test_recovery_with_full_redraw(self, screen, backend):
        screen.set_cursor_style(CursorStyle.STEADY_BLOCK)
        screen.print('abc')
        backend.fail_on = 'flush'
        with pytest.raises(OSError):
            screen.render()

        backend.fail_on = None
        backend.calls.clear()
        screen.request_full_redraw()
        stats = screen.render()

        assert stats.full_redraw is True
        assert backend.written() == 'abc' + ' ' * 37
        assert backend.named('set_cursor_style') == [('set_cursor_style', CursorStyle.STEADY_BLOCK)]
        assert backend.named('show_cursor') == [('show_cursor',)]
        assert screen.back == screen.front

    def test_any_backend_error_logged_and_raised(self, screen, backend, caplog):
        """Test that non-I/O backend errors are logged and propagate unchanged."""
        screen.print('abc')
        backend.flush = Mock(side_effect=RuntimeError("backend gone"))
        with caplog.at_level(logging.WARNING, logger='term_screen.screen'):
            with pytest.raises(RuntimeError, match="backend gone"):
                screen.render()
        assert any(record.levelno == logging.WARNING for record in caplog.records)
        assert screen.back != screen.front

    def test_io_error_logged(self, screen, backend, caplog):
        backend.fail_on = 'write'
        screen.print('x')
        with caplog.at_level(logging.WARNING, logger='term_screen.screen'):
            with pytest.raises(OSError):
                screen.render()
        assert 'render aborted' in caplog.text
