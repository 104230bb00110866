import curses

import pytest
from unittest.mock import MagicMock

from dockpilot.model import DisplayRow, Severity, StatusClass
from dockpilot.screen import FormField, OutputLog
from dockpilot.ui import CursesScreen, format_row, translate_key


@pytest.fixture
def stdscr(mocker):
    mocker.patch('curses.color_pair', return_value=0)
    scr = MagicMock()
    scr.getmaxyx.return_value = (24, 80)
    return scr


def rows(n):
    return tuple(
        DisplayRow(f"id{i:010d}", f"id{i:010d}", f"c{i}", "RUNNING", StatusClass.HEALTHY, i)
        for i in range(n)
    )


def drawn_text(scr):
    return [c.args[2] for c in scr.addstr.call_args_list]


def test_translate_key():
    assert translate_key(10) == "enter"
    assert translate_key(13) == "enter"
    assert translate_key(127) == "backspace"
    assert translate_key(curses.KEY_BACKSPACE) == "backspace"
    assert translate_key(27) == "escape"
    assert translate_key(9) == "tab"
    assert translate_key(curses.KEY_UP) == "up"
    assert translate_key(curses.KEY_DOWN) == "down"
    assert translate_key(ord('x')) == "x"
    assert translate_key(ord(' ')) == " "
    assert translate_key(curses.KEY_F1) is None


def test_format_row_truncates_name():
    row = DisplayRow("a" * 12, "a" * 12, "n" * 200, "RUNNING", StatusClass.HEALTHY, 0)
    assert len(format_row(row, 80)) < 80


def test_draw_table(stdscr):
    screen = CursesScreen(stdscr)
    screen.show_table("Containers (3)", rows(3), MagicMock(), MagicMock())
    screen.draw()
    text = " ".join(drawn_text(stdscr))
    assert "Containers (3)" in text
    assert "c0" in text and "c2" in text
    assert not screen.dirty
    stdscr.noutrefresh.assert_called()


def test_draw_empty_table(stdscr):
    screen = CursesScreen(stdscr)
    screen.show_table("Containers (0)", (), MagicMock(), MagicMock())
    screen.draw()
    assert "No containers." in drawn_text(stdscr)


def test_table_navigation_and_selection(stdscr):
    on_row_selected = MagicMock()
    on_key = MagicMock()
    screen = CursesScreen(stdscr)
    screen.show_table("t", rows(3), on_row_selected, on_key)

    screen.feed_key("down")
    screen.feed_key("down")
    screen.feed_key("down")
    assert screen.selected_index == 2
    screen.feed_key("up")
    screen.feed_key("enter")
    on_row_selected.assert_called_once_with(1)

    screen.feed_key("f")
    on_key.assert_called_once_with("f")


def test_scroll_follows_selection(stdscr):
    stdscr.getmaxyx.return_value = (10, 80)
    screen = CursesScreen(stdscr)
    screen.show_table("t", rows(30), MagicMock(), MagicMock())
    screen.draw()
    for _ in range(20):
        screen.feed_key("down")
    screen.draw()
    assert screen.scroll_offset > 0
    assert screen.scroll_offset <= screen.selected_index < screen.scroll_offset + screen.page_height


def test_selection_clamped_when_rows_shrink(stdscr):
    screen = CursesScreen(stdscr)
    screen.show_table("t", rows(5), MagicMock(), MagicMock())
    screen.selected_index = 4
    screen.show_table("t", rows(2), MagicMock(), MagicMock())
    assert screen.selected_index == 1


def test_panel_routes_keys(stdscr):
    on_key = MagicMock()
    screen = CursesScreen(stdscr)
    screen.show_text_panel("Failed", "Failed to perform action: boom\n\nmore", on_key, severity=Severity.FAILURE)
    screen.draw()
    assert "Failed to perform action: boom" in drawn_text(stdscr)
    screen.feed_key("enter")
    on_key.assert_called_once_with("enter")


def test_form_submit_and_cancel(stdscr):
    on_submit, on_cancel, on_key = MagicMock(), MagicMock(), MagicMock()
    screen = CursesScreen(stdscr)
    screen.show_form("Filter", [FormField("Filter by", "name"), FormField("Value", "we", True)],
                     on_key, on_submit, on_cancel)
    screen.draw()
    assert "we_" in drawn_text(stdscr)

    screen.feed_key("b")
    on_key.assert_called_once_with("b")
    screen.feed_key("enter")
    on_submit.assert_called_once_with()
    screen.feed_key("escape")
    on_cancel.assert_called_once_with()


def test_modal_choice(stdscr):
    on_choice = MagicMock()
    screen = CursesScreen(stdscr)
    screen.show_modal("Error: boom", ["OK"], on_choice)
    screen.draw()
    assert "Error: boom" in drawn_text(stdscr)
    screen.feed_key("x")
    on_choice.assert_not_called()
    screen.feed_key("enter")
    on_choice.assert_called_once_with("OK")


def test_output_pane_drawn_when_present(stdscr):
    output = OutputLog()
    output.write("hello from exec\n")
    screen = CursesScreen(stdscr, output)
    screen.show_text_panel("Success", "done", MagicMock())
    screen.draw()
    text = drawn_text(stdscr)
    assert " OUTPUT " in text
    assert "hello from exec" in text


def test_terminal_too_small(stdscr):
    stdscr.getmaxyx.return_value = (5, 20)
    screen = CursesScreen(stdscr)
    screen.show_table("t", rows(3), MagicMock(), MagicMock())
    screen.draw()
    assert drawn_text(stdscr) == ["Terminal too small!"]


def test_addstr_errors_are_ignored(stdscr):
    stdscr.addstr.side_effect = curses.error
    screen = CursesScreen(stdscr)
    screen.show_table("t", rows(3), MagicMock(), MagicMock())
    screen.draw()
    assert not screen.dirty


def test_output_log_partial_lines():
    log = OutputLog(max_lines=2)
    log.write("a\nb")
    assert log.lines() == ["a", "b"]
    log.write("c\r\nd\n")
    assert log.lines() == ["bc", "d"]
    version = log.version
    log.clear()
    assert log.lines() == []
    assert log.version > version


def test_modal_escape_picks_first_button(stdscr):
    on_choice = MagicMock()
    screen = CursesScreen(stdscr)
    screen.show_modal("Error: boom", ["OK", "Retry"], on_choice)
    screen.feed_key("right")
    screen.feed_key("escape")
    on_choice.assert_called_once_with("OK")
