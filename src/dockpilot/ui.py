"""
Curses-based Terminal UI rendering engine.

CursesScreen implements screen.Screen on top of the curses standard screen.
The state machine tells it what to show (table, text panel, form, modal) and
which callbacks to invoke; key routing and cursor state come from
screen.RoutedScreen, this module only draws.

Layout (single stdscr, regions):
  - Row 0: title bar
  - Row 1: view title
  - Body: table / text panel / form / modal
  - Output pane: exec and log output (only when there is some)
  - Last row: key hints or error message

Color Pairs (initialized in init_colors):
  1: White (default text)
  2: Success (running / healthy)
  3: Error (stopped / failure)
  4: Accent (headers / borders)
  5: Magenta (column headers)
  6: Warning
  7: Inverse accent (selection / title bar)

Dependencies:
  - curses (Python built-in, terminal mode)

Limitations:
  - curses not available on Windows (use WSL)
  - Terminal must be >= 8 lines high and 30 columns wide
"""

import curses
from typing import List, Optional

from .config import ColorTheme
from .model import DisplayRow, Severity, StatusClass
from .screen import (
    KEY_BACKSPACE, KEY_DOWN, KEY_ENTER, KEY_ESCAPE, KEY_LEFT, KEY_RIGHT,
    KEY_TAB, KEY_UP, OutputLog, RoutedScreen,
)

# Column width constants
COL_ID = 14
COL_STATUS = 12

MIN_HEIGHT = 8
MIN_WIDTH = 30

_COLOR_NAMES = {
    "black": curses.COLOR_BLACK,
    "red": curses.COLOR_RED,
    "green": curses.COLOR_GREEN,
    "yellow": curses.COLOR_YELLOW,
    "blue": curses.COLOR_BLUE,
    "magenta": curses.COLOR_MAGENTA,
    "cyan": curses.COLOR_CYAN,
    "white": curses.COLOR_WHITE,
}


def _color(name: str, default: int) -> int:
    return _COLOR_NAMES.get(str(name).lower(), default)


def init_colors(theme: Optional[ColorTheme] = None):
    theme = theme or ColorTheme()
    curses.start_color()
    curses.use_default_colors()
    accent = _color(theme.accent, curses.COLOR_CYAN)
    curses.init_pair(1, curses.COLOR_WHITE, -1)                              # Default
    curses.init_pair(2, _color(theme.success, curses.COLOR_GREEN), -1)       # Success / Running
    curses.init_pair(3, _color(theme.error, curses.COLOR_RED), -1)           # Error / Stopped
    curses.init_pair(4, accent, -1)                                          # Highlight
    curses.init_pair(5, curses.COLOR_MAGENTA, -1)                            # Column headers
    curses.init_pair(6, _color(theme.warning, curses.COLOR_YELLOW), -1)      # Warning
    curses.init_pair(7, curses.COLOR_BLACK, accent)                          # Inverse Highlight


def translate_key(ch: int) -> Optional[str]:
    """Map a curses key code onto the key names of screen.py."""
    if ch in (10, 13, curses.KEY_ENTER):
        return KEY_ENTER
    if ch in (curses.KEY_BACKSPACE, 127, 8):
        return KEY_BACKSPACE
    if ch == 27:
        return KEY_ESCAPE
    if ch == 9:
        return KEY_TAB
    if ch == curses.KEY_UP:
        return KEY_UP
    if ch == curses.KEY_DOWN:
        return KEY_DOWN
    if ch == curses.KEY_LEFT:
        return KEY_LEFT
    if ch == curses.KEY_RIGHT:
        return KEY_RIGHT
    if 32 <= ch <= 126:
        return chr(ch)
    return None


def _name_width(width: int) -> int:
    return max(10, width - COL_ID - COL_STATUS - 8)


def format_header(width: int) -> str:
    return f"{'ID':<{COL_ID}} {'STATUS':<{COL_STATUS}} {'CONTAINER NAME':<{_name_width(width)}}"


def format_row(row: DisplayRow, width: int) -> str:
    return (f"{row.short_id:<{COL_ID}} {row.status_label[:COL_STATUS-1]:<{COL_STATUS}} "
            f"{row.display_name[:_name_width(width)]}")


class CursesScreen(RoutedScreen):
    def __init__(self, stdscr, output: Optional[OutputLog] = None):
        super().__init__()
        self.stdscr = stdscr
        self.output = output

    def put(self, y: int, x: int, text: str, attr: int = 0) -> None:
        h, w = self.stdscr.getmaxyx()
        if y < 0 or y >= h or x >= w:
            return
        try:
            self.stdscr.addstr(y, x, text[:max(0, w - x - 1)], attr)
        except curses.error:
            # Ignore if window is too small or position invalid
            pass

    def draw(self) -> None:
        h, w = self.stdscr.getmaxyx()
        self.stdscr.erase()
        if h < MIN_HEIGHT or w < MIN_WIDTH:
            self.put(0, 0, "Terminal too small!")
            self.stdscr.noutrefresh()
            self.dirty = False
            return

        self.put(0, 0, " dockpilot ".center(w - 1), curses.color_pair(7) | curses.A_BOLD)
        self.put(1, 1, self.title, curses.color_pair(4) | curses.A_BOLD)

        body_top = 2
        body_bottom = h - 2
        lines = self.output.lines() if self.output else []
        if lines:
            pane_h = max(3, (h - 3) // 3)
            body_bottom = h - 2 - pane_h
            draw_output(self, lines, body_bottom + 1, pane_h, w)

        if self.mode == "table":
            draw_table(self, body_top, body_bottom, w)
        elif self.mode == "panel":
            draw_panel(self, body_top, body_bottom)
        elif self.mode == "form":
            draw_form(self, body_top)
        elif self.mode == "modal":
            draw_modal(self, body_top, body_bottom, w)

        draw_footer(self, h)
        self.stdscr.noutrefresh()
        self.dirty = False


def draw_table(screen: CursesScreen, top: int, bottom: int, width: int) -> None:
    screen.put(top, 1, "   " + format_header(width), curses.color_pair(5) | curses.A_BOLD)
    start_y = top + 1
    screen.page_height = max(1, bottom - start_y + 1)
    screen.clamp_scroll()

    if not screen.rows:
        screen.put(start_y, 2, "No containers.", curses.A_DIM)
        return

    offset = screen.scroll_offset
    for i, row in enumerate(screen.rows[offset:offset + screen.page_height]):
        is_selected = (offset + i == screen.selected_index)
        row_style = curses.color_pair(7) if is_selected else curses.A_NORMAL
        if row.status_class is StatusClass.HEALTHY:
            s_color = curses.color_pair(2)
        else:
            s_color = curses.color_pair(3)
        screen.put(start_y + i, 1, " * ", s_color | (curses.A_REVERSE if is_selected else 0))
        screen.put(start_y + i, 4, format_row(row, width).ljust(width - 6), row_style)


def draw_panel(screen: CursesScreen, top: int, bottom: int) -> None:
    first_style = curses.A_BOLD
    if screen.severity is Severity.SUCCESS:
        first_style |= curses.color_pair(2)
    elif screen.severity is Severity.FAILURE:
        first_style |= curses.color_pair(3)
    for i, line in enumerate(screen.text.splitlines()):
        y = top + 1 + i
        if y > bottom:
            break
        screen.put(y, 2, line, first_style if i == 0 else curses.A_NORMAL)


def draw_form(screen: CursesScreen, top: int) -> None:
    for i, fld in enumerate(screen.fields):
        y = top + 1 + i * 2
        screen.put(y, 2, f"{fld.label}:", curses.A_BOLD)
        if fld.focused:
            screen.put(y, 14, fld.value + "_", curses.color_pair(4) | curses.A_BOLD)
        else:
            screen.put(y, 14, f"{fld.value}  (Tab to switch)")


def draw_modal(screen: CursesScreen, top: int, bottom: int, width: int) -> None:
    lines = screen.text.splitlines() or [""]
    box_w = min(max(30, max(len(line) for line in lines) + 6), width - 4)
    box_h = len(lines) + 4
    start_y = max(top, top + (bottom - top - box_h) // 2)
    start_x = max(0, (width - box_w) // 2)

    border = curses.color_pair(3)
    screen.put(start_y, start_x, "+" + "-" * (box_w - 2) + "+", border)
    for i in range(box_h - 2):
        screen.put(start_y + 1 + i, start_x, "|" + " " * (box_w - 2) + "|", border)
    screen.put(start_y + box_h - 1, start_x, "+" + "-" * (box_w - 2) + "+", border)
    for i, line in enumerate(lines):
        screen.put(start_y + 1 + i, start_x + 2, line[:box_w - 4], curses.A_BOLD)

    x = start_x + 2
    for idx, label in enumerate(screen.buttons):
        btn = f" [ {label} ] "
        style = curses.A_REVERSE if idx == screen.button_index else curses.A_NORMAL
        screen.put(start_y + box_h - 2, x, btn, style)
        x += len(btn) + 2


def draw_output(screen: CursesScreen, lines: List[str], top: int, height: int, width: int) -> None:
    screen.put(top, 0, "-" * (width - 1), curses.color_pair(4))
    screen.put(top, 2, " OUTPUT ", curses.color_pair(4) | curses.A_BOLD)
    visible = lines[-(height - 1):] if height > 1 else []
    for i, line in enumerate(visible):
        screen.put(top + 1 + i, 1, line)


def draw_footer(screen: CursesScreen, height: int) -> None:
    bar_y = height - 1
    if screen.message:
        screen.put(bar_y, 0, f" {screen.message} ", curses.color_pair(3) | curses.A_BOLD)
    else:
        screen.put(bar_y, 0, screen.hint(), curses.A_DIM)
