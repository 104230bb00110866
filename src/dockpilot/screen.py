"""
Rendering capability consumed by the view state machine, plus the output
side channel that exec and log streaming write into.

Keys reach the state machine as normalized names: single printable
characters, or one of KEY_ENTER, KEY_BACKSPACE, KEY_ESCAPE, KEY_TAB,
KEY_UP, KEY_DOWN, KEY_LEFT, KEY_RIGHT. Each renderer translates its own
key events.
"""

import abc
import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .model import DisplayRow, Severity

KEY_ENTER = "enter"
KEY_BACKSPACE = "backspace"
KEY_ESCAPE = "escape"
KEY_TAB = "tab"
KEY_UP = "up"
KEY_DOWN = "down"
KEY_LEFT = "left"
KEY_RIGHT = "right"

KeyHandler = Callable[[str], None]


@dataclass(frozen=True)
class FormField:
    label: str
    value: str
    focused: bool = False


class Screen(abc.ABC):
    """What the state machine needs from a terminal renderer."""

    @abc.abstractmethod
    def show_table(self, title: str, rows: Sequence[DisplayRow],
                   on_row_selected: Callable[[int], None], on_key: KeyHandler) -> None: ...

    @abc.abstractmethod
    def show_text_panel(self, title: str, text: str, on_key: KeyHandler,
                        severity: Optional[Severity] = None) -> None: ...

    @abc.abstractmethod
    def show_form(self, title: str, fields: Sequence[FormField], on_key: KeyHandler,
                  on_submit: Callable[[], None], on_cancel: Callable[[], None]) -> None: ...

    @abc.abstractmethod
    def show_modal(self, text: str, buttons: Sequence[str], on_choice: Callable[[str], None]) -> None: ...

    @abc.abstractmethod
    def force_redraw(self) -> None: ...


class RoutedScreen(Screen):
    """
    Screen that remembers what it was asked to show and routes keys to the
    registered callbacks. Renderers subclass it and only add drawing.

    Owns presentation state only: table cursor, scroll offset and the
    highlighted modal button.
    """

    def __init__(self):
        self.mode: Optional[str] = None
        self.title = ""
        self.rows: Sequence[DisplayRow] = ()
        self.text = ""
        self.severity: Optional[Severity] = None
        self.fields: Sequence[FormField] = ()
        self.buttons: Sequence[str] = ()
        self.selected_index = 0
        self.scroll_offset = 0
        self.page_height = 1
        self.button_index = 0
        self.message = ""
        self.dirty = True
        self._on_key: Optional[KeyHandler] = None
        self._on_row_selected: Optional[Callable[[int], None]] = None
        self._on_submit: Optional[Callable[[], None]] = None
        self._on_cancel: Optional[Callable[[], None]] = None
        self._on_choice: Optional[Callable[[str], None]] = None

    def show_table(self, title, rows, on_row_selected, on_key) -> None:
        self.mode = "table"
        self.title = title
        self.rows = rows
        self._on_row_selected = on_row_selected
        self._on_key = on_key
        if self.selected_index >= len(rows):
            self.selected_index = max(0, len(rows) - 1)
        self.clamp_scroll()

    def show_text_panel(self, title, text, on_key, severity=None) -> None:
        self.mode = "panel"
        self.title = title
        self.text = text
        self.severity = severity
        self._on_key = on_key

    def show_form(self, title, fields, on_key, on_submit, on_cancel) -> None:
        self.mode = "form"
        self.title = title
        self.fields = fields
        self._on_key = on_key
        self._on_submit = on_submit
        self._on_cancel = on_cancel

    def show_modal(self, text, buttons, on_choice) -> None:
        self.mode = "modal"
        self.title = "Error"
        self.text = text
        self.buttons = list(buttons)
        self.button_index = 0
        self._on_choice = on_choice

    def force_redraw(self) -> None:
        self.dirty = True

    def feed_key(self, key: str) -> None:
        self.message = ""
        if self.mode == "table":
            if key == KEY_UP:
                self.move_selection(-1)
            elif key == KEY_DOWN:
                self.move_selection(1)
            elif key == KEY_ENTER:
                if self.rows and self._on_row_selected:
                    self._on_row_selected(self.selected_index)
            elif self._on_key:
                self._on_key(key)
        elif self.mode == "form":
            if key == KEY_ENTER and self._on_submit:
                self._on_submit()
            elif key == KEY_ESCAPE and self._on_cancel:
                self._on_cancel()
            elif self._on_key:
                self._on_key(key)
        elif self.mode == "modal":
            if key in (KEY_LEFT, KEY_RIGHT, KEY_TAB) and self.buttons:
                step = -1 if key == KEY_LEFT else 1
                self.button_index = (self.button_index + step) % len(self.buttons)
                self.dirty = True
            elif key == KEY_ENTER and self.buttons and self._on_choice:
                self._on_choice(self.buttons[self.button_index])
            elif key == KEY_ESCAPE and self.buttons and self._on_choice:
                self._on_choice(self.buttons[0])
        elif self._on_key:
            self._on_key(key)

    def move_selection(self, delta: int) -> None:
        if not self.rows:
            self.selected_index = 0
            return
        new_idx = max(0, min(self.selected_index + delta, len(self.rows) - 1))
        if new_idx != self.selected_index:
            self.selected_index = new_idx
            self.clamp_scroll()
            self.dirty = True

    def clamp_scroll(self) -> None:
        if self.selected_index < self.scroll_offset:
            self.scroll_offset = self.selected_index
        elif self.selected_index >= self.scroll_offset + self.page_height:
            self.scroll_offset = self.selected_index - self.page_height + 1
        self.scroll_offset = max(0, self.scroll_offset)

    def hint(self) -> str:
        if self.mode == "table":
            return " Up/Down: Select | Enter: Actions | f: Filter | r: Refresh | b: Clear filter | q: Quit "
        if self.mode == "form":
            return " Tab: Switch field | Enter: Apply | Esc: Cancel "
        if self.mode == "modal":
            return " Enter: OK | Esc: Dismiss "
        return " Type a letter and press Enter | Esc: Back "


class OutputLog:
    """
    Thread-safe bounded line buffer for exec and log output.

    Background actions write raw chunks; the render thread reads whole lines.
    A version counter lets renderers redraw only when something arrived.
    """

    def __init__(self, max_lines: int = 1000):
        self._lock = threading.Lock()
        self._lines = deque(maxlen=max_lines)
        self._partial = ""
        self._version = 0

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def write(self, text: str) -> int:
        if not text:
            return 0
        with self._lock:
            parts = (self._partial + text).replace("\r\n", "\n").split("\n")
            self._partial = parts.pop()
            self._lines.extend(parts)
            self._version += 1
        return len(text)

    def flush(self) -> None:
        pass

    def lines(self) -> List[str]:
        with self._lock:
            lines = list(self._lines)
            if self._partial:
                lines.append(self._partial)
            return lines

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()
            self._partial = ""
            self._version += 1
