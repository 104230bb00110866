"""Textual-based UI for dockpilot."""

from __future__ import annotations

from typing import Optional

from rich.markup import escape as rich_escape
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from .backend import ContainerBackend
from .config import AppConfig, config_manager
from .model import Severity, StatusClass, TableView
from .screen import KEY_TAB, OutputLog, RoutedScreen
from .state import ViewStateMachine

OUTPUT_PANE_LINES = 10


def translate_key(event: events.Key) -> Optional[str]:
    """Map a Textual key event onto the key names of screen.py."""
    if event.key in ("enter", "backspace", "escape", "tab", "up", "down", "left", "right"):
        return event.key
    if event.character and event.is_printable and len(event.character) == 1:
        return event.character
    return None


class TextualScreen(RoutedScreen):
    """Renders the state machine's views into the app's Static widgets."""

    def __init__(self, app: "DockpilotApp") -> None:
        super().__init__()
        self.app = app

    def _style(self, name: str) -> str:
        theme = self.app.app_config.ui.color_theme
        return getattr(theme, name)

    def render_body(self) -> str:
        if self.mode == "table":
            return self._render_table()
        if self.mode == "panel":
            return self._render_panel()
        if self.mode == "form":
            return self._render_form()
        if self.mode == "modal":
            return self._render_modal()
        return ""

    def _render_table(self) -> str:
        if not self.rows:
            return "[dim]No containers.[/dim]"
        header = f"  {'ID':<14} {'STATUS':<12} CONTAINER NAME"
        lines = [f"[bold magenta]{rich_escape(header)}[/]"]
        offset = self.scroll_offset
        for i, row in enumerate(self.rows[offset:offset + self.page_height]):
            color = self._style("success") if row.status_class is StatusClass.HEALTHY else self._style("error")
            marker = ">" if offset + i == self.selected_index else " "
            line = (f"{marker} {rich_escape(row.short_id):<14} [{color}]{rich_escape(row.status_label):<12}[/] "
                    f"{rich_escape(row.display_name)}")
            if offset + i == self.selected_index:
                line = f"[reverse]{line}[/reverse]"
            lines.append(line)
        return "\n".join(lines)

    def _render_panel(self) -> str:
        lines = [rich_escape(line) for line in self.text.splitlines()]
        if lines and self.severity is not None:
            color = self._style("success") if self.severity is Severity.SUCCESS else self._style("error")
            lines[0] = f"[bold {color}]{lines[0]}[/]"
        return "\n".join(lines)

    def _render_form(self) -> str:
        lines = []
        for fld in self.fields:
            if fld.focused:
                lines.append(f"[bold]{rich_escape(fld.label)}:[/bold] [bold {self._style('accent')}]"
                             f"{rich_escape(fld.value)}_[/]")
            else:
                lines.append(f"[bold]{rich_escape(fld.label)}:[/bold] {rich_escape(fld.value)}  (Tab to switch)")
            lines.append("")
        return "\n".join(lines)

    def _render_modal(self) -> str:
        buttons = []
        for idx, label in enumerate(self.buttons):
            btn = f"[ {rich_escape(label)} ]"
            buttons.append(f"[reverse]{btn}[/reverse]" if idx == self.button_index else btn)
        return f"[bold {self._style('error')}]{rich_escape(self.text)}[/]\n\n" + "  ".join(buttons)


class DockpilotApp(App[None]):
    TITLE = "dockpilot"
    SUB_TITLE = "Docker containers"

    CSS = """
    Screen {
      layout: vertical;
    }

    #title {
      height: 1;
      padding: 0 1;
      background: $surface;
      text-style: bold;
    }

    #body {
      height: 1fr;
      border: round $accent;
      padding: 0 1;
      overflow: auto;
    }

    #output {
      height: 12;
      border: round $accent;
      padding: 0 1;
      display: none;
    }

    #output.visible {
      display: block;
    }

    #status {
      height: 1;
      padding: 0 1;
      background: $panel;
      color: $text;
    }
    """

    BINDINGS = [
        Binding("tab", "tab_key", "Switch", show=False, priority=True),
    ]

    def __init__(self, backend: ContainerBackend, config: Optional[AppConfig] = None) -> None:
        super().__init__()
        self.app_config = config or config_manager.get_config()
        self.output = OutputLog(self.app_config.ui.output_lines)
        self.machine = ViewStateMachine(backend, output=self.output, keybindings=self.app_config.keybindings)
        self.view_screen = TextualScreen(self)
        self._last_version = -1
        self._last_output = -1

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Static("", id="title", markup=False)
        yield Static("", id="body")
        yield Static("", id="output", markup=False)
        yield Static("", id="status", markup=False)
        yield Footer()

    def on_mount(self) -> None:
        self.machine.start()
        self.set_interval(max(0.05, self.app_config.ui.refresh_interval / 1000), self._tick)
        self._tick()

    def _tick(self) -> None:
        self.machine.process_completions()
        if self.machine.version != self._last_version:
            self.machine.present(self.view_screen)
            self._last_version = self.machine.version
        if self.view_screen.dirty:
            self._render_view()
        if self.output.version != self._last_output:
            self._render_output()

    def _render_view(self) -> None:
        body = self.query_one("#body", Static)
        self.view_screen.page_height = max(1, body.size.height - 3)
        self.view_screen.clamp_scroll()
        self.query_one("#title", Static).update(self.view_screen.title)
        body.update(self.view_screen.render_body())
        self.query_one("#status", Static).update(self.view_screen.message or self.view_screen.hint())
        self.view_screen.dirty = False

    def _render_output(self) -> None:
        lines = self.output.lines()
        pane = self.query_one("#output", Static)
        pane.set_class(bool(lines), "visible")
        pane.update("\n".join(lines[-OUTPUT_PANE_LINES:]))
        self._last_output = self.output.version

    def _feed(self, key: str) -> None:
        if key == self.app_config.keybindings.quit and isinstance(self.machine.current, TableView):
            self.exit()
            return
        self.view_screen.feed_key(key)
        self._tick()

    def action_tab_key(self) -> None:
        self._feed(KEY_TAB)

    async def on_key(self, event: events.Key) -> None:
        key = translate_key(event)
        if key is None:
            return
        event.stop()
        self._feed(key)


def run(backend: ContainerBackend, config: Optional[AppConfig] = None) -> None:
    app = DockpilotApp(backend, config)
    app.run()
