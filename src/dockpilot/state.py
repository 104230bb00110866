"""
View state machine: the single "current view" of the dashboard and every
transition between views.

Architecture:
  - Exactly one view (model.TableView, ActionMenu, ...) is current. A
    transition replaces it wholesale; nothing is stacked or cached.
  - Every installed view gets a new generation number. Background actions
    capture the generation of the PendingView that shows their progress.
  - Backend calls run on runner.ActionRunner threads. Their completion
    callback only puts a Completion on a queue.
  - The render thread calls process_completions(); a completion is applied
    only if its generation is still current, otherwise it is dropped.

Thread Safety:
  - Only the render/input thread calls handle_key, select_row, dispatch,
    process_completions and present. The view itself is never locked.
  - The completion queue is the only structure shared with worker threads.

"Back" always rebuilds the table from a fresh daemon listing, so the list
reflects the daemon's state after any action.
"""

import logging
import queue
import shlex
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .actions import (
    BACK_LETTER, EXEC_LETTER, FILTER_LETTER, MENU_COMMANDS, MENU_OPTIONS,
    PENDING_MESSAGES, bind, failure_message, success_message,
)
from .backend import ContainerBackend
from .config import KeyBindings
from .model import (
    ActionKind, ActionMenu, CommandPrompt, ContainerFilter, DisplaySnapshot,
    ErrorView, FilterForm, InFlightAction, NetworkInfoView, PendingView,
    ResultView, Severity, TableView,
)
from .prompt import command_letter
from .runner import ActionRunner, Outcome
from .screen import (
    KEY_BACKSPACE, KEY_DOWN, KEY_ENTER, KEY_ESCAPE, KEY_TAB, KEY_UP,
    FormField, OutputLog, Screen,
)
from .snapshot import build

logger = logging.getLogger(__name__)

ERROR_ACK = "OK"


@dataclass(frozen=True)
class Completion:
    action: InFlightAction
    outcome: Outcome
    argument: Any = None
    target_name: str = ""


def _printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class ViewStateMachine:
    def __init__(self, backend: ContainerBackend, runner: Optional[ActionRunner] = None,
                 output: Optional[OutputLog] = None, keybindings: Optional[KeyBindings] = None):
        self.backend = backend
        self.runner = runner or ActionRunner()
        self.output = output if output is not None else OutputLog()
        self.keys = keybindings or KeyBindings()
        self._completions: "queue.Queue[Completion]" = queue.Queue()
        self._current: Any = TableView(DisplaySnapshot())
        self._generation = 0
        self._version = 0
        self._in_flight: Dict[int, InFlightAction] = {}

    @property
    def current(self):
        return self._current

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def version(self) -> int:
        return self._version

    def in_flight(self) -> List[InFlightAction]:
        return list(self._in_flight.values())

    def pending_action(self) -> Optional[InFlightAction]:
        """The action owned by the current view, if any."""
        return self._in_flight.get(self._generation)

    def _touch(self) -> None:
        self._version += 1

    def _install(self, view) -> int:
        self._generation += 1
        self._current = view
        self._touch()
        logger.debug(f"view {self._generation}: {type(view).__name__}")
        return self._generation

    # --- Dispatch ---

    def start(self) -> None:
        """Load the initial, unfiltered table."""
        self.refresh_table()

    def dispatch(self, kind: ActionKind, target_id: Optional[str] = None,
                 target_name: str = "", argument: Any = None) -> bool:
        """
        Run a backend operation in the background.

        Shows the kind's progress message immediately. Rejected (returns
        False) while the current view already owns an unfinished action.
        """
        pending = self.pending_action()
        if pending is not None:
            logger.warning(f"Rejected {kind.value}: {pending.kind.value} still pending on view {self._generation}")
            return False
        return self._dispatch(kind, target_id, target_name, argument)

    def _dispatch(self, kind: ActionKind, target_id: Optional[str], target_name: str, argument: Any) -> bool:
        if kind in (ActionKind.EXEC, ActionKind.LOGS):
            # The output pane shows one command or log stream at a time.
            self.output.clear()
        generation = self._install(PendingView(kind, PENDING_MESSAGES[kind], target_id))
        action = InFlightAction(kind, target_id, generation)
        self._in_flight[generation] = action
        operation = bind(kind, self.backend, target_id, argument, self.output)

        def on_complete(outcome: Outcome) -> None:
            self._completions.put(Completion(action, outcome, argument, target_name))

        logger.info(f"dispatch {kind.value} target={target_id} generation={generation}")
        self.runner.dispatch(operation, on_complete, name=kind.value)
        return True

    def refresh_table(self) -> bool:
        return self.go_back()

    def go_back(self) -> bool:
        """Leave the current view for a freshly listed, unfiltered table."""
        stale = self.pending_action()
        if stale is not None:
            logger.info(f"Leaving pending {stale.kind.value}; its result will be discarded")
        return self._dispatch(ActionKind.LIST, None, "", None)

    def apply_filter(self, flt: ContainerFilter) -> bool:
        return self.dispatch(ActionKind.FILTER, argument=flt)

    # --- Completion delivery ---

    def process_completions(self, timeout: Optional[float] = None) -> int:
        """
        Apply finished background actions. Render thread only.

        With a timeout, waits up to that long for the first completion.
        Returns how many completions were taken off the queue (applied or
        dropped as stale).
        """
        handled = 0
        block = timeout is not None
        while True:
            try:
                if block:
                    completion = self._completions.get(timeout=timeout)
                    block = False
                else:
                    completion = self._completions.get_nowait()
            except queue.Empty:
                break
            self.deliver(completion)
            handled += 1
        return handled

    def deliver(self, completion: Completion) -> bool:
        action = completion.action
        self._in_flight.pop(action.generation, None)
        if action.generation != self._generation:
            logger.debug(f"Dropping stale {action.kind.value} result for view {action.generation} "
                         f"(current {self._generation})")
            return False
        self._apply(completion)
        return True

    def _apply(self, completion: Completion) -> None:
        kind = completion.action.kind
        outcome = completion.outcome

        if kind in (ActionKind.LIST, ActionKind.FILTER):
            if outcome.ok:
                flt = completion.argument if kind is ActionKind.FILTER else None
                self._install(TableView(build(outcome.value, flt)))
            else:
                self._install(ErrorView(outcome.error_text))
            return

        if not outcome.ok:
            self._install(ResultView(failure_message(outcome.error_text), Severity.FAILURE))
        elif kind is ActionKind.NETWORK_INFO:
            self._install(NetworkInfoView(completion.target_name, dict(outcome.value or {})))
        else:
            self._install(ResultView(success_message(kind, outcome.value), Severity.SUCCESS))

    # --- Input ---

    def select_row(self, index: int) -> bool:
        view = self._current
        if not isinstance(view, TableView):
            return False
        row = view.snapshot.row(index)
        if row is None:
            return False
        self._install(ActionMenu(row.id, row.display_name))
        return True

    def handle_key(self, key: str) -> None:
        view = self._current
        if isinstance(view, TableView):
            self._table_key(view, key)
        elif isinstance(view, ActionMenu):
            self._menu_key(view, key)
        elif isinstance(view, CommandPrompt):
            self._command_key(view, key)
        elif isinstance(view, FilterForm):
            self._filter_key(view, key)
        elif isinstance(view, PendingView):
            if key in (KEY_ESCAPE, self.keys.back):
                self.go_back()
        elif isinstance(view, (ResultView, NetworkInfoView)):
            self.go_back()

    def _table_key(self, view: TableView, key: str) -> None:
        if key == self.keys.filter:
            self.open_filter_form()
        elif key == self.keys.refresh:
            self.refresh_table()
        elif key in (KEY_ESCAPE, self.keys.back) and view.snapshot.filter is not None:
            self.go_back()

    def _menu_key(self, view: ActionMenu, key: str) -> None:
        if key == KEY_BACKSPACE:
            if view.input.backspace():
                self._touch()
        elif key == KEY_ESCAPE:
            self.go_back()
        elif key == KEY_ENTER:
            letter = command_letter(view.input.flush())
            if letter is None:
                return
            self._touch()
            self._run_menu_command(view, letter)
        elif _printable(key):
            view.input.append(key)
            self._touch()

    def _run_menu_command(self, view: ActionMenu, letter: str) -> None:
        if letter in MENU_COMMANDS:
            self.dispatch(MENU_COMMANDS[letter], view.target_id, view.target_name)
        elif letter == EXEC_LETTER:
            self._install(CommandPrompt(view.target_id, view.target_name))
        elif letter == FILTER_LETTER:
            self.open_filter_form()
        elif letter == BACK_LETTER:
            self.go_back()
        else:
            # Unknown letter stays as the pending candidate.
            view.input.replace(letter)

    def _command_key(self, view: CommandPrompt, key: str) -> None:
        if key == KEY_BACKSPACE:
            if view.input.backspace():
                self._touch()
        elif key == KEY_ESCAPE:
            self.go_back()
        elif key == KEY_ENTER:
            text = view.input.text.strip()
            if not text:
                return
            try:
                argv = shlex.split(text)
            except ValueError as e:
                self._install(ResultView(failure_message(f"invalid command: {e}"), Severity.FAILURE))
                return
            view.input.flush()
            self.dispatch(ActionKind.EXEC, view.target_id, view.target_name, argv)
        elif _printable(key):
            view.input.append(key)
            self._touch()

    def open_filter_form(self) -> None:
        self._install(FilterForm())

    def _filter_key(self, view: FilterForm, key: str) -> None:
        if key in (KEY_TAB, KEY_UP, KEY_DOWN):
            view.field_selection = view.field_selection.toggled()
            self._touch()
        elif key == KEY_BACKSPACE:
            if view.input.backspace():
                self._touch()
        elif key == KEY_ENTER:
            self.submit_filter()
        elif key == KEY_ESCAPE:
            self.go_back()
        elif _printable(key):
            view.input.append(key)
            self._touch()

    def submit_filter(self) -> bool:
        view = self._current
        if not isinstance(view, FilterForm):
            return False
        value = view.input.text.strip()
        if not value:
            return False
        view.input.flush()
        return self.apply_filter(ContainerFilter(view.field_selection, value))

    def acknowledge_error(self, choice: str = ERROR_ACK) -> None:
        if isinstance(self._current, ErrorView):
            self.go_back()

    # --- Presentation ---

    def present(self, screen: Screen) -> None:
        """Show the current view on the screen."""
        view = self._current
        if isinstance(view, TableView):
            screen.show_table(table_title(view.snapshot), view.snapshot.rows, self.select_row, self.handle_key)
        elif isinstance(view, ActionMenu):
            screen.show_text_panel("Actions", menu_text(view), self.handle_key)
        elif isinstance(view, CommandPrompt):
            screen.show_text_panel("Execute Command", command_text(view), self.handle_key)
        elif isinstance(view, FilterForm):
            fields = [
                FormField("Filter by", view.field_selection.value),
                FormField("Value", view.input.text, focused=True),
            ]
            screen.show_form("Filter Containers", fields, self.handle_key, self.submit_filter, self.go_back)
        elif isinstance(view, PendingView):
            text = f"{view.message}\n\nPress [ {self.keys.back} ] to go back to the table."
            screen.show_text_panel("Working", text, self.handle_key)
        elif isinstance(view, ResultView):
            title = "Success" if view.severity is Severity.SUCCESS else "Failed"
            text = f"{view.message}\n\nPress any key to go back to the table."
            screen.show_text_panel(title, text, self.handle_key, severity=view.severity)
        elif isinstance(view, NetworkInfoView):
            screen.show_text_panel("Network Info", network_text(view), self.handle_key)
        elif isinstance(view, ErrorView):
            screen.show_modal(f"Error: {view.message}", [ERROR_ACK], self.acknowledge_error)
        screen.force_redraw()


def table_title(snapshot: DisplaySnapshot) -> str:
    title = f"Containers ({len(snapshot)})"
    if snapshot.filter is not None:
        title += f" [filter: {snapshot.filter.describe()}]"
    return title


def menu_text(view: ActionMenu) -> str:
    lines = [f"You have selected: {view.target_name} {view.target_id}", "", "Options:"]
    for option in MENU_OPTIONS:
        if option is None:
            lines.append("  ---------------")
        else:
            letter, label = option
            lines.append(f"  [ {letter} ] {label}")
    lines.append("")
    lines.append(f"Please select your action: {view.input.text}")
    return "\n".join(lines)


def command_text(view: CommandPrompt) -> str:
    return (f"Run a command in {view.target_name} {view.target_id[:12]}\n\n"
            f"Command: {view.input.text}\n\n"
            "[Enter] Run   [Esc] Back")


def network_text(view: NetworkInfoView) -> str:
    lines = [f"Networks of {view.target_name}:", ""]
    if not view.networks:
        lines.append("  (no networks attached)")
    for name, address in sorted(view.networks.items()):
        lines.append(f"  {name}: {address or '-'}")
    lines.append("")
    lines.append("Press any key to go back to the table.")
    return "\n".join(lines)
