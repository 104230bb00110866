"""
Action catalogue: menu letters, progress/result messages, and the binding of
each ActionKind onto a ContainerBackend call.
"""

from typing import Any, Callable, List, Optional, TextIO, Tuple

from .backend import ContainerBackend
from .model import ActionKind, ContainerFilter, FilterField

# Single-letter commands of the action menu that run a backend call.
MENU_COMMANDS = {
    "s": ActionKind.START,
    "x": ActionKind.STOP,
    "r": ActionKind.RESTART,
    "p": ActionKind.PAUSE,
    "u": ActionKind.UNPAUSE,
    "l": ActionKind.LOGS,
    "d": ActionKind.DELETE,
    "n": ActionKind.NETWORK_INFO,
}

EXEC_LETTER = "e"
FILTER_LETTER = "f"
BACK_LETTER = "b"

# (letter, label) groups as shown in the menu; None draws a separator.
MENU_OPTIONS: List[Optional[Tuple[str, str]]] = [
    ("s", "Start"),
    ("x", "Stop"),
    ("r", "Restart"),
    ("p", "Pause"),
    ("u", "Unpause"),
    None,
    ("l", "Show Logs"),
    ("e", "Execute Command"),
    ("n", "Network Info"),
    ("d", "Delete"),
    None,
    ("f", "Filter Containers"),
    ("b", "Go back"),
]

PENDING_MESSAGES = {
    ActionKind.LIST: "Loading containers..",
    ActionKind.FILTER: "Filtering containers..",
    ActionKind.START: "Starting container..",
    ActionKind.STOP: "Stopping container..",
    ActionKind.RESTART: "Restarting container..",
    ActionKind.PAUSE: "Pausing container..",
    ActionKind.UNPAUSE: "Unpausing container..",
    ActionKind.LOGS: "Fetching container logs..",
    ActionKind.DELETE: "Deleting container..",
    ActionKind.EXEC: "Running command..",
    ActionKind.NETWORK_INFO: "Inspecting container networks..",
}

SUCCESS_MESSAGE = "Action completed successfully!"
FAILURE_PREFIX = "Failed to perform action"


def success_message(kind: ActionKind, value: Any = None) -> str:
    if kind is ActionKind.LOGS:
        return "Log stream ended."
    if kind is ActionKind.EXEC:
        if value is None:
            return "Command finished."
        return f"Command exited with status {value}."
    return SUCCESS_MESSAGE


def failure_message(error_text: str) -> str:
    return f"{FAILURE_PREFIX}: {error_text}"


def bind(kind: ActionKind, backend: ContainerBackend, target_id: Optional[str] = None,
         argument: Any = None, sink: Optional[TextIO] = None) -> Callable[[], Any]:
    """Return a no-argument callable that performs `kind` against the backend."""
    if kind is ActionKind.LIST:
        return lambda: backend.list(True)
    if kind is ActionKind.FILTER:
        flt: ContainerFilter = argument
        if flt.field is FilterField.STATUS:
            return lambda: backend.filter_by_status(flt.value)
        return lambda: backend.filter_by_name(flt.value)
    if kind is ActionKind.START:
        return lambda: backend.start(target_id)
    if kind is ActionKind.STOP:
        return lambda: backend.stop(target_id)
    if kind is ActionKind.RESTART:
        return lambda: backend.restart(target_id)
    if kind is ActionKind.PAUSE:
        return lambda: backend.pause(target_id)
    if kind is ActionKind.UNPAUSE:
        return lambda: backend.unpause(target_id)
    if kind is ActionKind.DELETE:
        return lambda: backend.remove(target_id)
    if kind is ActionKind.LOGS:
        return lambda: backend.stream_logs(target_id, sink)
    if kind is ActionKind.EXEC:
        return lambda: backend.exec(target_id, list(argument), sink)
    if kind is ActionKind.NETWORK_INFO:
        return lambda: backend.network_info(target_id)
    raise ValueError(f"Unknown action kind: {kind}")
