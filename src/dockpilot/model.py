"""
Data models for dockpilot.

Container data:
  - ContainerRecord: one entry of the daemon's container list (read-only)
  - DisplayRow / DisplaySnapshot: immutable, display-ready projection of a list

Views (exactly one is current, owned by state.ViewStateMachine):
  - TableView, ActionMenu, CommandPrompt, FilterForm,
    PendingView, ResultView, NetworkInfoView, ErrorView

Bookkeeping:
  - ActionKind: every backend operation the dashboard can dispatch
  - InFlightAction: one outstanding background operation, tied to the
    generation of the view that shows its progress
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .prompt import InputBuffer


@dataclass(frozen=True)
class ContainerRecord:
    id: str
    names: List[str] = field(default_factory=list)
    state: str = ""
    networks: Dict[str, str] = field(default_factory=dict)


class StatusClass(Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class FilterField(Enum):
    NAME = "name"
    STATUS = "status"

    def toggled(self) -> "FilterField":
        return FilterField.STATUS if self is FilterField.NAME else FilterField.NAME


@dataclass(frozen=True)
class ContainerFilter:
    field: FilterField
    value: str

    def describe(self) -> str:
        return f"{self.field.value}={self.value}"


@dataclass(frozen=True)
class DisplayRow:
    id: str
    short_id: str
    display_name: str
    status_label: str
    status_class: StatusClass
    index: int


@dataclass(frozen=True)
class DisplaySnapshot:
    rows: Tuple[DisplayRow, ...] = ()
    filter: Optional[ContainerFilter] = None

    def __len__(self) -> int:
        return len(self.rows)

    def row(self, index: int) -> Optional[DisplayRow]:
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return None


class Severity(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class ActionKind(Enum):
    LIST = "list"
    FILTER = "filter"
    START = "start"
    STOP = "stop"
    RESTART = "restart"
    PAUSE = "pause"
    UNPAUSE = "unpause"
    LOGS = "logs"
    DELETE = "delete"
    EXEC = "exec"
    NETWORK_INFO = "network_info"


@dataclass(frozen=True)
class InFlightAction:
    kind: ActionKind
    target_id: Optional[str]
    generation: int


# --- Views ---

@dataclass
class TableView:
    snapshot: DisplaySnapshot


@dataclass
class ActionMenu:
    target_id: str
    target_name: str
    input: InputBuffer = field(default_factory=InputBuffer)


@dataclass
class CommandPrompt:
    target_id: str
    target_name: str
    input: InputBuffer = field(default_factory=InputBuffer)


@dataclass
class FilterForm:
    field_selection: FilterField = FilterField.NAME
    input: InputBuffer = field(default_factory=InputBuffer)


@dataclass
class PendingView:
    kind: ActionKind
    message: str
    target_id: Optional[str] = None


@dataclass
class ResultView:
    message: str
    severity: Severity


@dataclass
class NetworkInfoView:
    target_name: str
    networks: Dict[str, str]


@dataclass
class ErrorView:
    message: str
