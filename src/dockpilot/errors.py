"""
Error taxonomy shared by the backend adapter, the snapshot builder and the
view state machine.

  - BackendUnavailable: the Docker client could not be constructed or reached.
    Fatal at startup; mid-session it is only ever shown in a result view.
  - BackendOperationFailed: any list/start/stop/.../exec/logs/inspect failure.
    Always recoverable.
  - MalformedRecord: a container record that cannot be displayed as-is. The
    snapshot builder degrades the single row instead of failing.
"""


class DockpilotError(Exception):
    """Base class for dockpilot errors."""


class BackendError(DockpilotError):
    """An error reported by (or while talking to) the container daemon."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class BackendUnavailable(BackendError):
    pass


class BackendOperationFailed(BackendError):
    pass


class MalformedRecord(DockpilotError):
    def __init__(self, record, reason: str):
        super().__init__(reason)
        self.record = record
        self.reason = reason
