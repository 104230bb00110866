import os
import tempfile
import threading

# Keep ConfigManager and the log path away from the real home directory.
_home = tempfile.mkdtemp(prefix="dockpilot-test-home-")
os.environ["HOME"] = _home
os.environ["XDG_DATA_HOME"] = os.path.join(_home, "share")

import pytest

from dockpilot.backend import ContainerBackend
from dockpilot.model import ContainerRecord
from dockpilot.state import ViewStateMachine

WEB = ContainerRecord(id="abc123456789", names=["/web"], state="running",
                      networks={"bridge": "172.17.0.2"})
DB = ContainerRecord(id="def123456789", names=["/db"], state="exited")


class FakeBackend(ContainerBackend):
    """
    In-memory backend. Every call is recorded; `errors[name]` makes a call
    raise; `latches[name]` (a threading.Event) holds a call until it is set.
    """

    def __init__(self, records=None):
        self.records = list(records or [])
        self.calls = []
        self.errors = {}
        self.latches = {}
        self.exec_output = ""
        self.exec_exit_code = 0
        self.log_lines = []

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        latch = self.latches.get(name)
        if latch is not None:
            latch.wait(5)
        if name in self.errors:
            raise self.errors[name]

    def called(self, name):
        return [c for c in self.calls if c[0] == name]

    def list(self, include_stopped=True):
        self._call("list", include_stopped)
        return [r for r in self.records]

    def filter_by_name(self, substring):
        self._call("filter_by_name", substring)
        return [r for r in self.records if any(substring in n for n in r.names)]

    def filter_by_status(self, state):
        self._call("filter_by_status", state)
        return [r for r in self.records if r.state == state]

    def start(self, container_id):
        self._call("start", container_id)

    def stop(self, container_id):
        self._call("stop", container_id)

    def restart(self, container_id):
        self._call("restart", container_id)

    def pause(self, container_id):
        self._call("pause", container_id)

    def unpause(self, container_id):
        self._call("unpause", container_id)

    def remove(self, container_id):
        self._call("remove", container_id)

    def exec(self, container_id, argv, sink=None):
        self._call("exec", container_id, argv)
        if self.exec_output:
            sink.write(self.exec_output)
        return self.exec_exit_code

    def stream_logs(self, container_id, sink=None):
        self._call("stream_logs", container_id)
        for line in self.log_lines:
            sink.write(line)

    def network_info(self, container_id):
        self._call("network_info", container_id)
        for r in self.records:
            if r.id == container_id:
                return dict(r.networks)
        return {}


def settle(machine, timeout=2.0):
    """Wait for one background completion and apply it."""
    handled = machine.process_completions(timeout=timeout)
    assert handled, "no background action completed in time"
    return handled


@pytest.fixture
def backend():
    return FakeBackend([WEB, DB])


@pytest.fixture
def machine(backend):
    m = ViewStateMachine(backend)
    m.start()
    settle(m)
    return m


@pytest.fixture
def latch():
    return threading.Event()
