import threading

from dockpilot.errors import BackendOperationFailed
from dockpilot.runner import ActionRunner, Outcome


def run_and_collect(operation):
    runner = ActionRunner()
    outcomes = []
    done = threading.Event()

    def on_complete(outcome):
        outcomes.append(outcome)
        done.set()

    thread = runner.dispatch(operation, on_complete, name="test")
    assert done.wait(2)
    thread.join(2)
    return outcomes


def test_success_reports_value_once():
    outcomes = run_and_collect(lambda: 42)
    assert outcomes == [Outcome(value=42)]
    assert outcomes[0].ok
    assert outcomes[0].error_text == ""


def test_backend_error_becomes_failed_outcome():
    def op():
        raise BackendOperationFailed("no such container")

    outcomes = run_and_collect(op)
    assert len(outcomes) == 1
    assert not outcomes[0].ok
    assert outcomes[0].error_text == "no such container"


def test_unexpected_error_is_contained():
    def op():
        raise KeyError()

    outcomes = run_and_collect(op)
    assert not outcomes[0].ok
    assert outcomes[0].error_text == "KeyError"


def test_worker_is_daemon_and_named():
    runner = ActionRunner()
    gate = threading.Event()
    thread = runner.dispatch(lambda: gate.wait(2), lambda outcome: None, name="stop")
    assert thread.daemon
    assert thread.name == "dockpilot-stop"
    assert thread in runner.active()
    gate.set()
    runner.join(2)
    assert runner.active() == []


def test_callback_error_does_not_escape():
    runner = ActionRunner()

    def bad_callback(outcome):
        raise RuntimeError("callback broke")

    thread = runner.dispatch(lambda: None, bad_callback)
    thread.join(2)
    assert not thread.is_alive()
