"""
Docker API wrapper and backend operations.

This module provides the ContainerBackend capability the dashboard is written
against, and DockerBackend, its docker-py implementation. Each operation maps
1:1 onto a daemon call:
  - Listing containers (optionally filtered daemon-side by name or status)
  - Lifecycle actions (start, stop, restart, pause, unpause, remove)
  - Running a command inside a container, following its logs
  - Inspecting network attachments

All calls are synchronous. The view state machine never calls them on the
render thread; it hands them to runner.ActionRunner.

Error Handling:
  - Client construction / daemon unreachable at startup -> BackendUnavailable
  - Any daemon failure during an operation -> BackendOperationFailed carrying
    the daemon's error text (see docker_call)

Dependencies:
  - docker>=7.0.0 (docker-py client)
"""

import abc
import codecs
import functools
import logging
import sys
from typing import Any, Callable, Dict, Iterable, List, Optional, TextIO

import docker

from .errors import BackendError, BackendOperationFailed, BackendUnavailable
from .model import ContainerRecord

logger = logging.getLogger(__name__)


def docker_call(func: Callable) -> Callable:
    """
    Decorator for Docker API methods that normalizes failures.

    Catches anything raised by docker-py (or the transport underneath it),
    logs it, and re-raises it as BackendOperationFailed with the daemon's
    error text so callers only ever see the dockpilot error taxonomy.

    Usage:
        @docker_call
        def start(self, container_id: str) -> None:
            ...
    """
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> Any:
        if self.client is None:
            raise BackendUnavailable("Docker client is not connected")
        try:
            return func(self, *args, **kwargs)
        except BackendError:
            raise
        except Exception as e:
            message = getattr(e, "explanation", None) or str(e) or e.__class__.__name__
            logger.error(f"Docker operation failed in {func.__name__}: {message}", exc_info=True)
            raise BackendOperationFailed(message) from e
    return wrapper


def _pump(chunks: Iterable[Any], sink: TextIO) -> None:
    """Write a docker output stream into sink as text.

    One decoder per stream, so a UTF-8 sequence split across two socket
    chunks still decodes to one character.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    for chunk in chunks:
        if isinstance(chunk, bytes):
            text = decoder.decode(chunk)
        else:
            text = str(chunk)
        if text:
            sink.write(text)
    tail = decoder.decode(b"", final=True)
    if tail:
        sink.write(tail)


def _record_from_attrs(attrs: Dict[str, Any]) -> ContainerRecord:
    """Build a record from the raw attributes of a container list entry."""
    settings = attrs.get("NetworkSettings") or {}
    networks = {}
    for name, net in (settings.get("Networks") or {}).items():
        networks[name] = (net or {}).get("IPAddress", "")
    return ContainerRecord(
        id=attrs.get("Id") or "",
        names=list(attrs.get("Names") or []),
        state=attrs.get("State") or "",
        networks=networks,
    )


class ContainerBackend(abc.ABC):
    """The operations the dashboard needs from a container runtime."""

    @abc.abstractmethod
    def list(self, include_stopped: bool = True) -> List[ContainerRecord]: ...

    @abc.abstractmethod
    def filter_by_name(self, substring: str) -> List[ContainerRecord]: ...

    @abc.abstractmethod
    def filter_by_status(self, state: str) -> List[ContainerRecord]: ...

    @abc.abstractmethod
    def start(self, container_id: str) -> None: ...

    @abc.abstractmethod
    def stop(self, container_id: str) -> None: ...

    @abc.abstractmethod
    def restart(self, container_id: str) -> None: ...

    @abc.abstractmethod
    def pause(self, container_id: str) -> None: ...

    @abc.abstractmethod
    def unpause(self, container_id: str) -> None: ...

    @abc.abstractmethod
    def remove(self, container_id: str) -> None: ...

    @abc.abstractmethod
    def exec(self, container_id: str, argv: List[str], sink: Optional[TextIO] = None) -> Optional[int]: ...

    @abc.abstractmethod
    def stream_logs(self, container_id: str, sink: Optional[TextIO] = None) -> None: ...

    @abc.abstractmethod
    def network_info(self, container_id: str) -> Dict[str, str]: ...


class DockerBackend(ContainerBackend):
    def __init__(self, log_tail: Any = "all"):
        self.log_tail = log_tail
        try:
            self.client = docker.from_env()
            self.client.ping()
        except Exception as e:
            logger.error(f"Could not connect to Docker: {e}", exc_info=True)
            raise BackendUnavailable(f"Could not connect to Docker: {e}") from e

    def _list(self, filters: Optional[Dict[str, str]] = None, include_stopped: bool = True) -> List[ContainerRecord]:
        raw = self.client.containers.list(all=include_stopped, sparse=True, filters=filters or None)
        return [_record_from_attrs(c.attrs) for c in raw]

    @docker_call
    def list(self, include_stopped: bool = True) -> List[ContainerRecord]:
        return self._list(include_stopped=include_stopped)

    @docker_call
    def filter_by_name(self, substring: str) -> List[ContainerRecord]:
        return self._list({"name": substring})

    @docker_call
    def filter_by_status(self, state: str) -> List[ContainerRecord]:
        return self._list({"status": state})

    # Actions
    @docker_call
    def start(self, container_id: str) -> None:
        self.client.containers.get(container_id).start()

    @docker_call
    def stop(self, container_id: str) -> None:
        # No timeout: the daemon's default grace period applies.
        self.client.containers.get(container_id).stop()

    @docker_call
    def restart(self, container_id: str) -> None:
        self.client.containers.get(container_id).restart()

    @docker_call
    def pause(self, container_id: str) -> None:
        self.client.containers.get(container_id).pause()

    @docker_call
    def unpause(self, container_id: str) -> None:
        self.client.containers.get(container_id).unpause()

    @docker_call
    def remove(self, container_id: str) -> None:
        self.client.containers.get(container_id).remove(force=True)

    @docker_call
    def exec(self, container_id: str, argv: List[str], sink: Optional[TextIO] = None) -> Optional[int]:
        """Run argv inside the container, streaming its output into sink.

        Returns the exit code reported by the daemon (None if it has none yet).
        """
        sink = sink or sys.stdout
        exec_id = self.client.api.exec_create(container_id, argv, stdout=True, stderr=True)["Id"]
        _pump(self.client.api.exec_start(exec_id, stream=True), sink)
        exit_code = self.client.api.exec_inspect(exec_id).get("ExitCode")
        logger.info(f"exec {argv} in {container_id[:12]} exited with {exit_code}")
        return exit_code

    @docker_call
    def stream_logs(self, container_id: str, sink: Optional[TextIO] = None) -> None:
        """Follow stdout and stderr of the container until the stream closes."""
        sink = sink or sys.stdout
        container = self.client.containers.get(container_id)
        _pump(container.logs(stdout=True, stderr=True, stream=True, follow=True, tail=self.log_tail), sink)

    @docker_call
    def network_info(self, container_id: str) -> Dict[str, str]:
        container = self.client.containers.get(container_id)
        settings = container.attrs.get("NetworkSettings") or {}
        return {
            name: (net or {}).get("IPAddress", "")
            for name, net in (settings.get("Networks") or {}).items()
        }
