"""
Builds the immutable display snapshot shown by the table view.

Filtering happens daemon-side (backend.filter_by_name / filter_by_status); the
builder only computes display fields and keeps the backend's ordering. No
deduplication is performed: the daemon is the source of truth, so duplicate
ids show up as separate rows.
"""

import logging
from typing import Iterable, Optional

from .errors import MalformedRecord
from .model import ContainerFilter, ContainerRecord, DisplayRow, DisplaySnapshot, StatusClass

logger = logging.getLogger(__name__)

SHORT_ID_LENGTH = 12
PLACEHOLDER_NAME = "<unnamed>"
PLACEHOLDER_ID = "<no-id>"
UNKNOWN_STATE = "unknown"


def short_id(container_id: str) -> str:
    if not container_id:
        raise MalformedRecord(container_id, "missing id")
    return container_id[:SHORT_ID_LENGTH]


def display_name(names) -> str:
    """Canonical (first) name without its leading '/'."""
    if not names or not names[0]:
        raise MalformedRecord(names, "missing name")
    name = names[0]
    if name.startswith("/"):
        name = name[1:]
    if not name:
        raise MalformedRecord(names, "empty name")
    return name


def status_class(state: str) -> StatusClass:
    return StatusClass.HEALTHY if state == "running" else StatusClass.UNHEALTHY


def _build_row(record: ContainerRecord, index: int) -> DisplayRow:
    container_id = getattr(record, "id", "") or ""
    state = getattr(record, "state", "") or ""

    try:
        sid = short_id(container_id)
    except MalformedRecord as e:
        logger.warning(f"Row {index}: {e.reason}, showing placeholder id")
        sid = PLACEHOLDER_ID

    try:
        name = display_name(getattr(record, "names", None))
    except MalformedRecord as e:
        logger.warning(f"Row {index} ({sid}): {e.reason}, showing placeholder name")
        name = PLACEHOLDER_NAME

    return DisplayRow(
        id=container_id,
        short_id=sid,
        display_name=name,
        status_label=(state or UNKNOWN_STATE).upper(),
        status_class=status_class(state),
        index=index,
    )


def build(records: Iterable[ContainerRecord], filter: Optional[ContainerFilter] = None) -> DisplaySnapshot:
    rows = tuple(_build_row(record, i) for i, record in enumerate(records or ()))
    return DisplaySnapshot(rows=rows, filter=filter)
