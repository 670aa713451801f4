"""Upload registry state and its pure transitions.

The registry is a caller-owned value: every event produces a new
``UploadState`` and the old one is left untouched. ``order`` lists ids
most-recent-first and must always hold exactly the keys of ``by_id``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Sequence, Union

from core.errors import RegistryInvariantError
from schemas.uploads import UploadRecord


@dataclass(frozen=True)
class UploadState:
    by_id: Mapping[str, UploadRecord] = field(default_factory=lambda: MappingProxyType({}))
    order: tuple[str, ...] = ()
    is_busy: bool = False
    last_error: str | None = None


@dataclass(frozen=True)
class CacheStarted:
    pass


@dataclass(frozen=True)
class CacheSucceeded:
    records: tuple[UploadRecord, ...]


@dataclass(frozen=True)
class CacheFailed:
    message: str


@dataclass(frozen=True)
class Ingested:
    record: UploadRecord


@dataclass(frozen=True)
class OperationFailed:
    message: str


@dataclass(frozen=True)
class Removed:
    upload_id: str


@dataclass(frozen=True)
class Cleared:
    pass


@dataclass(frozen=True)
class ErrorReported:
    upload_id: str
    message: str


@dataclass(frozen=True)
class Restored:
    records: tuple[UploadRecord, ...]
    order: tuple[str, ...]


UploadEvent = Union[
    CacheStarted,
    CacheSucceeded,
    CacheFailed,
    Ingested,
    OperationFailed,
    Removed,
    Cleared,
    ErrorReported,
    Restored,
]


def initial_state() -> UploadState:
    return UploadState()


def reduce(state: UploadState, event: UploadEvent) -> UploadState:
    """Apply one event and verify the order/map invariant on the result."""
    if isinstance(event, CacheStarted):
        new_state = replace(state, is_busy=True, last_error=None)
    elif isinstance(event, CacheSucceeded):
        new_state = replace(_upsert(state, event.records), is_busy=False)
    elif isinstance(event, CacheFailed):
        new_state = replace(state, is_busy=False, last_error=event.message)
    elif isinstance(event, Ingested):
        new_state = _upsert(state, (event.record,))
    elif isinstance(event, OperationFailed):
        new_state = replace(state, last_error=event.message)
    elif isinstance(event, Removed):
        new_state = _remove(state, event.upload_id)
    elif isinstance(event, Cleared):
        new_state = initial_state()
    elif isinstance(event, ErrorReported):
        new_state = _mark_error(state, event.upload_id, event.message)
    elif isinstance(event, Restored):
        new_state = _restore(event.records, event.order)
    else:
        raise TypeError(f"Unknown upload event: {event!r}")
    check_consistency(new_state)
    return new_state


def check_consistency(state: UploadState) -> None:
    if len(set(state.order)) != len(state.order):
        raise RegistryInvariantError("Upload order contains duplicate ids")
    if set(state.order) != set(state.by_id):
        missing = sorted(set(state.by_id) - set(state.order))
        dangling = sorted(set(state.order) - set(state.by_id))
        raise RegistryInvariantError(
            f"Upload order out of sync (missing={missing}, dangling={dangling})"
        )
    for key, record in state.by_id.items():
        if record.id != key:
            raise RegistryInvariantError(f"Upload {key} stored under the wrong key")


def _upsert(state: UploadState, records: Sequence[UploadRecord]) -> UploadState:
    by_id = dict(state.by_id)
    order = list(state.order)
    for record in records:
        if record.id not in by_id:
            order.insert(0, record.id)
        by_id[record.id] = record
    return replace(state, by_id=MappingProxyType(by_id), order=tuple(order))


def _remove(state: UploadState, upload_id: str) -> UploadState:
    if upload_id not in state.by_id:
        return state
    by_id = {key: value for key, value in state.by_id.items() if key != upload_id}
    order = tuple(item for item in state.order if item != upload_id)
    return replace(state, by_id=MappingProxyType(by_id), order=order)


def _mark_error(state: UploadState, upload_id: str, message: str) -> UploadState:
    record = state.by_id.get(upload_id)
    if record is None:
        return replace(state, last_error=message)
    by_id = dict(state.by_id)
    by_id[upload_id] = record.model_copy(
        update={"status": "error", "error_message": message}
    )
    return replace(state, by_id=MappingProxyType(by_id), last_error=message)


def _restore(records: Sequence[UploadRecord], order: Sequence[str]) -> UploadState:
    by_id = {record.id: record for record in records}
    ordered = [item for item in dict.fromkeys(order) if item in by_id]
    known = set(ordered)
    # Records missing from the stored order go after the known ones, newest first.
    extras = sorted(
        (record for key, record in by_id.items() if key not in known),
        key=lambda record: record.created_at,
        reverse=True,
    )
    ordered.extend(record.id for record in extras)
    return UploadState(by_id=MappingProxyType(by_id), order=tuple(ordered))


def select_list(state: UploadState) -> list[UploadRecord]:
    return [state.by_id[upload_id] for upload_id in state.order]


def select_by_id(state: UploadState, upload_id: str) -> UploadRecord | None:
    return state.by_id.get(upload_id)


def total_size(state: UploadState) -> int:
    return sum(record.size_bytes or 0 for record in state.by_id.values())


def is_busy(state: UploadState) -> bool:
    return state.is_busy


__all__ = [
    "CacheFailed",
    "CacheStarted",
    "CacheSucceeded",
    "Cleared",
    "ErrorReported",
    "Ingested",
    "OperationFailed",
    "Removed",
    "Restored",
    "UploadEvent",
    "UploadState",
    "check_consistency",
    "initial_state",
    "is_busy",
    "reduce",
    "select_by_id",
    "select_list",
    "total_size",
]
