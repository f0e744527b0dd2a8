"""
History reconstruction: paginated retrieval of the Things Cloud event log and its fold
into the current set of task snapshots.

The log is event-sourced: a task's current state is never transmitted directly, only
the create/modify/delete events that produced it. Reconstruction therefore needs the
full log from index 0, fetched page by page, before anything can be folded.
"""

# pyright: standard
from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING

import msgspec

from thingscloud.exceptions import HistoryDecodeError
from thingscloud.models import (
    HistoryBatch,
    HistoryItem,
    HistoryPage,
    ItemAction,
    TaskSnapshot,
    TaskStatus,
    task_status,
)
from thingscloud.serialization import from_json, split_error_path

if TYPE_CHECKING:
    from thingscloud.account import Account

logger = logging.getLogger(__name__)

type PageFetcher = Callable[[int], bytes]

# msgspec renders dict keys as `[...]` in error paths
_BATCH_VALUE_PATH_RE = re.compile(r"^\$\.items\[(\d+)\]\[\.\.\.\]")


class _RawBatches(msgspec.Struct):
    items: list[dict[str, msgspec.Raw]]


def _name_failing_record(data: bytes | str, path: str) -> str:
    """
    Replaces the `[...]` placeholder in a batch path with the record identifier that failed.

    Returns the path unchanged when the failing record cannot be pinned down.
    """
    match = _BATCH_VALUE_PATH_RE.match(path)
    if match is None:
        return path

    try:
        batches = from_json(_RawBatches, data).items
    except (msgspec.ValidationError, msgspec.DecodeError):
        return path

    batch_index = int(match.group(1))
    if batch_index >= len(batches):
        return path

    for record_id, raw in batches[batch_index].items():
        try:
            _ = from_json(HistoryItem, bytes(raw))
        except msgspec.ValidationError:
            return f"$.items[{batch_index}].{record_id}{path[match.end() :]}"
    return path


def decode_page(data: bytes | str) -> HistoryPage:
    """
    Parse one history page, reporting the exact failing path on malformed input.
    """
    try:
        return from_json(HistoryPage, data)
    except (msgspec.ValidationError, msgspec.DecodeError) as e:
        reason, path = split_error_path(e)
        if isinstance(e, msgspec.ValidationError):
            path = _name_failing_record(data, path)
        raise HistoryDecodeError(reason, path) from e


def _fetch_page(fetch_page: PageFetcher, offset: int) -> HistoryPage:
    page = decode_page(fetch_page(offset))
    logger.debug("Fetched %d history batches at index %d (total %d)", len(page.items), offset, page.last_index)
    return page


def fetch_history(fetch_page: PageFetcher, start_index: int = 0) -> HistoryPage:
    """
    Retrieves the history log from `start_index` up to the total the server reports.

    Pages are requested strictly one after another, since each offset depends on the
    number of batches the previous page returned. The continuation check uses the total
    reported by the most recent page; a page that returns nothing stops the loop even
    if that total claims more events exist.

    Returns a single page holding every batch in retrieval order, with `last_index` set
    to the total reported by the first page.
    """
    if start_index < 0:
        raise ValueError(f"History start index must be non-negative, got {start_index}.")

    offset = start_index
    page = _fetch_page(fetch_page, offset)
    first_total = page.last_index
    items: list[HistoryBatch] = []

    while True:
        items.extend(page.items)
        offset += len(page.items)
        if offset >= page.last_index:
            break
        if not page.items:
            logger.warning(
                "History page at index %d was empty although %d events were reported", offset, page.last_index
            )
            break
        page = _fetch_page(fetch_page, offset)

    return HistoryPage(last_index=first_total, items=items)


def group_task_events(batches: Iterable[HistoryBatch]) -> dict[str, list[HistoryItem]]:
    """
    Groups task events by record identifier, in order of first appearance.

    Events within a group keep their position in the log. Non-task records
    (areas, tags, checklist items...) are dropped.
    """
    grouped: dict[str, list[HistoryItem]] = {}
    for batch in batches:
        for record_id, item in batch.items():
            if not item.is_task:
                continue
            grouped.setdefault(record_id, []).append(item)
    return grouped


def fold_task(events: Iterable[HistoryItem]) -> TaskSnapshot:
    """Merges payloads in log order; the latest event setting a field wins."""
    task: TaskSnapshot = {}
    for event in events:
        task.update(event.payload)
    return task


def fold_events(batches: Iterable[HistoryBatch]) -> dict[str, TaskSnapshot]:
    """
    Folds a chronologically ordered event sequence into live task snapshots.

    A record with a delete event anywhere in its history is dropped entirely,
    even when later events exist for it.
    """
    return {
        record_id: fold_task(events)
        for record_id, events in group_task_events(batches).items()
        if not any(event.action == ItemAction.DELETED for event in events)
    }


class History:
    """
    The reconstructed task list together with the log index it was built from.

    `last_index` is the watermark reported by the server on the first page of the
    fetch; it is carried as data only.
    """

    account: Account
    tasks_by_id: dict[str, TaskSnapshot]
    last_index: int

    def __init__(self, account: Account, tasks_by_id: Mapping[str, TaskSnapshot], last_index: int) -> None:
        self.account = account
        self.tasks_by_id = dict(tasks_by_id)
        self.last_index = last_index

    @classmethod
    def from_account(cls, account: Account) -> History:
        page = fetch_history(account.fetch_history_page, 0)
        tasks_by_id = fold_events(page.items)
        logger.debug("Reconstructed %d tasks from %d history batches", len(tasks_by_id), len(page.items))
        return cls(account, tasks_by_id, page.last_index)

    @classmethod
    def from_index(cls, account: Account, index: int) -> History:
        return cls(account, {}, index)

    @property
    def tasks(self) -> list[TaskSnapshot]:
        return list(self.tasks_by_id.values())

    def with_status(self, status: TaskStatus) -> dict[str, TaskSnapshot]:
        return {record_id: task for record_id, task in self.tasks_by_id.items() if task_status(task) == status}

    def __repr__(self) -> str:
        return f"History(tasks={len(self.tasks_by_id)}, last_index={self.last_index})"
