# pyright: standard
from __future__ import annotations

from enum import IntEnum
from typing import Annotated, Any, TypedDict

from msgspec import Meta, Struct, field

TASK_KIND_PREFIX = "Task"
ACTIVE_ACCOUNT_STATUS = "SYAccountStatusActive"

# Things payload keys used for display
TITLE_FIELD = "tt"
STATUS_FIELD = "ss"


class ItemAction(IntEnum):
    CREATE = 0
    MODIFIED = 1
    DELETED = 2


class TaskStatus(IntEnum):
    PENDING = 0
    CANCELLED = 2
    COMPLETED = 3


class HistoryItem(Struct, frozen=True):
    """
    A single entry of the history log: one create/modify/delete of a record.

    The wire format uses single-letter keys: `e` is the entity kind (e.g. "Task6",
    "Area3", "Tag4"), `t` the action code and `p` the (partial) record payload.
    """

    kind: str = field(name="e")
    action: ItemAction = field(name="t")
    payload: dict[str, Any] = field(name="p")  # pyright: ignore[reportExplicitAny]

    @property
    def is_task(self) -> bool:
        return self.kind.startswith(TASK_KIND_PREFIX)


HistoryBatch = dict[str, HistoryItem]


class HistoryPage(Struct):
    """
    One page of the history log as returned by the items endpoint.

    last_index: total length of the log known to the server when the page was served
    items: ordered batches, each mapping a record identifier to its event
    """

    last_index: Annotated[int, Meta(ge=0)] = field(name="current-item-index")
    items: list[HistoryBatch]


type TaskSnapshot = dict[str, Any]  # pyright: ignore[reportExplicitAny]


def task_title(task: TaskSnapshot) -> str:
    match task.get(TITLE_FIELD):
        case str(title):
            return title
        case _:
            return ""


def task_status(task: TaskSnapshot) -> TaskStatus | None:
    """Interprets the status field of a snapshot, None when absent or unknown."""
    match task.get(STATUS_FIELD):
        case bool():
            return None
        case int(raw):
            try:
                return TaskStatus(raw)
            except ValueError:
                return None
        case _:
            return None


# --- Private Models for External API Parsing ---
AccountResponse = TypedDict(
    "AccountResponse",
    {
        "status": str,
        "SLA-version-accepted": str,
        "email": str,
        "history-key": str,
        "maildrop-email": str,
        "issues": list[Any],  # pyright: ignore[reportExplicitAny]
    },
)
