# pyright: standard

import json
from collections.abc import Sequence
from typing import Any

import httpx

from thingscloud.models import ItemAction

type RawEvent = tuple[str, str, ItemAction, dict[str, Any]]

ACCOUNT_EMAIL = "user@example.com"
HISTORY_KEY = "hist-123"


def event(record_id: str, action: ItemAction, payload: dict[str, Any] | None = None, kind: str = "Task6") -> RawEvent:
    return (record_id, kind, action, payload or {})


def batch_json(raw: RawEvent) -> dict[str, Any]:
    record_id, kind, action, payload = raw
    return {record_id: {"e": kind, "t": int(action), "p": payload}}


def page_bytes(events: Sequence[RawEvent], total: int) -> bytes:
    return json.dumps({"current-item-index": total, "items": [batch_json(e) for e in events]}).encode()


class PagedLog:
    """
    Serves an in-memory event log in fixed-size pages, recording every requested offset.
    """

    events: list[RawEvent]
    page_size: int
    requested: list[int]

    def __init__(self, events: Sequence[RawEvent], page_size: int) -> None:
        self.events = list(events)
        self.page_size = page_size
        self.requested = []

    def __call__(self, index: int) -> bytes:
        self.requested.append(index)
        return page_bytes(self.events[index : index + self.page_size], total=len(self.events))


class ScriptedPages:
    """Returns canned page bodies in order, recording every requested offset."""

    bodies: list[bytes]
    requested: list[int]

    def __init__(self, *bodies: bytes) -> None:
        self.bodies = list(bodies)
        self.requested = []

    def __call__(self, index: int) -> bytes:
        self.requested.append(index)
        return self.bodies.pop(0)


def account_body(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "status": "SYAccountStatusActive",
        "SLA-version-accepted": "5",
        "email": ACCOUNT_EMAIL,
        "history-key": HISTORY_KEY,
        "maildrop-email": "add-to-things-abc@things.email",
        "issues": [],
    }
    body.update(overrides)
    return body


def things_cloud_transport(
    events: Sequence[RawEvent],
    page_size: int = 2,
    account: dict[str, Any] | None = None,
    seen: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """
    A mock Things Cloud server answering the account and history endpoints.
    """
    log = PagedLog(events, page_size)
    account_json = account if account is not None else account_body()

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path == f"/version/1/account/{ACCOUNT_EMAIL}":
            return httpx.Response(200, json=account_json)
        if request.url.path == f"/version/1/history/{HISTORY_KEY}/items":
            return httpx.Response(200, content=log(int(request.url.params["start-index"])))
        return httpx.Response(404)

    return httpx.MockTransport(handler)