# pyright: standard
from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING, Self
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from thingscloud.config import ClientSettings
from thingscloud.exceptions import (
    AccountDecodeError,
    AccountHasIssuesError,
    AccountTransportError,
    HistoryTransportError,
    InvalidCredentialsError,
    UnknownAccountStatusError,
)
from thingscloud.models import ACTIVE_ACCOUNT_STATUS, AccountResponse

if TYPE_CHECKING:
    from thingscloud.history import History

logger = logging.getLogger(__name__)

# User-Agent header sent by Things for macOS
THINGS_USER_AGENT = "ThingsMac/31516502"

_ACCOUNT_ADAPTER = TypeAdapter(AccountResponse)


def _format_loc(loc: tuple[int | str, ...]) -> str:
    path = "$"
    for part in loc:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path


class Account:
    """
    An authenticated Things Cloud session.

    Holds the history key that routes requests to the user's event log and the
    HTTP client carrying the credentials. The client is shared by every history
    fetch made through this account; close it with `close()` or use the account
    as a context manager.
    """

    email: str
    maildrop_email: str
    history_key: str
    client: httpx.Client

    def __init__(self, email: str, maildrop_email: str, history_key: str, client: httpx.Client) -> None:
        self.email = email
        self.maildrop_email = maildrop_email
        self.history_key = history_key
        self.client = client

    @classmethod
    def login(
        cls,
        email: str,
        password: str,
        settings: ClientSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> Account:
        """
        Log in to the Things Cloud API with the provided credentials.

        Raises:
            InvalidCredentialsError: the server rejected the credentials.
            AccountHasIssuesError: the account has outstanding issues.
            UnknownAccountStatusError: the account is not active.
            AccountTransportError: the server could not be reached or answered with an error.
            AccountDecodeError: the account response had an unexpected shape.
        """
        settings = settings or ClientSettings()

        try:
            client = httpx.Client(
                base_url=settings.base_url,
                headers={"User-Agent": THINGS_USER_AGENT, "Authorization": f"Password {password}"},
                timeout=settings.timeout,
                transport=transport,
            )
        except ValueError as e:
            # Passwords that cannot be sent as a header value can never be valid
            raise InvalidCredentialsError() from e

        try:
            response = cls._fetch_account(client, email)
        except BaseException:
            client.close()
            raise

        logger.debug("Logged in as %s", response["email"])
        return cls(
            email=response["email"],
            maildrop_email=response["maildrop-email"],
            history_key=response["history-key"],
            client=client,
        )

    @staticmethod
    def _fetch_account(client: httpx.Client, email: str) -> AccountResponse:
        logger.debug("Requesting account details for %s", email)
        try:
            response = client.get(f"/version/1/account/{quote(email, safe='@')}")
        except httpx.HTTPError as e:
            raise AccountTransportError(f"Could not reach Things Cloud: {e}") from e

        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise InvalidCredentialsError()

        try:
            _ = response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise AccountTransportError(f"Things Cloud rejected the login request: {e}") from e

        try:
            account = _ACCOUNT_ADAPTER.validate_json(response.content)
        except ValidationError as e:
            first = e.errors()[0]
            raise AccountDecodeError(
                f"Unexpected account response at `{_format_loc(first['loc'])}`: {first['msg']}"
            ) from e

        if account["issues"]:
            raise AccountHasIssuesError(account["issues"])

        if account["status"] != ACTIVE_ACCOUNT_STATUS:
            raise UnknownAccountStatusError(account["status"])

        return account

    def fetch_history_page(self, index: int) -> bytes:
        """
        Fetches the raw bytes of one page of the history log, starting at `index`.
        """
        try:
            response = self.client.get(
                f"/version/1/history/{self.history_key}/items",
                params={"start-index": index},
            )
            _ = response.raise_for_status()
        except httpx.HTTPError as e:
            raise HistoryTransportError(f"Could not fetch history page at index {index}: {e}") from e
        return response.content

    def history(self) -> History:
        """Reconstructs the current task list from the full history log."""
        from thingscloud.history import History

        return History.from_account(self)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Account(email={self.email!r}, maildrop_email={self.maildrop_email!r})"
