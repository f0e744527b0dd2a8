from typing import Any


class ThingsCloudError(Exception):
    """Base exception for all expected thingscloud errors."""

    message: str
    exit_code: int

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class ConfigurationError(ThingsCloudError):
    """Configuration related errors (env vars, CLI options)."""


class AccountError(ThingsCloudError):
    """Errors raised while logging in to Things Cloud."""


class InvalidCredentialsError(AccountError):
    """The provided credentials are invalid."""

    def __init__(self) -> None:
        super().__init__("The provided credentials are invalid.")


class AccountHasIssuesError(AccountError):
    """The account cannot be used with Things Cloud."""

    issues: list[Any]  # pyright: ignore[reportExplicitAny]

    def __init__(self, issues: list[Any]) -> None:  # pyright: ignore[reportExplicitAny]
        super().__init__(f"The account has issues: {issues!r}")
        self.issues = issues


class UnknownAccountStatusError(AccountError):
    """The account reported a status other than active."""

    status: str

    def __init__(self, status: str) -> None:
        super().__init__(f"The account has an unknown status: {status}")
        self.status = status


class AccountTransportError(AccountError):
    """Network or HTTP errors during login."""


class AccountDecodeError(AccountError):
    """The account response did not have the expected shape."""


class HistoryError(ThingsCloudError):
    """Errors raised while reconstructing the history."""


class HistoryTransportError(HistoryError):
    """Network or HTTP errors while fetching a history page."""


class HistoryDecodeError(HistoryError):
    """A history page did not have the expected shape."""

    path: str

    def __init__(self, message: str, path: str) -> None:
        super().__init__(f"Could not decode history page at `{path}`: {message}")
        self.path = path
