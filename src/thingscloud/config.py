import os
from dataclasses import dataclass

from thingscloud.exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://cloud.culturedcode.com"
DEFAULT_TIMEOUT = 30.0

EMAIL_ENV_VAR = "THINGS_CLOUD_EMAIL"
PASSWORD_ENV_VAR = "THINGS_CLOUD_PASSWORD"
BASE_URL_ENV_VAR = "THINGS_CLOUD_BASE_URL"
TIMEOUT_ENV_VAR = "THINGS_CLOUD_TIMEOUT"


@dataclass(slots=True, frozen=True)
class Credentials:
    email: str
    password: str


@dataclass(slots=True, frozen=True)
class ClientSettings:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


def get_env_var_or_fail(var_name: str, description: str) -> str:
    val = os.getenv(var_name)
    if not val:
        raise ConfigurationError(f"{description} is required: pass it as an option or set '{var_name}'.")
    return val


def load_credentials(email: str | None = None, password: str | None = None) -> Credentials:
    """Resolves credentials, preferring explicit values over the environment."""
    return Credentials(
        email=email or get_env_var_or_fail(EMAIL_ENV_VAR, "Things Cloud email"),
        password=password or get_env_var_or_fail(PASSWORD_ENV_VAR, "Things Cloud password"),
    )


def load_client_settings() -> ClientSettings:
    base_url = os.getenv(BASE_URL_ENV_VAR) or DEFAULT_BASE_URL

    raw_timeout = os.getenv(TIMEOUT_ENV_VAR)
    if not raw_timeout:
        return ClientSettings(base_url=base_url.rstrip("/"))

    try:
        timeout = float(raw_timeout)
    except ValueError as e:
        raise ConfigurationError(f"'{TIMEOUT_ENV_VAR}' must be a number of seconds, got {raw_timeout!r}.") from e
    if timeout <= 0:
        raise ConfigurationError(f"'{TIMEOUT_ENV_VAR}' must be positive, got {raw_timeout!r}.")

    return ClientSettings(base_url=base_url.rstrip("/"), timeout=timeout)
