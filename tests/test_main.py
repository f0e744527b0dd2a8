# pyright: standard

import json
from collections.abc import Callable

import httpx
import pytest
from pytest_mock import MockerFixture
from typer.testing import CliRunner

from tests.helpers import ACCOUNT_EMAIL, HISTORY_KEY, RawEvent, event, things_cloud_transport
from thingscloud.account import Account
from thingscloud.exceptions import InvalidCredentialsError
from thingscloud.main import app
from thingscloud.models import ItemAction

runner = CliRunner()

C, M, D = ItemAction.CREATE, ItemAction.MODIFIED, ItemAction.DELETED

EVENTS: list[RawEvent] = [
    event("A", C, {"tt": "Buy milk", "ss": 0}),
    event("B", C, {"tt": "Call Bob", "ss": 0}),
    event("A", M, {"ss": 3}),
    event("C", C, {"tt": "Gone"}),
    event("C", D),
]

ENV = {"THINGS_CLOUD_EMAIL": ACCOUNT_EMAIL, "THINGS_CLOUD_PASSWORD": "secret"}


def _fake_login(events: list[RawEvent]) -> Callable[..., Account]:
    def login(email: str, password: str, settings: object = None) -> Account:
        client = httpx.Client(base_url="https://things.test", transport=things_cloud_transport(events))
        return Account(
            email=email,
            maildrop_email="add-to-things-abc@things.email",
            history_key=HISTORY_KEY,
            client=client,
        )

    return login


def test_tasks_json_outputs_live_tasks(mocker: MockerFixture) -> None:
    # GIVEN an account whose history contains a completed, a pending and a deleted task
    login = mocker.patch("thingscloud.commands.tasks.Account.login", side_effect=_fake_login(EVENTS))

    # WHEN I run `thingscloud tasks --json`
    result = runner.invoke(app, ["tasks", "--json"], env=ENV)

    # THEN the command succeeds
    assert result.exit_code == 0, result.output
    # AND credentials came from the environment
    assert login.call_args.args[:2] == (ACCOUNT_EMAIL, "secret")
    # AND only the live tasks are printed with their identifiers
    output = json.loads(result.stdout)
    assert sorted(output, key=lambda t: t["uuid"]) == [
        {"uuid": "A", "tt": "Buy milk", "ss": 3},
        {"uuid": "B", "tt": "Call Bob", "ss": 0},
    ]


def test_tasks_json_keeps_record_id_over_payload_uuid(mocker: MockerFixture) -> None:
    # GIVEN a task whose payload carries its own `uuid` field
    events = [event("A", C, {"tt": "Buy milk", "uuid": "payload-value"})]
    _ = mocker.patch("thingscloud.commands.tasks.Account.login", side_effect=_fake_login(events))

    # WHEN I run `thingscloud tasks --json`
    result = runner.invoke(app, ["tasks", "--json"], env=ENV)

    # THEN the record identifier is reported as the uuid
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"tt": "Buy milk", "uuid": "A"}]


def test_tasks_status_filter(mocker: MockerFixture) -> None:
    _ = mocker.patch("thingscloud.commands.tasks.Account.login", side_effect=_fake_login(EVENTS))

    result = runner.invoke(app, ["tasks", "--status", "pending", "--json"], env=ENV)

    assert result.exit_code == 0, result.output
    assert [t["uuid"] for t in json.loads(result.stdout)] == ["B"]


def test_tasks_table(mocker: MockerFixture) -> None:
    # GIVEN an account with two live tasks
    _ = mocker.patch("thingscloud.commands.tasks.Account.login", side_effect=_fake_login(EVENTS))

    # WHEN I run `thingscloud tasks`
    result = runner.invoke(app, ["tasks"], env=ENV)

    # THEN both live tasks are listed with their status
    assert result.exit_code == 0, result.output
    assert "Buy milk" in result.stdout
    assert "completed" in result.stdout
    assert "Call Bob" in result.stdout
    # AND the deleted task is not
    assert "Gone" not in result.stdout


def test_tasks_empty_history(mocker: MockerFixture) -> None:
    _ = mocker.patch("thingscloud.commands.tasks.Account.login", side_effect=_fake_login([]))

    result = runner.invoke(app, ["tasks"], env=ENV)

    assert result.exit_code == 0, result.output
    assert "No tasks found." in result.stdout


def test_account_json(mocker: MockerFixture) -> None:
    _ = mocker.patch("thingscloud.commands.account.Account.login", side_effect=_fake_login(EVENTS))

    result = runner.invoke(app, ["account", "--json"], env=ENV)

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "email": ACCOUNT_EMAIL,
        "maildrop_email": "add-to-things-abc@things.email",
        "last_index": len(EVENTS),
        "tasks": 2,
    }


def test_invalid_credentials_prints_error(mocker: MockerFixture) -> None:
    # GIVEN a login that is rejected
    _ = mocker.patch("thingscloud.commands.tasks.Account.login", side_effect=InvalidCredentialsError())

    # WHEN I run `thingscloud tasks`
    result = runner.invoke(app, ["tasks"], env=ENV)

    # THEN the error is reported and the command fails
    assert result.exit_code == 1
    assert "Error: The provided credentials are invalid." in result.output


def test_missing_credentials_prints_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("THINGS_CLOUD_EMAIL", raising=False)
    monkeypatch.delenv("THINGS_CLOUD_PASSWORD", raising=False)

    result = runner.invoke(app, ["tasks"])

    assert result.exit_code == 1
    assert "THINGS_CLOUD_EMAIL" in result.output
