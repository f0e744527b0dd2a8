import json

from rich.console import Console
from rich.table import Table

from thingscloud.account import Account
from thingscloud.config import load_client_settings, load_credentials


def show_account(email: str | None, password: str | None, json_output: bool) -> None:
    credentials = load_credentials(email, password)
    settings = load_client_settings()

    with Account.login(credentials.email, credentials.password, settings) as account:
        history = account.history()

    if json_output:
        print(
            json.dumps(
                {
                    "email": account.email,
                    "maildrop_email": account.maildrop_email,
                    "last_index": history.last_index,
                    "tasks": len(history.tasks_by_id),
                }
            )
        )
        return

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Email", account.email)
    table.add_row("Maildrop", account.maildrop_email)
    table.add_row("History index", str(history.last_index))
    table.add_row("Tasks", str(len(history.tasks_by_id)))
    Console().print(table)
