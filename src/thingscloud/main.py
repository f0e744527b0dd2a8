from collections.abc import Sequence
from enum import Enum
from sys import exit
from typing import Annotated, Any, final, override

import typer
from typer.core import TyperGroup

from thingscloud.config import EMAIL_ENV_VAR, PASSWORD_ENV_VAR
from thingscloud.exceptions import ThingsCloudError
from thingscloud.models import TaskStatus


@final
class ErrorHandlingGroup(TyperGroup):
    @override
    def main(  # pyright: ignore[reportAny]
        self,
        args: Sequence[str] | None = None,
        prog_name: str | None = None,
        complete_var: str | None = None,
        standalone_mode: bool = True,
        windows_expand_args: bool = True,
        **extra: Any,  # pyright: ignore[reportAny, reportExplicitAny]
    ) -> Any:  # pyright: ignore[reportExplicitAny]
        try:
            return super().main(args, prog_name, complete_var, standalone_mode, windows_expand_args, **extra)  #  pyright: ignore[reportAny]
        except ThingsCloudError as e:
            typer.secho(f"Error: {e.message}", err=True, fg=typer.colors.RED)
            exit(e.exit_code)
        except Exception as e:
            typer.secho("Unexpected Internal Error", err=True, fg=typer.colors.RED)
            typer.echo(str(e), err=True)
            exit(1)


app = typer.Typer(cls=ErrorHandlingGroup, no_args_is_help=True)


class StatusFilter(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def to_task_status(self) -> TaskStatus:
        return TaskStatus[self.name]


EmailOption = Annotated[
    str | None,
    typer.Option("--email", envvar=EMAIL_ENV_VAR, show_envvar=True, help="Things Cloud account email."),
]
PasswordOption = Annotated[
    str | None,
    typer.Option("--password", envvar=PASSWORD_ENV_VAR, show_envvar=True, help="Things Cloud account password."),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON.")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every request to stderr.")] = False,
) -> None:
    """
    Read your Things tasks from Things Cloud.
    """
    from thingscloud.console import configure_logging

    configure_logging(verbose)


@app.command("tasks")
def tasks(
    email: EmailOption = None,
    password: PasswordOption = None,
    status: Annotated[
        StatusFilter | None,
        typer.Option("--status", help="Only show tasks with this status."),
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """
    Reconstruct the task list from the account history and print it.
    """
    from thingscloud.commands import tasks

    tasks.list_tasks(email, password, status.to_task_status() if status else None, json_output)


@app.command("account")
def account(
    email: EmailOption = None,
    password: PasswordOption = None,
    json_output: JsonOption = False,
) -> None:
    """
    Show account details and the current history index.
    """
    from thingscloud.commands import account

    account.show_account(email, password, json_output)


if __name__ == "__main__":
    app()
