import json

from rich.console import Console

from thingscloud.account import Account
from thingscloud.config import load_client_settings, load_credentials
from thingscloud.console import render_task_table
from thingscloud.models import TaskStatus


def list_tasks(email: str | None, password: str | None, status: TaskStatus | None, json_output: bool) -> None:
    credentials = load_credentials(email, password)
    settings = load_client_settings()

    with Account.login(credentials.email, credentials.password, settings) as account:
        history = account.history()

    tasks_by_id = history.tasks_by_id if status is None else history.with_status(status)

    if json_output:
        payload = [{**task, "uuid": record_id} for record_id, task in tasks_by_id.items()]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    console = Console()
    if not tasks_by_id:
        console.print("No tasks found.")
        return

    title = "Tasks" if status is None else f"{status.name.capitalize()} Tasks"
    console.print(render_task_table(tasks_by_id, title=title))
