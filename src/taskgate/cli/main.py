"""taskgate CLI — run the server, log in, and manage your tasks.

Usage:
    taskgate serve                              # Run the API (uvicorn)
    taskgate register alice                     # Create an account (prompts for password)
    taskgate login alice                        # Print a token; export it as TASKGATE_TOKEN
    taskgate tasks list                         # Your tasks
    taskgate tasks add "buy milk" -d "2 litres" # Create a task
    taskgate tasks done 3                       # Mark task 3 completed
    taskgate tasks edit 3 --clear-description   # Partial update
    taskgate tasks rm 3                         # Delete a task
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import sys
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("TASKGATE_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the taskgate API.

    TASKGATE_TOKEN, when set, is sent as a bearer token.
    """
    headers = {}
    token = os.environ.get("TASKGATE_TOKEN")
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _check(r: httpx.Response) -> None:
    """Exit with the API's error detail on a non-2xx response."""
    if r.is_success:
        return
    try:
        detail = r.json().get("detail", r.text)
    except ValueError:
        detail = r.text
    click.secho(f"Error ({r.status_code}): {detail}", fg="red", err=True)
    sys.exit(1)


def _print_task(task: dict) -> None:
    mark = click.style("x", fg="green") if task["completed"] else " "
    line = f"  [{mark}] #{task['id']:<5d} {task['title']}"
    if task.get("description"):
        line += click.style(f"  — {task['description']}", dim=True)
    click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="taskgate")
def main():
    """taskgate — multi-tenant task tracking."""


@main.command()
@click.option("--host", default=None, help="Bind address (default: TASKGATE_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: TASKGATE_PORT)")
def serve(host: Optional[str], port: Optional[int]):
    """Run the API server."""
    import uvicorn

    from taskgate.config import Settings

    settings = Settings()
    uvicorn.run(
        "taskgate.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
    )


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@main.command()
@click.argument("username")
@click.password_option()
def register(username: str, password: str):
    """Create an account."""
    _run(_register_impl(username, password))


async def _register_impl(username: str, password: str):
    async with _client() as c:
        r = await c.post("/auth/register", json={"username": username, "password": password})
        _check(r)
        account = r.json()
        click.secho(f"Registered {account['username']} (id {account['id']})", fg="green")


@main.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
def login(username: str, password: str):
    """Log in and print a token (export it as TASKGATE_TOKEN)."""
    _run(_login_impl(username, password))


async def _login_impl(username: str, password: str):
    async with _client() as c:
        r = await c.post("/auth/login", json={"username": username, "password": password})
        _check(r)
        click.echo(r.json()["token"])


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@main.group()
def tasks():
    """Manage your tasks (needs TASKGATE_TOKEN)."""


@tasks.command("list")
def list_tasks():
    """List your tasks."""
    _run(_list_impl())


async def _list_impl():
    async with _client() as c:
        r = await c.get("/tasks")
        _check(r)
        items = r.json()

    if not items:
        click.echo("No tasks found.")
        return
    click.secho(f"Tasks ({len(items)}):", bold=True)
    for task in items:
        _print_task(task)


@tasks.command("add")
@click.argument("title")
@click.option("--description", "-d", default=None, help="Optional description")
def add_task(title: str, description: Optional[str]):
    """Create a task."""
    _run(_add_impl(title, description))


async def _add_impl(title: str, description: Optional[str]):
    async with _client() as c:
        r = await c.post("/tasks", json={"title": title, "description": description})
        _check(r)
        _print_task(r.json())


@tasks.command("done")
@click.argument("task_id", type=int)
def done_task(task_id: int):
    """Mark a task completed."""
    _run(_patch_impl(task_id, {"completed": True}))


@tasks.command("edit")
@click.argument("task_id", type=int)
@click.option("--title", "-t", default=None, help="New title")
@click.option("--description", "-d", default=None, help="New description")
@click.option("--clear-description", is_flag=True, help="Remove the description")
@click.option("--completed/--not-completed", default=None, help="Set completion")
def edit_task(
    task_id: int,
    title: Optional[str],
    description: Optional[str],
    clear_description: bool,
    completed: Optional[bool],
):
    """Partially update a task. Only the given options are changed."""
    if description is not None and clear_description:
        raise click.UsageError("--description and --clear-description are exclusive")

    patch: dict = {}
    if title is not None:
        patch["title"] = title
    if description is not None:
        patch["description"] = description
    if clear_description:
        patch["description"] = None
    if completed is not None:
        patch["completed"] = completed
    _run(_patch_impl(task_id, patch))


async def _patch_impl(task_id: int, patch: dict):
    async with _client() as c:
        r = await c.patch(f"/tasks/{task_id}", json=patch)
        _check(r)
        _print_task(r.json())


@tasks.command("rm")
@click.argument("task_id", type=int)
def remove_task(task_id: int):
    """Delete a task."""
    _run(_remove_impl(task_id))


async def _remove_impl(task_id: int):
    async with _client() as c:
        r = await c.delete(f"/tasks/{task_id}")
        _check(r)
        click.echo(f"Deleted task #{task_id}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
