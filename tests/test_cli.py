"""CLI tests — click commands against a mocked API.

Learn: The commands build their HTTP client through _client(), so tests
swap in an httpx.MockTransport and assert on the requests the CLI sends.
"""

import json
import os

import httpx
import pytest
from click.testing import CliRunner

from taskgate.cli import main as cli


@pytest.fixture
def api(monkeypatch):
    """Record requests and answer them from a routing table."""
    calls = []
    routes = {}

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        calls.append((request.method, request.url.path, body, request.headers))
        status, payload = routes[(request.method, request.url.path)]
        return httpx.Response(status, json=payload)

    def fake_client():
        headers = {}
        token = os.environ.get("TASKGATE_TOKEN")
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url="http://test",
            headers=headers,
        )

    monkeypatch.setattr(cli, "_client", fake_client)
    return routes, calls


def _task(**fields):
    task = {
        "id": 3,
        "ownerId": 1,
        "title": "buy milk",
        "description": None,
        "completed": False,
        "createdAt": "2024-01-01T00:00:00",
        "updatedAt": "2024-01-01T00:00:00",
    }
    task.update(fields)
    return task


def test_register(api):
    routes, calls = api
    routes[("POST", "/auth/register")] = (200, {"id": 1, "username": "alice"})

    result = CliRunner().invoke(cli.main, ["register", "alice", "--password", "pw"])
    assert result.exit_code == 0, result.output
    assert "Registered alice" in result.output
    assert calls[0][2] == {"username": "alice", "password": "pw"}


def test_login_prints_token(api):
    routes, _ = api
    routes[("POST", "/auth/login")] = (200, {"token": "abc.def.ghi"})

    result = CliRunner().invoke(cli.main, ["login", "alice", "--password", "pw"])
    assert result.exit_code == 0
    assert result.output.strip() == "abc.def.ghi"


def test_login_failure_exits_nonzero(api):
    routes, _ = api
    routes[("POST", "/auth/login")] = (400, {"detail": "Invalid credentials"})

    result = CliRunner().invoke(cli.main, ["login", "alice", "--password", "bad"])
    assert result.exit_code == 1
    assert "Invalid credentials" in result.output


def test_tasks_list_sends_token(api, monkeypatch):
    routes, calls = api
    monkeypatch.setenv("TASKGATE_TOKEN", "tok")
    routes[("GET", "/tasks")] = (200, [_task(), _task(id=4, title="walk dog", completed=True)])

    result = CliRunner().invoke(cli.main, ["tasks", "list"])
    assert result.exit_code == 0, result.output
    assert "buy milk" in result.output
    assert "walk dog" in result.output
    assert calls[0][3]["Authorization"] == "Bearer tok"


def test_tasks_edit_sends_only_given_fields(api):
    routes, calls = api
    routes[("PATCH", "/tasks/3")] = (200, _task(title="renamed"))

    result = CliRunner().invoke(cli.main, ["tasks", "edit", "3", "--title", "renamed"])
    assert result.exit_code == 0, result.output
    assert calls[0][2] == {"title": "renamed"}


def test_tasks_edit_clear_description_sends_null(api):
    routes, calls = api
    routes[("PATCH", "/tasks/3")] = (200, _task())

    result = CliRunner().invoke(cli.main, ["tasks", "edit", "3", "--clear-description"])
    assert result.exit_code == 0, result.output
    assert calls[0][2] == {"description": None}


def test_tasks_done(api):
    routes, calls = api
    routes[("PATCH", "/tasks/3")] = (200, _task(completed=True))

    result = CliRunner().invoke(cli.main, ["tasks", "done", "3"])
    assert result.exit_code == 0
    assert calls[0][2] == {"completed": True}


def test_tasks_rm_not_found(api):
    routes, _ = api
    routes[("DELETE", "/tasks/9")] = (404, {"detail": "Task not found"})

    result = CliRunner().invoke(cli.main, ["tasks", "rm", "9"])
    assert result.exit_code == 1
    assert "Task not found" in result.output
