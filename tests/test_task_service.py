"""TaskService and TaskPatch tests — the partial-update engine without HTTP.

Learn: TaskPatch.changes() is where "absent" and "null" must stay apart.
The service tests run against the same per-test database as the API tests,
using the app's session factory directly.
"""

from datetime import timezone

import pytest
from pydantic import ValidationError

from taskgate.db.models import Account
from taskgate.schemas.task import TaskPatch
from taskgate.services.task_service import TaskNotFoundError, TaskService


def _utc(value):
    """SQLite hands back naive UTC, PostgreSQL aware datetimes."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# ═══════════════════════════════════════════════════════════
# TaskPatch
# ═══════════════════════════════════════════════════════════


def test_patch_absent_fields_are_not_changes():
    assert TaskPatch.model_validate({}).changes() == {}


def test_patch_explicit_null_is_a_change():
    patch = TaskPatch.model_validate({"description": None})
    assert patch.changes() == {"description": None}


def test_patch_values_are_changes():
    patch = TaskPatch.model_validate({"title": "z", "completed": True})
    assert patch.changes() == {"title": "z", "completed": True}


@pytest.mark.parametrize("body", [{"title": None}, {"completed": None}, {"title": ""}])
def test_patch_rejects_null_or_empty_required_fields(body):
    with pytest.raises(ValidationError):
        TaskPatch.model_validate(body)


# ═══════════════════════════════════════════════════════════
# TaskService
# ═══════════════════════════════════════════════════════════


@pytest.fixture
async def owners(app):
    async with app.state.session_factory() as session:
        a = Account(username="owner-a", password_hash="$argon2id$x")
        b = Account(username="owner-b", password_hash="$argon2id$x")
        session.add_all([a, b])
        await session.commit()
        return a.id, b.id


@pytest.fixture
async def svc(app):
    async with app.state.session_factory() as session:
        yield TaskService(session)


@pytest.mark.asyncio
async def test_update_merges_present_fields(svc, owners):
    owner, _ = owners
    task = await svc.create_task(owner, "x", description="y")

    updated = await svc.update_task(task.id, owner, TaskPatch.model_validate({"description": None}))
    assert (updated.title, updated.description, updated.completed) == ("x", None, False)


@pytest.mark.asyncio
async def test_update_refreshes_updated_at(svc, owners):
    owner, _ = owners
    task = await svc.create_task(owner, "x")
    before = task.updated_at

    updated = await svc.update_task(task.id, owner, TaskPatch.model_validate({"completed": True}))
    assert updated.completed is True
    assert _utc(updated.updated_at) > _utc(before)


@pytest.mark.asyncio
async def test_update_other_owner_raises_not_found(svc, owners):
    owner, other = owners
    task_id = (await svc.create_task(owner, "x")).id

    # The failed update rolls back and expires every loaded instance.
    with pytest.raises(TaskNotFoundError):
        await svc.update_task(task_id, other, TaskPatch.model_validate({"title": "stolen"}))

    assert (await svc.get_task(task_id, owner)).title == "x"


@pytest.mark.asyncio
async def test_update_missing_raises_not_found(svc, owners):
    owner, _ = owners
    with pytest.raises(TaskNotFoundError):
        await svc.update_task(424242, owner, TaskPatch())


@pytest.mark.asyncio
async def test_delete_scoped_by_owner(svc, owners):
    owner, other = owners
    task_id = (await svc.create_task(owner, "x")).id

    with pytest.raises(TaskNotFoundError):
        await svc.delete_task(task_id, other)

    await svc.delete_task(task_id, owner)
    with pytest.raises(TaskNotFoundError):
        await svc.get_task(task_id, owner)
