"""Task API routes.

Learn: These routes are thin. The account comes from the auth gate and
is passed to the service as the owner; the service scopes every query by
it. Not found and not owned both come back as 404.

Key patterns:
- POST for creation
- PATCH for partial updates (absent / null / value per field)
- DELETE answers 204 with no body
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.auth.dependencies import get_current_account
from taskgate.db.engine import get_db
from taskgate.db.models import Account
from taskgate.schemas.task import TaskCreate, TaskPatch, TaskRead
from taskgate.services.task_service import TaskNotFoundError, TaskService

router = APIRouter(prefix="/tasks")


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    account: Account = Depends(get_current_account),
    svc: TaskService = Depends(_task_svc),
):
    """List the current account's tasks."""
    return await svc.list_tasks(account.id)


@router.post("", response_model=TaskRead)
async def create_task(
    body: TaskCreate,
    account: Account = Depends(get_current_account),
    svc: TaskService = Depends(_task_svc),
):
    """Create a task owned by the current account."""
    return await svc.create_task(
        owner_id=account.id,
        title=body.title,
        description=body.description,
        completed=body.completed,
    )


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: int,
    account: Account = Depends(get_current_account),
    svc: TaskService = Depends(_task_svc),
):
    try:
        return await svc.get_task(task_id, account.id)
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: int,
    body: TaskPatch,
    account: Account = Depends(get_current_account),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task (title, description, completed)."""
    try:
        return await svc.update_task(task_id, account.id, body)
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: int,
    account: Account = Depends(get_current_account),
    svc: TaskService = Depends(_task_svc),
):
    try:
        await svc.delete_task(task_id, account.id)
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=204)
