"""Task service — owner-scoped task storage and transactional partial updates.

Learn: Every query in this service carries `owner_id` as a predicate.
The owner always comes from the authenticated account, never from the
request body, so another account's task is indistinguishable from a
task that does not exist (TaskNotFoundError → 404 either way).

update_task() is the one multi-statement critical section:
1. SELECT ... FOR UPDATE scoped by (id, owner) — locks the row
2. Merge the patch's present fields in memory
3. UPDATE ... WHERE id = ? AND owner_id = ? — ownership re-checked at write
4. Commit; any failure rolls the whole thing back
Two concurrent patches to the same task serialize on the row lock, and
the second one merges onto the first one's committed result.
"""

from typing import Optional

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.db.models import Task, utcnow
from taskgate.schemas.task import TaskPatch

logger = structlog.get_logger()


class TaskNotFoundError(Exception):
    """Raised when a task does not exist or belongs to another account."""
    pass


class TaskService:
    """Business logic for owner-scoped task CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        owner_id: int,
        title: str,
        description: Optional[str] = None,
        completed: bool = False,
    ) -> Task:
        task = Task(
            owner_id=owner_id,
            title=title,
            description=description,
            completed=completed,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)  # server-assigned timestamps
        logger.info("task.created", task_id=task.id)
        return task

    # ─── Read ────────────────────────────────────────────

    async def get_task(self, task_id: int, owner_id: int) -> Task:
        result = await self.db.execute(
            select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
        )
        task = result.scalars().first()
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def list_tasks(self, owner_id: int) -> list[Task]:
        result = await self.db.execute(
            select(Task)
            .where(Task.owner_id == owner_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        return list(result.scalars().all())

    # ─── Update ──────────────────────────────────────────

    async def update_task(self, task_id: int, owner_id: int, patch: TaskPatch) -> Task:
        """Apply a sparse patch to an owned task inside one transaction.

        An empty patch returns the stored task unchanged without writing.
        """
        try:
            result = await self.db.execute(
                select(Task)
                .where(Task.id == task_id, Task.owner_id == owner_id)
                .with_for_update()
            )
            task = result.scalars().first()
            if task is None:
                raise TaskNotFoundError(task_id)

            changes = patch.changes()
            if not changes:
                await self.db.commit()
                return task

            # Merge onto plain values; mutating `task` would let autoflush
            # write it without the owner predicate.
            merged = {
                "title": task.title,
                "description": task.description,
                "completed": task.completed,
            }
            merged.update(changes)

            written = await self.db.execute(
                update(Task)
                .where(Task.id == task_id, Task.owner_id == owner_id)
                .values(**merged, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if written.rowcount != 1:
                raise TaskNotFoundError(task_id)

            await self.db.refresh(task)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("task.updated", task_id=task_id, fields=sorted(changes))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, task_id: int, owner_id: int) -> None:
        result = await self.db.execute(
            delete(Task).where(Task.id == task_id, Task.owner_id == owner_id)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            raise TaskNotFoundError(task_id)
        await self.db.commit()
        logger.info("task.deleted", task_id=task_id)
