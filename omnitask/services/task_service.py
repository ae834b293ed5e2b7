from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..clock import local_now
from ..models import Task
from ..schemas import TaskCreate
from .recurrence_service import handle_completion

log = logging.getLogger(__name__)


@dataclass
class Completion:
    task: Task
    completed_at: datetime
    successor: Optional[Task] = None


class SqlTaskStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create_task(self, payload: TaskCreate) -> Task:
        return create_task(self.session, payload)


def list_active_tasks(session: Session, limit: int = 20, page: int = 1) -> Sequence[Task]:
    stmt = (
        select(Task)
        .where(Task.is_completed.is_(False), Task.parent_task_id.is_(None))
        .order_by(Task.due_date.is_(None), Task.due_date, Task.sort_order, Task.created_at)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return session.scalars(stmt).all()


def get_task(session: Session, task_id: str) -> Task | None:
    return session.get(Task, task_id)


def create_task(session: Session, payload: TaskCreate) -> Task:
    # shallow copy: the pattern must stay a Pattern, not a dict
    task = Task(**{f.name: getattr(payload, f.name) for f in fields(payload)})
    session.add(task)
    session.flush()
    return task


def complete_task(
    session: Session, task_id: str, reference: datetime | None = None, with_subtasks: bool = False
) -> Completion | None:
    """Mark a task done and, if it recurs, create its successor.

    Returns ``None`` when the task is missing or was already completed, so a
    second completion never produces a second successor.
    """
    reference = reference or local_now()
    stmt = (
        update(Task)
        .where(Task.id == task_id, Task.is_completed.is_(False))
        .values(is_completed=True, completed_at=reference, updated_at=reference)
        .execution_options(synchronize_session=False)
    )
    if session.execute(stmt).rowcount != 1:
        log.info("Task %s is missing or already completed", task_id)
        return None
    if with_subtasks:
        session.execute(
            update(Task)
            .where(Task.parent_task_id == task_id, Task.is_completed.is_(False))
            .values(is_completed=True, completed_at=reference, updated_at=reference)
            .execution_options(synchronize_session=False)
        )
    task = session.get(Task, task_id, populate_existing=True)
    successor = handle_completion(task, SqlTaskStore(session), reference)
    return Completion(task=task, completed_at=reference, successor=successor)


def uncomplete_task(session: Session, task_id: str) -> Task | None:
    """Reopen a task. A successor created on completion is left in place."""
    task = get_task(session, task_id)
    if task is None or not task.is_completed:
        return task
    task.is_completed = False
    task.completed_at = None
    session.add(task)
    return task


def list_recurring_chain(session: Session, task: Task) -> Sequence[Task]:
    stmt = (
        select(Task)
        .where(
            Task.title == task.title,
            Task.recurring_pattern.is_not(None),
            Task.project_id.is_(None) if task.project_id is None else Task.project_id == task.project_id,
        )
        .order_by(Task.due_date.is_(None), Task.due_date, Task.created_at)
    )
    return session.scalars(stmt).all()
