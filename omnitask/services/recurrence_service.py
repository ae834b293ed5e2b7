from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Protocol

from ..clock import local_now
from ..recurrence import next_occurrence, should_continue
from ..schemas import TaskCreate

log = logging.getLogger(__name__)


class TaskStore(Protocol):
    def create_task(self, payload: TaskCreate) -> Any:
        ...


def plan_successor(task, now: Optional[datetime] = None) -> Optional[TaskCreate]:
    """Describe the task that follows ``task`` once it is completed.

    Returns ``None`` when the task does not recur or its end condition is
    reached after counting this completion.
    """
    pattern = task.recurring_pattern
    if pattern is None:
        return None
    now = now or local_now()
    incremented = pattern.with_incremented_occurrence()
    if not should_continue(incremented, now):
        log.info("Recurrence for %r ended after %d occurrences", task.title, incremented.occurrence_count)
        return None
    reference = task.due_date or now
    return TaskCreate(
        title=task.title,
        notes=task.notes,
        project_id=task.project_id,
        priority=task.priority,
        due_date=next_occurrence(incremented, reference),
        recurring_pattern=incremented,
        original_input=task.original_input,
    )


def handle_completion(task, store: TaskStore, now: Optional[datetime] = None) -> Optional[Any]:
    payload = plan_successor(task, now)
    if payload is None:
        return None
    log.debug("Scheduling next %r for %s", payload.title, payload.due_date)
    return store.create_task(payload)
