from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from .clock import local_now
from .db import Base, engine, session_scope
from .nlp import parse
from .recurrence import upcoming
from .services import task_service
from .settings import get_settings
from .views.formatting import bullet_list, describe_pattern, format_task_card, medium_date


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(level=level or get_settings().log_level)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)


def preview(text: str, count: int = 5) -> str:
    pattern = parse(text)
    if pattern is None:
        return f"No recurrence found in {text!r}."
    dates = [medium_date(day) for day in upcoming(pattern, local_now(), count)]
    return "\n".join([describe_pattern(pattern), bullet_list(dates)])


def complete(task_id: str, with_subtasks: bool = False) -> str:
    """Complete a stored task in its own transaction and describe the outcome."""
    with session_scope() as session:
        completion = task_service.complete_task(session, task_id, with_subtasks=with_subtasks)
        if completion is None:
            return f"Task {task_id} is missing or already done."
        lines = [f"Done: {completion.task.title}"]
        if completion.successor is not None:
            lines += ["Next:", format_task_card(completion.successor, completion.completed_at)]
        return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("Usage: omnitask-preview <recurrence text>")
        return 2
    print(preview(" ".join(args)))
    return 0


def complete_main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    args = list(sys.argv[1:] if argv is None else argv)
    with_subtasks = "--with-subtasks" in args
    ids = [arg for arg in args if arg != "--with-subtasks"]
    if len(ids) != 1:
        print("Usage: omnitask-complete [--with-subtasks] <task id>")
        return 2
    init_db()
    print(complete(ids[0], with_subtasks=with_subtasks))
    return 0


if __name__ == "__main__":
    sys.exit(main())
