from __future__ import annotations

import enum
import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from .clock import local_now
from .db import Base
from .patterns import Pattern, RecurrenceError, dump_pattern, load_pattern

log = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


class Priority(str, enum.Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class PatternType(TypeDecorator):
    """Stores a :class:`Pattern` as JSON text alongside the task row."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[Pattern], dialect) -> Optional[str]:
        if value is None:
            return None
        return dump_pattern(value)

    def process_result_value(self, value: Optional[str], dialect) -> Optional[Pattern]:
        if not value:
            return None
        try:
            return load_pattern(value)
        except RecurrenceError as exc:
            log.warning("Dropping unreadable recurrence pattern %r: %s", value, exc)
            return None


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now)

    tasks: Mapped[List["Task"]] = relationship("Task", back_populates="project")


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_due_completed", "due_date", "is_completed"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255))
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    project_id: Mapped[Optional[str]] = mapped_column(ForeignKey("projects.id"), nullable=True, index=True)
    parent_task_id: Mapped[Optional[str]] = mapped_column(ForeignKey("tasks.id"), nullable=True, index=True)
    priority: Mapped[Priority] = mapped_column(Enum(Priority), default=Priority.MEDIUM)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    is_current_task: Mapped[bool] = mapped_column(Boolean, default=False)
    recurring_pattern: Mapped[Optional[Pattern]] = mapped_column(PatternType, nullable=True)
    original_input: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=local_now, onupdate=local_now)

    project: Mapped[Optional["Project"]] = relationship("Project", back_populates="tasks")
    subtasks: Mapped[List["Task"]] = relationship("Task", back_populates="parent", cascade="all, delete-orphan")
    parent: Mapped[Optional["Task"]] = relationship("Task", back_populates="subtasks", remote_side=[id])

    @property
    def is_recurring(self) -> bool:
        return self.recurring_pattern is not None
