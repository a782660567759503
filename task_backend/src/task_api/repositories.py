from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.orm import Session

from .models import TaskModel, utcnow
from .schemas import TaskCreate

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def list(self) -> List[TaskModel]:
        """Return every task, newest first (by created_at)."""

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskModel:
        """Insert a new, not yet completed task and return it."""

    @abstractmethod
    def get(self, task_id: int) -> Optional[TaskModel]:
        """Return a task by id, or None if not found."""

    @abstractmethod
    def set_completed(self, task_id: int, completed: bool) -> Optional[TaskModel]:
        """Set the completion flag and refresh updated_at. Return the task or None if not found."""

    @abstractmethod
    def delete(self, task_id: int) -> Optional[int]:
        """Delete a task by id. Return the deleted id, or None if not found."""


class SQLAlchemyRepository(Repository):
    """
    Repository backed by a SQLAlchemy session.

    Each operation is a single statement; writes use RETURNING so the affected
    row comes back without a second round-trip, and are committed immediately.
    """

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self._session = session
        self._clock = clock

    def list(self) -> List[TaskModel]:
        stmt = select(TaskModel).order_by(TaskModel.created_at.desc())
        return list(self._session.scalars(stmt))

    def create(self, data: TaskCreate) -> TaskModel:
        now = self._clock()
        stmt = (
            insert(TaskModel)
            .values(
                title=data.title,
                description=data.description,
                completed=False,
                created_at=now,
                updated_at=now,
            )
            .returning(TaskModel)
        )
        task = self._session.scalars(stmt).one()
        self._session.commit()
        logger.info("Created task id=%s", task.id)
        return task

    def get(self, task_id: int) -> Optional[TaskModel]:
        return self._session.get(TaskModel, task_id)

    def set_completed(self, task_id: int, completed: bool) -> Optional[TaskModel]:
        stmt = (
            update(TaskModel)
            .where(TaskModel.id == task_id)
            .values(completed=completed, updated_at=self._clock())
            .returning(TaskModel)
        )
        task = self._session.scalars(stmt).one_or_none()
        self._session.commit()
        if task is not None:
            logger.info("Updated task id=%s completed=%s", task_id, completed)
        return task

    def delete(self, task_id: int) -> Optional[int]:
        stmt = delete(TaskModel).where(TaskModel.id == task_id).returning(TaskModel.id)
        deleted_id = self._session.scalars(stmt).one_or_none()
        self._session.commit()
        if deleted_id is not None:
            logger.info("Deleted task id=%s", deleted_id)
        return deleted_id
