from __future__ import annotations

from typing import Iterator, List

from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.exceptions import RequestValidationError

from ..db import Database
from ..errors import TaskNotFoundError
from ..repositories import Repository, SQLAlchemyRepository
from ..schemas import ErrorResponse, TaskCreate, TaskDeleted, TaskOut, TaskUpdate, ValidationErrorResponse

# 'tasks.id' is a 32-bit serial column.
MAX_TASK_ID = 2_147_483_647

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)

_NOT_FOUND = {"model": ErrorResponse, "description": "Task not found"}
_INVALID = {"model": ValidationErrorResponse, "description": "Invalid input or ID format"}


def _get_repo(request: Request) -> Iterator[Repository]:
    """
    Open a session on the application's database for the duration of one request.
    """
    database: Database = request.app.state.database
    with database.session() as session:
        yield SQLAlchemyRepository(session)


# Canonical decimal only: no sign, whitespace, underscores or leading zeros.
_TASK_ID_PATTERN = r"^(0|[1-9][0-9]{0,9})$"


def _task_id(
    task_id: str = Path(
        ...,
        pattern=_TASK_ID_PATTERN,
        description="The ID of the task (a non-negative integer)",
        examples=["1"],
    ),
) -> int:
    value = int(task_id)
    if value > MAX_TASK_ID:
        raise RequestValidationError(
            [
                {
                    "type": "less_than_equal",
                    "loc": ("path", "task_id"),
                    "msg": f"Input should be less than or equal to {MAX_TASK_ID}",
                    "input": task_id,
                    "ctx": {"le": MAX_TASK_ID},
                }
            ]
        )
    return value


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TaskOut],
    summary="List all tasks",
    description="Retrieves a list of all tasks, ordered by creation date (newest first).",
    responses={200: {"description": "Tasks fetched successfully"}},
)
def list_tasks(repo: Repository = Depends(_get_repo)) -> List[TaskOut]:
    """
    List every task, newest first.
    """
    return [TaskOut.model_validate(t) for t in repo.list()]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
    description="Adds a new task to the list. New tasks always start as not completed.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"model": ValidationErrorResponse, "description": "Invalid input for task creation"},
    },
)
def create_task(payload: TaskCreate, repo: Repository = Depends(_get_repo)) -> TaskOut:
    """
    Create a new task.
    """
    created = repo.create(payload)
    return TaskOut.model_validate(created)


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get a single task by ID",
    responses={
        200: {"description": "Task fetched successfully"},
        400: _INVALID,
        404: _NOT_FOUND,
    },
)
def get_task(task_id: int = Depends(_task_id), repo: Repository = Depends(_get_repo)) -> TaskOut:
    task = repo.get(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return TaskOut.model_validate(task)


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update a task's completion status",
    description="Sets the completion status of a specific task and refreshes its updatedAt timestamp.",
    responses={
        200: {"description": "Task updated successfully"},
        400: _INVALID,
        404: _NOT_FOUND,
    },
)
def update_task(
    payload: TaskUpdate,
    task_id: int = Depends(_task_id),
    repo: Repository = Depends(_get_repo),
) -> TaskOut:
    """
    Only 'completed' can be changed; title and description are left as they are.
    """
    updated = repo.set_completed(task_id, payload.completed)
    if updated is None:
        raise TaskNotFoundError(task_id)
    return TaskOut.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=TaskDeleted,
    summary="Delete a task",
    description="Removes a specific task from the list.",
    responses={
        200: {"description": "Task deleted successfully"},
        400: _INVALID,
        404: _NOT_FOUND,
    },
)
def delete_task(task_id: int = Depends(_task_id), repo: Repository = Depends(_get_repo)) -> TaskDeleted:
    deleted_id = repo.delete(task_id)
    if deleted_id is None:
        raise TaskNotFoundError(task_id)
    return TaskDeleted(message="Task deleted successfully", id=deleted_id)
