from __future__ import annotations


# PUBLIC_INTERFACE
class TaskNotFoundError(Exception):
    """Raised when no row in 'tasks' matches the requested id."""

    message = "Task not found"

    def __init__(self, task_id: int) -> None:
        super().__init__(f"{self.message}: id={task_id}")
        self.task_id = task_id
