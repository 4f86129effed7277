from fastapi import APIRouter, HTTPException, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.logging import get_module_logger
from infrastructure.services import TaskManagerDep
from infrastructure.tasks import TaskPersistenceError

logger = get_module_logger()
router = APIRouter(tags=["Tasks"])
limiter = get_limiter()


@router.get("/tasks/{task_id}")
@limiter.limit("120/minute")  # clients poll this while a task runs
def get_task(
    task_id: str,
    request: Request,  # pylint: disable=unused-argument
    task_manager: TaskManagerDep,
):
    """Return the current state of a task.

    Raises:
        HTTPException: 404 if the task does not exist or has expired, 503 if
            the task store is unavailable.
    """
    try:
        task = task_manager.get(task_id)
    except TaskPersistenceError as e:
        logger.error("task_lookup_failed", task_id=task_id, error=str(e))
        raise HTTPException(status_code=503, detail="Task store unavailable") from e

    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task.to_dict()
