from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status

from ..auth import get_caller_id
from ..schemas import ErrorEnvelope, TaskEnvelope, TaskListEnvelope, TaskOut
from ..services import TaskService
from ..utils import data_envelope

router = APIRouter(
    prefix="/task",
    tags=["tasks"],
)

_ERRORS = {
    400: {"model": ErrorEnvelope, "description": "Validation error"},
    401: {"model": ErrorEnvelope, "description": "Caller identity missing"},
}
_OWNED_ERRORS = {
    **_ERRORS,
    403: {"model": ErrorEnvelope, "description": "Task belongs to another user"},
    404: {"model": ErrorEnvelope, "description": "Task not found"},
}


def get_task_service(request: Request) -> TaskService:
    """
    Dependency returning the service built by the application factory.
    """
    return request.app.state.task_service


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task owned by the caller and return it.",
    responses={
        201: {"description": "Task created successfully"},
        500: {"model": ErrorEnvelope, "description": "Store capacity exceeded"},
        **_ERRORS,
    },
)
def create_task(
    payload: Any = Body(default=None),
    caller_id: str = Depends(get_caller_id),
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    """
    Create a new Task. The body is validated by the service, not by FastAPI.
    """
    created = service.create(caller_id, payload)
    return TaskEnvelope(**data_envelope(TaskOut(**created)))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TaskListEnvelope,
    summary="List Tasks",
    description="List the caller's tasks in creation order.",
    responses={200: {"description": "Tasks retrieved"}, 401: _ERRORS[401]},
)
def list_tasks(
    caller_id: str = Depends(get_caller_id),
    service: TaskService = Depends(get_task_service),
) -> TaskListEnvelope:
    items = service.list(caller_id)
    return TaskListEnvelope(**data_envelope(TaskOut(**it) for it in items))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskEnvelope,
    summary="Get Task",
    description="Get a single task by ID.",
    responses={200: {"description": "Task found"}, **_OWNED_ERRORS},
)
def get_task(
    task_id: str,
    caller_id: str = Depends(get_caller_id),
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    """
    Retrieve a single Task by its ID.
    """
    item = service.get(caller_id, {"id": task_id})
    return TaskEnvelope(**data_envelope(TaskOut(**item)))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskEnvelope,
    summary="Replace Task",
    description=(
        "Replace title, description, due_date and status of a task. Optional fields "
        "omitted from the body are cleared."
    ),
    responses={200: {"description": "Task updated"}, **_OWNED_ERRORS},
)
def put_task(
    task_id: str,
    payload: Any = Body(default=None),
    caller_id: str = Depends(get_caller_id),
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    """
    Full update (replace) semantics; the service hands the store a complete value set.
    """
    updated = service.update(caller_id, {"id": task_id}, payload)
    return TaskEnvelope(**data_envelope(TaskOut(**updated)))  # type: ignore[arg-type]
