"""Tasks API Router - manual task management for permit packages."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from ..dependencies import get_task_service
from ..domain.tasks import CreateTaskCommand, UpdateTaskCommand
from .schemas import TaskListResponse, TaskResponse
from .service import TaskService


router = APIRouter(tags=["Tasks"])


@router.get(
    "/permits/{permit_id}/tasks",
    response_model=TaskListResponse,
    summary="List tasks of a permit",
    description="Ordered by status (workflow order), then due date.",
)
def list_tasks(
    permit_id: UUID,
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    return TaskListResponse(
        items=[TaskResponse.model_validate(t) for t in service.list_tasks(permit_id)]
    )


@router.post(
    "/permits/{permit_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
def create_task(
    permit_id: UUID,
    command: CreateTaskCommand,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return TaskResponse.model_validate(service.create_task(permit_id, command))


@router.patch("/tasks/{task_id}", response_model=TaskResponse, summary="Update a task")
def update_task(
    task_id: UUID,
    command: UpdateTaskCommand,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return TaskResponse.model_validate(service.update_task(task_id, command))


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
)
def delete_task(
    task_id: UUID,
    service: TaskService = Depends(get_task_service),
) -> Response:
    service.delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
