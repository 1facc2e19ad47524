from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from ..classification import TaskFilter
from ..models import TaskEntity
from ..repositories import Mutation
from ..schemas import (
    AnalyticsOut,
    BoardOut,
    FilterCountsOut,
    MutationOut,
    SessionTime,
    StepRequest,
    TaskCreate,
    TaskOut,
    TextUpdate,
    TimeUpdate,
)
from ..tracker import Tracker
from ..utils import mutation_envelope

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)

analytics_router = APIRouter(
    prefix="/api/v1/analytics",
    tags=["tasks"],
)

_MUTATION_RESPONSES = {
    200: {"description": "Request processed; 'accepted' is false when it was ignored"},
}


def _get_tracker(request: Request) -> Tracker:
    """
    Dependency returning the tracker opened at application startup.
    """
    return request.app.state.tracker


def _task_out(task: TaskEntity) -> TaskOut:
    return TaskOut(**task)  # type: ignore[arg-type]


def _tasks_out(tasks: List[TaskEntity]) -> List[TaskOut]:
    return [_task_out(t) for t in tasks]


def _respond(mutation: Mutation) -> MutationOut:
    task = _task_out(mutation.task) if mutation.task is not None else None
    return MutationOut(**mutation_envelope(mutation.accepted, task))


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=BoardOut,
    summary="Board",
    description=(
        "Today's tasks restricted by the filter, plus the carryover and scheduled sections, "
        "per-filter counts and the analytics panel.\n\n"
        "Query parameters:\n"
        "- filter: all, active or completed (omitted keeps the current filter)"
    ),
)
def get_board(
    task_filter: Optional[TaskFilter] = Query(None, alias="filter", description="Completion filter"),
    tracker: Tracker = Depends(_get_tracker),
) -> BoardOut:
    """
    Return the board for the current bucket.
    """
    view = tracker.board(task_filter)
    return BoardOut(
        profile=view.profile,
        unit=view.unit,
        filter=view.filter.value,
        tasks=_tasks_out(view.tasks),
        carryover=_tasks_out(view.carryover),
        scheduled=_tasks_out(view.scheduled),
        counts=FilterCountsOut(**view.counts),
        analytics=AnalyticsOut(**view.analytics.as_dict()),
    )


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=MutationOut,
    summary="Add Task",
    description="Add a task. Blank text is ignored; unreadable planned time uses the profile default.",
    responses=_MUTATION_RESPONSES,
)
async def add_task(payload: TaskCreate, tracker: Tracker = Depends(_get_tracker)) -> MutationOut:
    """
    Add a new task.
    """
    return _respond(await tracker.store.add(payload.text, payload.planned_time, payload.date))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=MutationOut,
    summary="Delete Task",
    responses=_MUTATION_RESPONSES,
)
async def delete_task(task_id: str, tracker: Tracker = Depends(_get_tracker)) -> MutationOut:
    """
    Delete a task by id.
    """
    return _respond(await tracker.store.delete(task_id))


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=MutationOut,
    summary="Toggle Completion",
    responses=_MUTATION_RESPONSES,
)
async def toggle_task(task_id: str, tracker: Tracker = Depends(_get_tracker)) -> MutationOut:
    """
    Flip the completion flag of a task.
    """
    return _respond(await tracker.store.toggle_complete(task_id))


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}/text",
    response_model=MutationOut,
    summary="Rename Task",
    description="Replace the task text. Blank text is ignored.",
    responses=_MUTATION_RESPONSES,
)
async def rename_task(task_id: str, payload: TextUpdate, tracker: Tracker = Depends(_get_tracker)) -> MutationOut:
    """
    Replace the text of a task.
    """
    return _respond(await tracker.store.rename(task_id, payload.text))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}/planned-time",
    response_model=MutationOut,
    summary="Set Planned Time",
    description="Set planned time, clamped to the profile floor.",
    responses=_MUTATION_RESPONSES,
)
async def set_planned_time(
    task_id: str, payload: TimeUpdate, tracker: Tracker = Depends(_get_tracker)
) -> MutationOut:
    """
    Set the planned time of a task.
    """
    return _respond(await tracker.store.set_planned_time(task_id, payload.value))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}/actual-time",
    response_model=MutationOut,
    summary="Set Actual Time",
    description="Set logged time, clamped at zero.",
    responses=_MUTATION_RESPONSES,
)
async def set_actual_time(
    task_id: str, payload: TimeUpdate, tracker: Tracker = Depends(_get_tracker)
) -> MutationOut:
    """
    Set the logged time of a task.
    """
    return _respond(await tracker.store.set_actual_time(task_id, payload.value))


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/planned-time/step",
    response_model=MutationOut,
    summary="Step Planned Time",
    responses=_MUTATION_RESPONSES,
)
async def step_planned_time(
    task_id: str, payload: StepRequest, tracker: Tracker = Depends(_get_tracker)
) -> MutationOut:
    """
    Move the planned time one step up or down.
    """
    return _respond(await tracker.store.step_planned_time(task_id, payload.direction))


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/actual-time/step",
    response_model=MutationOut,
    summary="Step Actual Time",
    responses=_MUTATION_RESPONSES,
)
async def step_actual_time(
    task_id: str, payload: StepRequest, tracker: Tracker = Depends(_get_tracker)
) -> MutationOut:
    """
    Move the logged time one step up or down.
    """
    return _respond(await tracker.store.step_actual_time(task_id, payload.direction))


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/session",
    response_model=MutationOut,
    summary="Log Session Time",
    description="Add a positive amount to the logged time. Zero, negative or unreadable amounts are ignored.",
    responses=_MUTATION_RESPONSES,
)
async def log_session(task_id: str, payload: SessionTime, tracker: Tracker = Depends(_get_tracker)) -> MutationOut:
    """
    Add a session's worth of logged time to a task.
    """
    return _respond(await tracker.store.add_session_time(task_id, payload.amount))


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/reschedule",
    response_model=MutationOut,
    summary="Move To Today",
    description="Move a carryover or scheduled task to today.",
    responses=_MUTATION_RESPONSES,
)
async def reschedule_task(task_id: str, tracker: Tracker = Depends(_get_tracker)) -> MutationOut:
    """
    Move a task to today.
    """
    return _respond(await tracker.store.reschedule(task_id))


# PUBLIC_INTERFACE
@analytics_router.get(
    "/",
    response_model=AnalyticsOut,
    summary="Analytics",
    description="Analytics panel for the current bucket.",
)
def get_analytics(tracker: Tracker = Depends(_get_tracker)) -> AnalyticsOut:
    """
    Return the analytics panel for the current bucket.
    """
    return AnalyticsOut(**tracker.analytics().as_dict())
