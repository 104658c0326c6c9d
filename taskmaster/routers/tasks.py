from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from taskmaster.core.clock import Clock, get_clock
from taskmaster.core.database import get_db
from taskmaster.core.errors import NotFoundError, StoreError, ValidationError
from taskmaster.schemas.task import TaskCreate, TaskUpdate, TaskResponse, AnalyticsResponse
from taskmaster.services import task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])
analytics_router = APIRouter(tags=["analytics"])


def raise_http(exc: Exception):
    """Traduit une erreur métier en HTTPException"""
    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    try:
        return task_service.list_tasks(db, user_id, clock.now())
    except (ValidationError, StoreError) as exc:
        raise_http(exc)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    try:
        return task_service.create_task(db, task_data.model_dump(), clock.now())
    except (ValidationError, StoreError) as exc:
        raise_http(exc)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    try:
        return task_service.get_task(db, task_id, user_id)
    except (ValidationError, NotFoundError) as exc:
        raise_http(exc)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    update_data = task_data.model_dump(exclude_unset=True)
    user_id = update_data.pop("user_id")
    try:
        return task_service.update_task(db, task_id, user_id, update_data, clock.now())
    except (ValidationError, NotFoundError, StoreError) as exc:
        raise_http(exc)


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    try:
        task_service.delete_task(db, task_id, user_id)
    except (ValidationError, NotFoundError, StoreError) as exc:
        raise_http(exc)
    return {"message": "Task deleted"}


@analytics_router.get("/analytics", response_model=AnalyticsResponse)
def analytics(
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    try:
        return task_service.get_analytics(db, user_id, clock.now())
    except (ValidationError, StoreError) as exc:
        raise_http(exc)
