import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from taskflow.auth import get_current_user
from taskflow.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from taskflow.database import get_db
from taskflow.schemas import (
    TaskCreate, TaskUpdate, TaskStatusUpdate, TaskMove, CommentCreate, BulkUpdate,
    TaskStatus, TaskPriority,
)
from taskflow.services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tasks", tags=["Tasks"])


def _pagination(page: int, limit: int, total: int) -> dict:
    return {
        "current": page,
        "pages": (total + limit - 1) // limit,
        "total": total,
        "limit": limit,
    }


@router.get("")
async def list_tasks(
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sortBy: str = "createdAt",
    sortOrder: Literal["asc", "desc"] = "desc",
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        tasks, total = TaskService.get_all(db, user_id, {
            "status": status,
            "priority": priority,
            "search": search,
            "page": page,
            "limit": limit,
            "sort_by": sortBy,
            "sort_order": sortOrder,
        })
        return {"tasks": [t.to_dict() for t in tasks], "pagination": _pagination(page, limit, total)}
    except Exception as e:
        logger.error(f"Get tasks error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch tasks")


@router.get("/kanban")
async def kanban(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Tasks grouped by status column, each column in display order."""
    try:
        columns = TaskService.get_kanban(db, user_id)
        return {status: [t.to_dict() for t in tasks] for status, tasks in columns.items()}
    except Exception as e:
        logger.error(f"Get kanban data error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch kanban data")


@router.post("/bulk-update")
async def bulk_update(body: BulkUpdate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Reorder many tasks at once (drag-and-drop of a whole column)."""
    try:
        updated = TaskService.bulk_update(db, user_id, [item.model_dump() for item in body.tasks])
        return {"message": "Tasks updated successfully", "updated": updated}
    except Exception as e:
        logger.error(f"Bulk update error: {e}")
        raise HTTPException(status_code=500, detail="Failed to update tasks")


@router.get("/{task_id}")
async def get_task(task_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        task = TaskService.get_by_id(db, user_id, task_id)
    except Exception as e:
        logger.error(f"Get task error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch task")
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task.to_dict()


@router.post("", status_code=201)
async def create_task(task_data: TaskCreate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        task = TaskService.create(db, user_id, task_data.model_dump())
        return {"message": "Task created successfully", "task": task.to_dict()}
    except Exception as e:
        logger.error(f"Create task error: {e}")
        raise HTTPException(status_code=500, detail="Failed to create task")


@router.put("/{task_id}")
async def update_task(task_id: int, task_data: TaskUpdate, user_id: int = Depends(get_current_user),
                      db: Session = Depends(get_db)):
    try:
        task = TaskService.update(db, user_id, task_id, task_data.model_dump(exclude_unset=True))
    except Exception as e:
        logger.error(f"Update task error: {e}")
        raise HTTPException(status_code=500, detail="Failed to update task")
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"message": "Task updated successfully", "task": task.to_dict()}


@router.patch("/{task_id}/status")
async def update_task_status(task_id: int, body: TaskStatusUpdate, user_id: int = Depends(get_current_user),
                             db: Session = Depends(get_db)):
    try:
        task = TaskService.update_status(db, user_id, task_id, body.status, body.position)
    except Exception as e:
        logger.error(f"Update task status error: {e}")
        raise HTTPException(status_code=500, detail="Failed to update task status")
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"message": "Task status updated successfully", "task": task.to_dict()}


@router.patch("/{task_id}/move")
async def move_task(task_id: int, body: TaskMove, user_id: int = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    """Drag-and-drop target: set the task's column and its position in it."""
    try:
        task = TaskService.move(db, user_id, task_id, body.status, body.order)
    except Exception as e:
        logger.error(f"Move task error: {e}")
        raise HTTPException(status_code=500, detail="Failed to move task")
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"message": "Task moved successfully", "task": task.to_dict()}


@router.post("/{task_id}/comments")
async def add_comment(task_id: int, body: CommentCreate, user_id: int = Depends(get_current_user),
                      db: Session = Depends(get_db)):
    try:
        task = TaskService.add_comment(db, user_id, task_id, body.text)
    except Exception as e:
        logger.error(f"Add comment error: {e}")
        raise HTTPException(status_code=500, detail="Failed to add comment")
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"message": "Comment added successfully", "task": task.to_dict()}


@router.delete("/{task_id}")
async def delete_task(task_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Soft delete: the task is archived, never removed."""
    try:
        archived = TaskService.archive(db, user_id, task_id)
    except Exception as e:
        logger.error(f"Delete task error: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete task")
    if not archived:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"message": "Task archived successfully"}
