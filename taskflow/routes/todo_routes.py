import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from taskflow.auth import get_current_user
from taskflow.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from taskflow.database import get_db
from taskflow.schemas import TodoCreate, TodoUpdate, TodoCategory, TodoPriority
from taskflow.services.todo_service import TodoService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/todos", tags=["Todos"])


@router.get("")
async def list_todos(
    completed: Optional[bool] = None,
    category: Optional[TodoCategory] = None,
    priority: Optional[TodoPriority] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sortBy: str = "createdAt",
    sortOrder: Literal["asc", "desc"] = "desc",
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        todos, total = TodoService.get_all(db, user_id, {
            "completed": completed,
            "category": category,
            "priority": priority,
            "search": search,
            "page": page,
            "limit": limit,
            "sort_by": sortBy,
            "sort_order": sortOrder,
        })
        return {
            "todos": [t.to_dict() for t in todos],
            "pagination": {
                "current": page,
                "pages": (total + limit - 1) // limit,
                "total": total,
                "limit": limit,
            },
        }
    except Exception as e:
        logger.error(f"Get todos error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch todos")


@router.get("/stats")
async def todo_stats(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return TodoService.get_stats(db, user_id)
    except Exception as e:
        logger.error(f"Get todo stats error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch todo statistics")


@router.get("/{todo_id}")
async def get_todo(todo_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    todo = TodoService.get_by_id(db, user_id, todo_id)
    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found")
    return todo.to_dict()


@router.post("", status_code=201)
async def create_todo(todo_data: TodoCreate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        todo = TodoService.create(db, user_id, todo_data.model_dump())
        return {"message": "Todo created successfully", "todo": todo.to_dict()}
    except Exception as e:
        logger.error(f"Create todo error: {e}")
        raise HTTPException(status_code=500, detail="Failed to create todo")


@router.put("/{todo_id}")
async def update_todo(todo_id: int, todo_data: TodoUpdate, user_id: int = Depends(get_current_user),
                      db: Session = Depends(get_db)):
    try:
        todo = TodoService.update(db, user_id, todo_id, todo_data.model_dump(exclude_unset=True))
    except Exception as e:
        logger.error(f"Update todo error: {e}")
        raise HTTPException(status_code=500, detail="Failed to update todo")
    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found")
    return {"message": "Todo updated successfully", "todo": todo.to_dict()}


async def _set_completed(db: Session, user_id: int, todo_id: int, completed: bool | None) -> dict:
    try:
        todo = TodoService.set_completed(db, user_id, todo_id, completed)
    except Exception as e:
        logger.error(f"Toggle todo error: {e}")
        raise HTTPException(status_code=500, detail="Failed to update todo")
    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found")
    message = "Todo completed" if todo.completed else "Todo marked as incomplete"
    return {"message": message, "todo": todo.to_dict()}


@router.patch("/{todo_id}/toggle")
async def toggle_todo(todo_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return await _set_completed(db, user_id, todo_id, None)


@router.patch("/{todo_id}/complete")
async def complete_todo(todo_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return await _set_completed(db, user_id, todo_id, True)


@router.patch("/{todo_id}/incomplete")
async def incomplete_todo(todo_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return await _set_completed(db, user_id, todo_id, False)


@router.delete("/{todo_id}")
async def delete_todo(todo_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Soft delete by archiving."""
    try:
        archived = TodoService.archive(db, user_id, todo_id)
    except Exception as e:
        logger.error(f"Delete todo error: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete todo")
    if not archived:
        raise HTTPException(status_code=404, detail="Todo not found")
    return {"message": "Todo archived successfully"}
