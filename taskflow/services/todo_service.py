"""
todo_service.py — Todo list management
CRUD, completion toggling and per-user statistics for Todos.
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import or_, desc, asc, func

from taskflow.models.fields import like_pattern
from taskflow.models.todo import Todo
from taskflow.services.analytics_service import completion_rate

REQUIRED_FIELDS = ("title", "priority", "category")

SORT_FIELDS = {
    "createdAt": Todo.created_at,
    "updatedAt": Todo.updated_at,
    "dueDate": Todo.due_date,
    "priority": Todo.priority,
    "category": Todo.category,
    "title": Todo.title,
    "order": Todo.order,
}


class TodoService:
    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> Todo:
        try:
            count = db.query(Todo).filter_by(user_id=user_id, is_archived=False).count()
            todo = Todo(
                user_id=user_id,
                title=data.get("title"),
                description=data.get("description"),
                priority=data.get("priority") or "medium",
                category=data.get("category") or "personal",
                due_date=data.get("due_date"),
                order=count,
                completed=False,
                is_archived=False,
            )
            db.add(todo)
            db.commit()
            db.refresh(todo)
            return todo
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def get_all(db: Session, user_id: int, filters: dict | None = None) -> tuple[list[Todo], int]:
        filters = filters or {}
        query = db.query(Todo).filter(Todo.user_id == user_id, Todo.is_archived == False)  # noqa: E712

        if filters.get("completed") is not None:
            query = query.filter(Todo.completed == filters["completed"])
        if filters.get("category"):
            query = query.filter(Todo.category == filters["category"])
        if filters.get("priority"):
            query = query.filter(Todo.priority == filters["priority"])
        if filters.get("search"):
            pattern = like_pattern(filters["search"])
            query = query.filter(or_(
                Todo.title.ilike(pattern, escape="\\"),
                Todo.description.ilike(pattern, escape="\\"),
            ))

        total = query.count()

        column = SORT_FIELDS.get(filters.get("sort_by") or "createdAt", Todo.created_at)
        direction = asc if filters.get("sort_order") == "asc" else desc
        query = query.order_by(direction(column), direction(Todo.id))

        page = filters.get("page", 1)
        limit = filters.get("limit", 20)
        return query.offset((page - 1) * limit).limit(limit).all(), total

    @staticmethod
    def get_by_id(db: Session, user_id: int, todo_id: int) -> Todo | None:
        return db.query(Todo).filter_by(id=todo_id, user_id=user_id, is_archived=False).first()

    @staticmethod
    def update(db: Session, user_id: int, todo_id: int, data: dict) -> Todo | None:
        try:
            todo = TodoService.get_by_id(db, user_id, todo_id)
            if not todo:
                return None
            for key, value in data.items():
                if value is None and key in REQUIRED_FIELDS:
                    continue
                if hasattr(todo, key):
                    setattr(todo, key, value)
            db.commit()
            db.refresh(todo)
            return todo
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def set_completed(db: Session, user_id: int, todo_id: int, completed: bool | None = None) -> Todo | None:
        """Mark complete/incomplete; completed=None flips the current state."""
        try:
            todo = TodoService.get_by_id(db, user_id, todo_id)
            if not todo:
                return None
            if completed is None:
                todo.toggle()
            else:
                todo.set_completed(completed)
            db.commit()
            db.refresh(todo)
            return todo
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def archive(db: Session, user_id: int, todo_id: int) -> bool:
        try:
            todo = TodoService.get_by_id(db, user_id, todo_id)
            if not todo:
                return False
            todo.is_archived = True
            db.commit()
            return True
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def get_stats(db: Session, user_id: int) -> dict:
        """Totals, completion rate and category/priority breakdowns."""
        base = db.query(Todo).filter(Todo.user_id == user_id, Todo.is_archived == False)  # noqa: E712
        total = base.count()
        completed = base.filter(Todo.completed == True).count()  # noqa: E712

        def counts(field):
            rows = db.query(field, func.count(Todo.id)).filter(
                Todo.user_id == user_id, Todo.is_archived == False  # noqa: E712
            ).group_by(field).all()
            return [{"value": value, "count": count} for value, count in rows]

        return {
            "total": total,
            "completed": completed,
            "pending": total - completed,
            "completionRate": completion_rate(completed, total),
            "categoryStats": counts(Todo.category),
            "priorityStats": counts(Todo.priority),
        }
