"""
task_service.py — Task management
Handles CRUD for Tasks plus the Kanban operations: grouping by status,
moving a task between columns and keeping each column's order dense.
"""

import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import or_, desc, asc

from taskflow.models.task import Task
from taskflow.models.fields import dump_list, like_pattern
from taskflow.schemas import TASK_STATUSES

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "priority")

SORT_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    "priority": Task.priority,
    "status": Task.status,
    "title": Task.title,
    "order": Task.order,
}


class TaskService:
    # ------------------------------------------------------------------
    @staticmethod
    def _column(db: Session, user_id: int, status: str, exclude_id: int | None = None) -> list[Task]:
        """Non-archived tasks of one status column in display order."""
        query = db.query(Task).filter(
            Task.user_id == user_id,
            Task.status == status,
            Task.is_archived == False,  # noqa: E712
        )
        if exclude_id is not None:
            query = query.filter(Task.id != exclude_id)
        return query.order_by(asc(Task.order), asc(Task.created_at), asc(Task.id)).all()

    @staticmethod
    def _renumber(column: list[Task]):
        for position, task in enumerate(column):
            if task.order != position:
                task.order = position

    @staticmethod
    def _place(db: Session, user_id: int, task: Task, status: str, index: int | None = None):
        """Put task into `status` at `index` (end of column when None) and re-number both columns."""
        source_status = task.status
        dest = TaskService._column(db, user_id, status, exclude_id=task.id)
        if index is None:
            index = len(dest)
        index = max(0, min(index, len(dest)))
        dest.insert(index, task)
        task.set_status(status)
        TaskService._renumber(dest)
        if source_status != status:
            TaskService._renumber(TaskService._column(db, user_id, source_status, exclude_id=task.id))

    # ------------------------------------------------------------------
    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> Task:
        """Create a task at the end of its status column."""
        try:
            status = data.get("status") or "backlog"
            task = Task(
                user_id=user_id,
                title=data.get("title"),
                description=data.get("description"),
                priority=data.get("priority") or "medium",
                tags=dump_list(data.get("tags")),
                comments=dump_list([]),
                due_date=data.get("due_date"),
                estimated_hours=data.get("estimated_hours"),
                actual_hours=0,
                is_archived=False,
            )
            task.order = len(TaskService._column(db, user_id, status))
            task.set_status(status)
            db.add(task)
            db.commit()
            db.refresh(task)
            return task
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def get_all(db: Session, user_id: int, filters: dict | None = None) -> tuple[list[Task], int]:
        """Filtered, sorted, paginated query. Returns (page_items, total_matching)."""
        filters = filters or {}
        query = db.query(Task).filter(Task.user_id == user_id, Task.is_archived == False)  # noqa: E712

        if filters.get("status"):
            query = query.filter(Task.status == filters["status"])
        if filters.get("priority"):
            query = query.filter(Task.priority == filters["priority"])
        if filters.get("search"):
            pattern = like_pattern(filters["search"])
            query = query.filter(or_(
                Task.title.ilike(pattern, escape="\\"),
                Task.description.ilike(pattern, escape="\\"),
                Task.tags.ilike(pattern, escape="\\"),
            ))

        total = query.count()

        column = SORT_FIELDS.get(filters.get("sort_by") or "createdAt", Task.created_at)
        direction = asc if filters.get("sort_order") == "asc" else desc
        query = query.order_by(direction(column), direction(Task.id))

        page = filters.get("page", 1)
        limit = filters.get("limit", 20)
        items = query.offset((page - 1) * limit).limit(limit).all()
        return items, total

    @staticmethod
    def get_kanban(db: Session, user_id: int) -> dict[str, list[Task]]:
        """All non-archived tasks grouped into the four status columns."""
        return {status: TaskService._column(db, user_id, status) for status in TASK_STATUSES}

    @staticmethod
    def get_by_id(db: Session, user_id: int, task_id: int) -> Task | None:
        return db.query(Task).filter_by(id=task_id, user_id=user_id, is_archived=False).first()

    @staticmethod
    def update(db: Session, user_id: int, task_id: int, data: dict) -> Task | None:
        """Update fields; a status change sends the task to the end of its new column."""
        try:
            task = TaskService.get_by_id(db, user_id, task_id)
            if not task:
                return None

            new_status = data.pop("status", None)
            for key, value in data.items():
                if value is None and key in REQUIRED_FIELDS:
                    continue
                if hasattr(task, key):
                    if key == "tags":
                        setattr(task, key, dump_list(value))
                    else:
                        setattr(task, key, value)

            if new_status and new_status != task.status:
                TaskService._place(db, user_id, task, new_status)

            db.commit()
            db.refresh(task)
            return task
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def update_status(db: Session, user_id: int, task_id: int, status: str, position: int | None = None) -> Task | None:
        """Status-only update. Without a position the task lands at the end of the column."""
        if position is not None:
            return TaskService.move(db, user_id, task_id, status, position)
        try:
            task = TaskService.get_by_id(db, user_id, task_id)
            if not task:
                return None
            if task.status != status:
                TaskService._place(db, user_id, task, status)
            db.commit()
            db.refresh(task)
            return task
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def move(db: Session, user_id: int, task_id: int, status: str, order: int) -> Task | None:
        """Drag-and-drop move: put the task at `order` (clamped) in the `status` column."""
        try:
            task = TaskService.get_by_id(db, user_id, task_id)
            if not task:
                return None
            TaskService._place(db, user_id, task, status, order)
            db.commit()
            db.refresh(task)
            logger.info("Moved task %s to %s[%s]", task.id, task.status, task.order)
            return task
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def bulk_update(db: Session, user_id: int, items: list[dict]) -> int:
        """
        Apply a batch of {id, status, order} assignments sent by the board,
        then re-number every touched column so orders stay 0..n-1.
        Ids that are unknown or owned by someone else are skipped.
        """
        try:
            touched = set()
            updated = 0
            for item in items:
                task = TaskService.get_by_id(db, user_id, item["id"])
                if not task:
                    continue
                touched.add(task.status)
                task.set_status(item["status"])
                task.order = item["order"]
                touched.add(task.status)
                updated += 1

            db.flush()
            for status in touched:
                TaskService._renumber(TaskService._column(db, user_id, status))

            db.commit()
            return updated
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def add_comment(db: Session, user_id: int, task_id: int, text: str) -> Task | None:
        try:
            task = TaskService.get_by_id(db, user_id, task_id)
            if not task:
                return None
            task.add_comment(text, user_id)
            db.commit()
            db.refresh(task)
            return task
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def archive(db: Session, user_id: int, task_id: int) -> bool:
        """Soft delete: hide the task and close the gap it leaves in its column."""
        try:
            task = TaskService.get_by_id(db, user_id, task_id)
            if not task:
                return False
            task.is_archived = True
            TaskService._renumber(TaskService._column(db, user_id, task.status, exclude_id=task.id))
            db.commit()
            return True
        except SQLAlchemyError:
            db.rollback()
            raise
