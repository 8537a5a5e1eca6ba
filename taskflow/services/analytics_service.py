"""
analytics_service.py — Dashboard statistics
Buckets tasks and todos by calendar day (UTC, the convention the store uses
for timestamps), counts them by status/priority and derives completion rates.
Read-only: nothing in here mutates the store.
"""

from datetime import datetime, timedelta

from sqlalchemy.orm import Session
from sqlalchemy import func, case, extract, asc, desc

from taskflow.models.task import Task
from taskflow.models.todo import Todo
from taskflow.models.fields import utcnow
from taskflow.schemas import TASK_STATUSES

PERIOD_DAYS = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "1y": 365,
}
DEFAULT_PERIOD_DAYS = 30


def days_for_period(period: str | None) -> int:
    """Lookback window in days for a period token; unknown tokens mean 30."""
    return PERIOD_DAYS.get(period, DEFAULT_PERIOD_DAYS)


def completion_rate(completed: int, total: int) -> float:
    """completed / total as a percentage, 2 dp. Zero when there is nothing to complete."""
    if total <= 0:
        return 0
    return round(completed / total * 100, 2)


def _day_key(bucket: dict) -> tuple[int, int, int]:
    return bucket["year"], bucket["month"], bucket["day"]


def make_bucket(year: int, month: int, day: int, created: int = 0, completed: int = 0) -> dict:
    return {
        "year": int(year),
        "month": int(month),
        "day": int(day),
        "date": f"{int(year):04d}-{int(month):02d}-{int(day):02d}",
        "created": int(created or 0),
        "completed": int(completed or 0),
    }


def merge_daily(task_days: list[dict], todo_days: list[dict]) -> list[dict]:
    """
    Join task and todo buckets on (year, month, day).
    A day missing from either side gets zeros for that side's fields.
    """
    merged: dict[tuple, dict] = {}
    for bucket in task_days:
        key = _day_key(bucket)
        merged[key] = {**make_bucket(*key, bucket["created"], bucket["completed"]),
                       "todoCreated": 0, "todoCompleted": 0}
    for bucket in todo_days:
        key = _day_key(bucket)
        entry = merged.setdefault(key, {**make_bucket(*key), "todoCreated": 0, "todoCompleted": 0})
        entry["todoCreated"] = bucket["created"]
        entry["todoCompleted"] = bucket["completed"]
    return [merged[key] for key in sorted(merged)]


class AnalyticsService:

    @staticmethod
    def _completed_flag(model):
        return Task.status == "done" if model is Task else Todo.completed == True  # noqa: E712

    @staticmethod
    def daily_buckets(db: Session, model, user_id: int, since: datetime, until: datetime | None = None,
                      field: str = "created_at") -> list[dict]:
        """
        GROUP BY calendar day of `field` with a created count and a
        conditional SUM of completed records, oldest day first.
        """
        column = getattr(model, field)
        year = extract("year", column)
        month = extract("month", column)
        day = extract("day", column)

        query = db.query(
            year.label("year"),
            month.label("month"),
            day.label("day"),
            func.count(model.id).label("created"),
            func.sum(case((AnalyticsService._completed_flag(model), 1), else_=0)).label("completed"),
        ).filter(
            model.user_id == user_id,
            model.is_archived == False,  # noqa: E712
            column >= since,
        )
        if until is not None:
            query = query.filter(column <= until)

        rows = query.group_by(year, month, day).order_by(asc(year), asc(month), asc(day)).all()
        return [make_bucket(r.year, r.month, r.day, r.created, r.completed) for r in rows]

    @staticmethod
    def count_by_field(db: Session, model, user_id: int, field: str) -> list[dict]:
        column = getattr(model, field)
        rows = db.query(column, func.count(model.id)).filter(
            model.user_id == user_id,
            model.is_archived == False,  # noqa: E712
        ).group_by(column).order_by(asc(column)).all()
        return [{"value": value, "count": count} for value, count in rows]

    @staticmethod
    def get_productivity(db: Session, user_id: int, period: str = "30d", type: str = "both",
                         now: datetime | None = None) -> dict:
        """Daily created/completed series for the requested window."""
        now = now or utcnow()
        since = now - timedelta(days=days_for_period(period))

        task_days = []
        todo_days = []
        if type in ("tasks", "both"):
            task_days = AnalyticsService.daily_buckets(db, Task, user_id, since, now)
        if type in ("todos", "both"):
            todo_days = AnalyticsService.daily_buckets(db, Todo, user_id, since, now)

        if type == "tasks":
            daily = task_days
        elif type == "todos":
            daily = todo_days
        else:
            daily = merge_daily(task_days, todo_days)

        return {"period": period, "days": days_for_period(period), "daily": daily}

    @staticmethod
    def get_overview(db: Session, user_id: int, now: datetime | None = None) -> dict:
        """Central dashboard bundle: status counts, todo completion, recent items, 30 day productivity."""
        status_rows = db.query(Task.status, func.count(Task.id), func.sum(Task.actual_hours)).filter(
            Task.user_id == user_id, Task.is_archived == False  # noqa: E712
        ).group_by(Task.status).all()

        task_counts = {status: 0 for status in TASK_STATUSES}
        total_hours = 0.0
        for status, count, hours in status_rows:
            task_counts[status] = count
            total_hours += hours or 0

        todo_rows = db.query(Todo.completed, func.count(Todo.id)).filter(
            Todo.user_id == user_id, Todo.is_archived == False  # noqa: E712
        ).group_by(Todo.completed).all()

        todo_counts = {"completed": 0, "pending": 0}
        for completed, count in todo_rows:
            todo_counts["completed" if completed else "pending"] = count
        total_todos = todo_counts["completed"] + todo_counts["pending"]

        recent_tasks = db.query(Task).filter(
            Task.user_id == user_id, Task.is_archived == False  # noqa: E712
        ).order_by(desc(Task.updated_at), desc(Task.id)).limit(5).all()
        recent_todos = db.query(Todo).filter(
            Todo.user_id == user_id, Todo.is_archived == False  # noqa: E712
        ).order_by(desc(Todo.updated_at), desc(Todo.id)).limit(5).all()

        total_tasks = sum(task_counts.values())
        return {
            "tasks": {
                "counts": task_counts,
                "total": total_tasks,
                "totalHours": total_hours,
                "completionRate": completion_rate(task_counts["done"], total_tasks),
            },
            "todos": {
                "counts": todo_counts,
                "total": total_todos,
                "completionRate": completion_rate(todo_counts["completed"], total_todos),
            },
            "recent": {
                "tasks": [t.to_dict() for t in recent_tasks],
                "todos": [t.to_dict() for t in recent_todos],
            },
            "productivity": AnalyticsService.get_productivity(db, user_id, now=now),
        }

    @staticmethod
    def priority_distribution(db: Session, user_id: int) -> dict:
        return {
            "tasks": AnalyticsService.count_by_field(db, Task, user_id, "priority"),
            "todos": AnalyticsService.count_by_field(db, Todo, user_id, "priority"),
        }

    @staticmethod
    def completion_trends(db: Session, user_id: int, period: str = "30d", now: datetime | None = None) -> dict:
        """Completions per day, keyed on when the item was completed."""
        now = now or utcnow()
        since = now - timedelta(days=days_for_period(period))

        def series(model):
            buckets = AnalyticsService.daily_buckets(db, model, user_id, since, now, field="completed_at")
            return [{"year": b["year"], "month": b["month"], "day": b["day"], "date": b["date"],
                     "count": b["created"]} for b in buckets]

        return {"tasks": series(Task), "todos": series(Todo)}
