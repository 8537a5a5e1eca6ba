# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from taskflow.models.user import User
from taskflow.models.task import Task
from taskflow.models.todo import Todo

__all__ = [
    "User",
    "Task",
    "Todo",
]
