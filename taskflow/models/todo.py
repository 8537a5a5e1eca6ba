from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index

from taskflow.database import Base
from taskflow.models.fields import utcnow, iso


class Todo(Base):
    __tablename__ = "todos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)  # assignee
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    completed = Column(Boolean, default=False, nullable=False)
    priority = Column(String(20), default="medium", nullable=False)  # low/medium/high
    category = Column(String(20), default="personal", nullable=False)  # personal/work/shopping/health/other
    order = Column("position", Integer, default=0, nullable=False)
    due_date = Column(DateTime, nullable=True)
    is_archived = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_todos_owner_completed", "user_id", "completed"),
        Index("ix_todos_created", "created_at"),
    )

    def set_completed(self, completed: bool, now=None):
        self.completed = completed
        self.completed_at = (now or utcnow()) if completed else None

    def toggle(self, now=None):
        self.set_completed(not self.completed, now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": bool(self.completed),
            "priority": self.priority,
            "category": self.category,
            "assignee": self.user_id,
            "order": self.order,
            "dueDate": iso(self.due_date),
            "isArchived": bool(self.is_archived),
            "completedAt": iso(self.completed_at),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
