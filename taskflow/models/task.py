from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Float, ForeignKey, Index

from taskflow.database import Base
from taskflow.models.fields import utcnow, iso, load_list, dump_list


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)  # assignee
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="backlog", nullable=False)  # backlog/in-progress/in-review/done
    priority = Column(String(20), default="medium", nullable=False)  # low/medium/high/urgent
    order = Column("position", Integer, default=0, nullable=False)  # position within the status column
    tags = Column(Text, nullable=True)  # JSON array string
    comments = Column(Text, nullable=True)  # JSON array of {text, author, createdAt}
    due_date = Column(DateTime, nullable=True)
    estimated_hours = Column(Float, nullable=True)
    actual_hours = Column(Float, default=0)
    is_archived = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_tasks_owner_status", "user_id", "status", "position"),
        Index("ix_tasks_created", "created_at"),
    )

    def set_status(self, status: str, now=None):
        """Change status; entering done stamps completed_at, leaving it clears it."""
        self.status = status
        if status == "done":
            if not self.completed_at:
                self.completed_at = now or utcnow()
        else:
            self.completed_at = None

    def add_comment(self, text: str, author_id: int, now=None):
        comments = load_list(self.comments)
        comments.append({"text": text, "author": author_id, "createdAt": iso(now or utcnow())})
        self.comments = dump_list(comments)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "assignee": self.user_id,
            "tags": load_list(self.tags),
            "order": self.order,
            "dueDate": iso(self.due_date),
            "estimatedHours": self.estimated_hours,
            "actualHours": self.actual_hours or 0,
            "comments": load_list(self.comments),
            "isArchived": bool(self.is_archived),
            "completedAt": iso(self.completed_at),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
