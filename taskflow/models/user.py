from sqlalchemy import Column, Integer, String, DateTime

from taskflow.database import Base
from taskflow.models.fields import utcnow, iso


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    name = Column(String(100), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name or self.username,
            "createdAt": iso(self.created_at),
        }
