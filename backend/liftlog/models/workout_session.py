from datetime import datetime, timezone
from enum import Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, DateTime, String, Index
from liftlog.db import Base

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class WorkoutStatus(str, Enum):
    active = "active"
    completed = "completed"

class WorkoutSession(Base):
    __tablename__ = "workout_sessions"
    __table_args__ = (
        Index("ix_workout_sessions_user_status_started", "user_id", "status", "started_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # users live in the identity service; no FK
    user_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=WorkoutStatus.active.value)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    exercises = relationship(
        "Exercise",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="Exercise.order_index",
    )
