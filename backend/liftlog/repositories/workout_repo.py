from __future__ import annotations
from typing import Optional
from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload
from liftlog.errors import Conflict, NotFound
from liftlog.models import Exercise, WorkoutSession, WorkoutStatus
from liftlog.models.workout_session import utcnow
from liftlog.repositories.base import BaseRepository

def _with_tree(stmt):
    return stmt.options(selectinload(WorkoutSession.exercises).selectinload(Exercise.sets))

class WorkoutRepository(BaseRepository[WorkoutSession]):
    def __init__(self, db: Session):
        super().__init__(db)

    # READS
    def get_session_by_id(self, session_id: int) -> WorkoutSession:
        with self.store_errors("get_session_by_id"):
            stmt = _with_tree(select(WorkoutSession).where(WorkoutSession.id == session_id))
            sess = self.db.execute(stmt).scalar_one_or_none()
        if sess is None:
            raise NotFound("Workout not found")
        return sess

    def get_active_session_for_user(self, user_id: int) -> Optional[WorkoutSession]:
        # most recently started wins if several are active
        stmt = _with_tree(
            select(WorkoutSession)
            .where(WorkoutSession.user_id == user_id, WorkoutSession.status == WorkoutStatus.active.value)
            .order_by(WorkoutSession.started_at.desc(), WorkoutSession.id.desc())
            .limit(1)
        )
        with self.store_errors("get_active_session_for_user"):
            return self.db.execute(stmt).scalar_one_or_none()

    # WRITES
    def create_session(self, user_id: int, *, name: str) -> WorkoutSession:
        sess = WorkoutSession(user_id=user_id, name=name, status=WorkoutStatus.active.value)
        with self.store_errors("create_session"):
            return self.add_and_refresh(sess)

    def complete_session(self, session_id: int, *, user_id: int) -> None:
        """Flip an active session to completed; Conflict when nothing matched."""
        now = utcnow()
        stmt = (
            update(WorkoutSession)
            .where(
                WorkoutSession.id == session_id,
                WorkoutSession.user_id == user_id,
                WorkoutSession.status == WorkoutStatus.active.value,
            )
            .values(status=WorkoutStatus.completed.value, completed_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        with self.store_errors("complete_session"):
            result = self.db.execute(stmt)
            self.db.commit()
        if result.rowcount == 0:
            raise Conflict("Workout not found or already completed")

    def delete_session(self, session_id: int) -> None:
        sess = self.get_session_by_id(session_id)
        with self.store_errors("delete_session"):
            # ORM cascade removes exercises and sets in the same transaction
            self.db.delete(sess)
            self.db.commit()
