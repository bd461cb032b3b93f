# liftlog/repositories/base.py
from __future__ import annotations
from contextlib import contextmanager
from typing import Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from liftlog.errors import StoreError

T = TypeVar("T")  # SQLAlchemy model type

class BaseRepository(Generic[T]):
    """Lightweight base for repositories using SQLAlchemy 2.0 style."""
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def store_errors(self, what: str):
        """Roll back and re-raise driver/ORM failures as StoreError."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"{what}: {e}") from e

    def add_and_refresh(self, entity: T) -> T:
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity
