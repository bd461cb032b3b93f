# liftlog/deps/services.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from liftlog.cache.store import CacheStore
from liftlog.db import get_db
from liftlog.services.stats_service import StatsService
from liftlog.services.workout_service import WorkoutService

def get_cache(request: Request) -> CacheStore:
    """The store built with the app in liftlog.main; tests override this."""
    return request.app.state.cache

def get_workout_service(db: Session = Depends(get_db), cache: CacheStore = Depends(get_cache)) -> WorkoutService:
    return WorkoutService(db, cache)

def get_stats_service(db: Session = Depends(get_db), cache: CacheStore = Depends(get_cache)) -> StatsService:
    return StatsService(db, cache)
