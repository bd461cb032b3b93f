"""
Point the app at an in-memory sqlite database and the memory cache before
anything from liftlog is imported, then give every test fresh tables and a
fresh cache.
"""
import os

os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["CACHE_BACKEND"] = "memory"

import pytest
from fastapi.testclient import TestClient

from liftlog.cache.store import MemoryCacheStore
from liftlog.db import Base, SessionLocal, engine
from liftlog.deps.services import get_cache
from liftlog.main import app
from liftlog.security import create_access_token
from liftlog.services.stats_service import StatsService
from liftlog.services.workout_service import WorkoutService


@pytest.fixture(autouse=True)
def _tables():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def cache():
    store = MemoryCacheStore()
    app.dependency_overrides[get_cache] = lambda: store
    yield store
    app.dependency_overrides.pop(get_cache, None)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def workouts(db, cache):
    return WorkoutService(db, cache)


@pytest.fixture
def stats(db, cache):
    return StatsService(db, cache)


@pytest.fixture
def client(cache):
    return TestClient(app)


@pytest.fixture
def auth():
    def headers(user_id: int) -> dict:
        return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}
    return headers
