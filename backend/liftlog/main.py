# liftlog/main.py
import os
import time
import logging
import uuid
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from liftlog.cache.store import CacheStore, build_cache_store
from liftlog.deps.services import get_cache
from liftlog.errors import AppError, InvalidInput
from liftlog.routers.workouts import router as workouts_router
from liftlog.routers.exercises import router as exercises_router
from liftlog.routers.stats import router as stats_router
from liftlog.db import SessionLocal  # for healthz DB check
from liftlog.settings import get_settings

settings = get_settings()
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("uvicorn")

app = FastAPI(
    title="LiftLog API",
    openapi_tags=[
        {"name": "workouts", "description": "Workout session lifecycle"},
        {"name": "exercises", "description": "Exercises and sets within an active workout"},
        {"name": "stats", "description": "Personal records, history, weekly summary, progress"},
    ],
)

# One store per app, handed to services through get_cache
app.state.cache = build_cache_store(settings)


# CORS (relax for local dev; tighten origins in prod via env)
ALLOW_ORIGINS = settings.ALLOW_ORIGINS.split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = req_id
    log.info("rid=%s %s %s -> %s in %.1fms",
             req_id, request.method, request.url.path, response.status_code, duration_ms)
    return response

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.code, "message": exc.message}},
    )

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # same envelope as service errors; first failure only, "body.sets.0.reps: ..."
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()))
    message = first.get("msg", "").removeprefix("Value error, ")
    return await app_error_handler(request, InvalidInput(f"{field}: {message}" if field else message or None))

@app.get("/")
def root():
    return {"ok": True, "name": "LiftLog API"}

@app.get("/ping")
def ping():
    return {"pong": True}

@app.get("/healthz")
def healthz(cache: CacheStore = Depends(get_cache)):
    # Quick DB + cache sanity check
    checks = {}
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"
    try:
        cache.ping()
        checks["cache"] = "ok"
    except AppError as e:
        checks["cache"] = f"error: {e.message}"
    status = "ok" if all(v == "ok" for v in checks.values()) else "degraded"
    return {"status": status, "checks": checks}

@app.get("/version")
def version():
    return {"version": os.getenv("API_VERSION", "dev")}

# Routers
app.include_router(workouts_router)
app.include_router(exercises_router)
app.include_router(stats_router)
