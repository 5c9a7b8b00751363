# rollcall/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import text

from rollcall.config import get_settings
from rollcall.db.session import engine
from rollcall.logging_config import get_logger
from rollcall.models import Base
from rollcall.routers import candidate_events, participants, scheduler

settings = get_settings()
logger = get_logger(__name__, "api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Routers
app.include_router(participants.router)
app.include_router(candidate_events.router)
app.include_router(scheduler.router)


@app.get("/health")
def health_check():
    db_status = "ok"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database health check failed")
        db_status = "error"

    return {
        "status": "ok" if db_status == "ok" else "degraded",
        "app": settings.APP_NAME,
        "env": settings.ENV,
        "database": db_status,
    }
