"""FastAPI application for location-verified attendance."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# local modules (same folder as main.py inside the container)
from metrics import router as metrics_router
from live import router as live_router

from db import init_db
from errors import InvalidArgument
from logging_config import configure_logging
from settings import settings
from sessions.routes import router as sessions_router
from attendance.routes import router as attendance_router
from rosters.routes import router as rosters_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    init_db()
    logger.info("Attendance API ready (overlap strategy: %s)", settings.overlap_strategy)
    yield


app = FastAPI(
    title="Geo Attendance",
    description="Location-verified attendance sessions and check-ins",
    version="1.0.0",
    lifespan=lifespan,
)

# Observability & live stream
app.include_router(metrics_router)  # exposes GET /metrics
app.include_router(live_router)  # exposes GET /stream/sessions/{code}/attendance

# Functional routers
app.include_router(sessions_router)
app.include_router(attendance_router)
app.include_router(rosters_router)


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# --------------------
# Root
# --------------------
@app.get("/")
async def root():
    return {"message": "Geo attendance API", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
