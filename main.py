"""FastAPI entrypoint -- Employee Records Service."""

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.BoundLogger,
    logger_factory=structlog.PrintLoggerFactory(),
)

load_dotenv(Path(__file__).resolve().parent / ".env")

from config import DATABASE_URL, UPLOAD_DIR, UPLOAD_URL_PREFIX
from db import init_db
from routers import employees, health
from settings import settings

logger = structlog.get_logger("hr.startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not DATABASE_URL:
        logger.warning("DATABASE_URL not set -- store calls will fail")
    init_db()
    yield


app = FastAPI(title="Employee Records Service", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
)

app.include_router(health.router)
app.include_router(employees.router, prefix="/employees")

# StaticFiles refuses to mount a missing directory.
UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=UPLOAD_DIR), name="uploads")


@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/docs")
