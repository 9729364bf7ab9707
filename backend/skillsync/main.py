import logging
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from skillsync.api.routes import catalog, collections, courses, meta, pathways, recommendations
from skillsync.core.config import settings
from skillsync.core.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    logger.info("Database tables ready")
    yield


app = FastAPI(title="SkillSync Career Pathways API", version="0.1.0", lifespan=lifespan)

origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-Id"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or uuid4().hex
    response = await call_next(request)
    response.headers["X-Request-Id"] = request_id
    return response


def _register_routes(prefix: str = "") -> None:
    app.include_router(recommendations.router, tags=["recommendations"], prefix=prefix)
    app.include_router(pathways.router, tags=["pathways"], prefix=prefix)
    app.include_router(courses.router, tags=["courses"], prefix=prefix)
    app.include_router(catalog.router, tags=["catalog"], prefix=prefix)
    app.include_router(collections.router, tags=["collections"], prefix=prefix)
    app.include_router(meta.router, tags=["meta"], prefix=prefix)


_register_routes("")
_register_routes("/api")
