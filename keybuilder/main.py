"""FastAPI application entry point: logging, CORS, error handlers and API routers."""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from keybuilder.config import settings
from keybuilder.database import Base, engine
from keybuilder.exceptions import KeyBuilderError
import keybuilder.models  # noqa: F401 - registers tables on Base.metadata
from keybuilder.routers import (
    auth, keys, revisions, taxa, characters, media,
    groups, collections, organizations, workgroups, editors,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Key Builder API",
    description="Editor backend for interactive identification keys",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KeyBuilderError)
async def domain_error_handler(request: Request, exc: KeyBuilderError):
    if exc.status_code >= 500:
        logger.error("[%s] %s %s failed: %s", _route_name(request), request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": "Internal server error"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message or None})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("[%s] %s %s failed", _route_name(request), request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _route_name(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "name", None) or "unknown"


# Register all routers
app.include_router(auth.router)
app.include_router(keys.router)
app.include_router(revisions.router)
app.include_router(taxa.router)
app.include_router(characters.router)
app.include_router(media.router)
app.include_router(groups.router)
app.include_router(collections.router)
app.include_router(organizations.router)
app.include_router(workgroups.router)
app.include_router(editors.router)


@app.on_event("startup")
def ensure_schema():
    Base.metadata.create_all(bind=engine)
    os.makedirs(settings.MEDIA_PATH, exist_ok=True)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Key Builder API"}
