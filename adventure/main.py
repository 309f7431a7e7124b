import logging
import os

import redis
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adventure.api.routes import api_router, router
from adventure.assets.startup import init_manifest_for_app
from adventure.errors import SessionBusy, SessionCompleted, SessionNotFound

app = FastAPI(title="adventure-path", version="0.1.0")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(router)
app.include_router(api_router)
# Configure logging
logging.basicConfig(level=os.environ.get("ADVENTURE_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    init_manifest_for_app()


@app.exception_handler(SessionNotFound)
async def _session_not_found(request: Request, exc: SessionNotFound) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Session not found"})


@app.exception_handler(SessionCompleted)
async def _session_completed(request: Request, exc: SessionCompleted) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"error": str(exc)})


@app.exception_handler(SessionBusy)
async def _session_busy(request: Request, exc: SessionBusy) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"error": str(exc)})


@app.exception_handler(redis.RedisError)
async def _store_unavailable(request: Request, exc: redis.RedisError) -> JSONResponse:
    logger.error("Session store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"error": "Session store unavailable"})


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "adventure-path", "version": "0.1.0"}
