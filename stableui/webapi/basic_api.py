"""Basic API surface: status, session creation, administrative stop."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from fastapi import APIRouter, FastAPI, HTTPException, Request, status

from stableui.core.errors import StableUIError
from stableui.webapi.models import SessionResponse, ShutdownResponse, StatusResponse

if TYPE_CHECKING:
    from stableui.runtime.lifecycle import BootstrapContext


router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


def _ctx(request: Request) -> BootstrapContext:
    return request.app.state.ctx


@router.get("/status", response_model=StatusResponse)
async def get_status(request: Request) -> StatusResponse:
    ctx = _ctx(request)
    return StatusResponse(
        environment=ctx.config.environment.value,
        bind_url=ctx.config.bind_url,
        backends=len(ctx.backends.backends) if ctx.backends is not None else 0,
        sessions=len(ctx.sessions) if ctx.sessions is not None else 0,
        shutting_down=ctx.cancel.cancelled,
    )


@router.post("/sessions", response_model=SessionResponse)
async def create_session(request: Request) -> SessionResponse:
    ctx = _ctx(request)
    if ctx.sessions is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Sessions not started")
    try:
        session = ctx.sessions.create_session()
    except StableUIError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    return SessionResponse(session_id=session.id, user_id=session.user_id)


# Sync handler: runs in the threadpool, so the stop sequence never blocks the event loop.
@router.post("/shutdown", response_model=ShutdownResponse)
def shutdown(request: Request) -> ShutdownResponse:
    logger.info("admin_shutdown_requested")
    initiated = request.app.state.request_shutdown("admin_api")
    return ShutdownResponse(initiated=initiated)


def register_basic_api(
    app: FastAPI,
    ctx: BootstrapContext,
    request_shutdown: Callable[[str], bool],
) -> None:
    app.state.ctx = ctx
    app.state.request_shutdown = request_shutdown
    app.include_router(router)
