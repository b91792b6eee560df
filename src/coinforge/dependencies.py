"""FastAPI dependency injection providers."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request

from coinforge.errors.exceptions import AuthenticationError


async def get_db(request: Request) -> AsyncGenerator:
    """Yield a database session from the app's session factory."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


def get_trace_id(request: Request) -> str:
    """Extract trace_id from request state (set by middleware)."""
    return getattr(request.state, "trace_id", "unknown")


def get_tracker(request: Request):
    return request.app.state.job_tracker


def get_launcher(request: Request):
    return request.app.state.generation_launcher


def get_reconciler(request: Request):
    return request.app.state.deposit_reconciler


def get_wallet_provider(request: Request):
    return request.app.state.wallet_provider


async def get_current_user(request: Request) -> dict:
    """Return the authenticated account claims or raise 401."""
    user = getattr(request.state, "user", {})
    if "_auth_error" in user:
        raise AuthenticationError(user["_auth_error"])
    if not user or user.get("sub") in ("anonymous", ""):
        raise AuthenticationError("Authentication required")
    return user


# Type aliases for dependency injection
DBSession = Annotated[object, Depends(get_db)]
TraceId = Annotated[str, Depends(get_trace_id)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
