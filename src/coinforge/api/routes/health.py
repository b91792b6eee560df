"""Health check endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "coinforge-api", "version": "1.0.0"}


@router.get("/health/ready")
async def readiness(request: Request):
    """Readiness probe: the account store must answer; Redis only if configured."""
    state = request.app.state
    checks: dict[str, str] = {}

    try:
        async with state.db_session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as exc:
        checks["database"] = f"error: {exc}"

    redis = getattr(state, "redis", None)
    if redis is None:
        checks["redis"] = "disabled"
    else:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:
            checks["redis"] = f"error: {exc}"

    ready = all(not value.startswith("error") for value in checks.values())

    tracker = getattr(state, "job_tracker", None)
    launcher = getattr(state, "generation_launcher", None)
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "checks": checks,
            "jobs": {
                "tracked": len(tracker) if tracker is not None else 0,
                "running": launcher.active_count if launcher is not None else 0,
            },
        },
    )
