"""FastAPI application factory and lifespan management."""

import asyncio
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coinforge.config import settings
from coinforge.db.engine import create_db_engine, create_session_factory
from coinforge.integrations.adapters import build_adapters
from coinforge.integrations.config import sources_from_settings
from coinforge.logging_config import configure_logging
from coinforge.services.deposit_reconciler import DepositReconciler
from coinforge.services.generation import GenerationProvider, OpenAIGenerationProvider, SiteTemplate, get_template
from coinforge.services.job_tracker import JobTracker
from coinforge.services.wallet import RpcWalletProvider, WalletProvider
from coinforge.workers.generation_pipeline import GenerationPipeline
from coinforge.workers.queue import GenerationLauncher

# Configure logging at import time
configure_logging(log_level=settings.log_level, json_output=not settings.local_mode)

logger = logging.getLogger(__name__)


def install_services(
    app: FastAPI,
    session_factory,
    *,
    provider: GenerationProvider,
    adapters: list,
    wallet_provider: WalletProvider,
    redis=None,
    template: SiteTemplate | None = None,
) -> None:
    """Wire the job tracker, pipeline, launcher and reconciler onto app.state."""
    tracker = JobTracker(ttl_seconds=settings.job_ttl_seconds)
    pipeline = GenerationPipeline(
        tracker,
        provider,
        template or get_template(settings.generation_template),
        session_factory=session_factory,
        call_timeout=settings.generation_call_timeout_seconds,
        strip_history_images=settings.history_strip_images,
    )

    app.state.db_session_factory = session_factory
    app.state.redis = redis
    app.state.job_tracker = tracker
    app.state.generation_launcher = GenerationLauncher(
        session_factory, tracker, pipeline, settings.generation_cost_credits
    )
    app.state.deposit_reconciler = DepositReconciler(session_factory, adapters)
    app.state.wallet_provider = wallet_provider


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    db_url = settings.effective_database_url
    engine = create_db_engine(db_url)

    # Auto-create tables for SQLite (local dev)
    if "sqlite" in db_url:
        from coinforge.db.base import Base
        import coinforge.db.models  # noqa: F401 - register all ORM models

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("SQLite tables created (local mode)")

    app.state.db_engine = engine

    # Redis is only used for the scheduler lock; skipped in local mode
    redis = None
    if not settings.local_mode:
        try:
            import redis.asyncio as aioredis
            redis = aioredis.from_url(settings.redis_url, decode_responses=True)
        except Exception:
            logger.warning("Redis not available, scheduler lock disabled")

    http_client = httpx.AsyncClient()
    provider = OpenAIGenerationProvider(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        text_model=settings.text_model,
        max_tokens=settings.text_max_tokens,
        temperature=settings.text_temperature,
        image_model=settings.image_model,
        timeout=settings.generation_call_timeout_seconds,
        http_client=http_client,
    )
    install_services(
        app,
        create_session_factory(engine),
        provider=provider,
        adapters=build_adapters(sources_from_settings(settings), client=http_client),
        wallet_provider=RpcWalletProvider(
            settings.wallet_rpc_url, timeout=settings.wallet_rpc_timeout_seconds, client=http_client
        ),
        redis=redis,
    )

    from coinforge.workers.scheduler import run_scheduler
    scheduler_task = asyncio.create_task(
        run_scheduler(
            app,
            interval=settings.deposit_scan_interval_seconds,
            scan_deposits=settings.deposit_scan_enabled,
        )
    )

    logger.info("Coinforge API started (db=%s)", "sqlite" if "sqlite" in db_url else "postgresql")
    yield

    # Shutdown
    scheduler_task.cancel()
    try:
        await scheduler_task
    except asyncio.CancelledError:
        pass
    await app.state.generation_launcher.shutdown()
    await http_client.aclose()
    if redis is not None:
        await redis.aclose()
    await engine.dispose()
    logger.info("Coinforge API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Coinforge API",
        version="1.0.0",
        description="Memecoin landing-page generation with a deposit-funded credits ledger.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add middleware (order matters: last added = first executed)
    from coinforge.api.middleware.auth import AuthMiddleware
    from coinforge.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(AuthMiddleware)
    app.add_middleware(TraceIdMiddleware)

    from coinforge.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    from coinforge.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()
