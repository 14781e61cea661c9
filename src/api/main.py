"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from identity.dependencies.downstream import (
    close_downstream_client,
    get_downstream_client,
)
from identity.dependencies.outbox import get_event_serializer
from identity.infrastructure.outbox.dispatcher import IdentityEventDispatcher
from identity.presentation import outbox_admin
from infrastructure.database.dependencies import (
    close_database_connections,
    get_session_factory,
)
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.outbox.cleanup import OutboxCleanupJob
from infrastructure.outbox.worker import OutboxWorker
from infrastructure.settings import get_outbox_settings, get_settings
from infrastructure.version import __version__
from shared_kernel.outbox.circuit_breaker import CircuitBreaker
from shared_kernel.outbox.observability import (
    DefaultOutboxCleanupProbe,
    DefaultOutboxWorkerProbe,
)

_startup_probe = DefaultStartupProbe()


@asynccontextmanager
async def run_outbox_worker(app: FastAPI):
    """Run the delivery worker for the lifetime of the application.

    Only one worker may run system-wide; replicas set
    IDENTITY_OUTBOX_WORKER_ENABLED=false.
    """
    settings = get_outbox_settings()
    if not settings.worker_enabled:
        _startup_probe.background_task_disabled("outbox_worker")
        yield
        return

    probe = DefaultOutboxWorkerProbe()
    dispatcher = IdentityEventDispatcher(
        client=get_downstream_client(),
        serializer=get_event_serializer(),
        probe=probe,
    )
    worker = OutboxWorker(
        session_factory=get_session_factory(),
        dispatcher=dispatcher,
        probe=probe,
        breaker=CircuitBreaker(
            failure_threshold=settings.failure_threshold,
            cooldown_seconds=settings.cooldown_seconds,
        ),
        poll_interval_seconds=settings.poll_interval_seconds,
        batch_size=settings.batch_size,
        delivery_timeout_seconds=settings.delivery_timeout_seconds,
    )
    app.state.outbox_worker = worker

    await worker.start()
    _startup_probe.background_task_started("outbox_worker")
    try:
        yield
    finally:
        await worker.stop()


@asynccontextmanager
async def run_outbox_cleanup(app: FastAPI):
    """Run the retention purge for the lifetime of the application."""
    settings = get_outbox_settings()
    if not settings.cleanup_enabled:
        _startup_probe.background_task_disabled("outbox_cleanup")
        yield
        return

    job = OutboxCleanupJob(
        session_factory=get_session_factory(),
        probe=DefaultOutboxCleanupProbe(),
        retention_days=settings.retention_days,
        interval_seconds=settings.cleanup_interval_seconds,
    )

    await job.start()
    _startup_probe.background_task_started("outbox_cleanup")
    try:
        yield
    finally:
        await job.stop()


@asynccontextmanager
async def identity_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Outbox worker and cleanup job (each gated by its setting)
    - Downstream HTTP client and database engine (closed on shutdown)
    """
    configure_logging(debug=get_settings().debug)

    try:
        async with run_outbox_worker(app):
            async with run_outbox_cleanup(app):
                yield
    finally:
        await close_downstream_client()
        await close_database_connections()
        _startup_probe.shutdown_completed()


app = FastAPI(
    title="Identity Service",
    description="Identity events with transactional outbox delivery",
    version=__version__,
    lifespan=identity_lifespan,
)

app.include_router(outbox_admin.router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
