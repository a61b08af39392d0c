"""
Production FastAPI Application

Storage and lock backends are picked by STORAGE_BACKEND / LOCK_BACKEND.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import cleanup, container, setup
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.platform.state.kvrocks_client import kvrocks_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Ticketing Core] Starting up...')

    tracing = TracingConfig(service_name='seat-ticketing-core')
    tracing.setup()
    Logger.base.info('📊 [Ticketing Core] OpenTelemetry tracing configured')

    setup()
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Ticketing Core] Dependency injection wired')

    if settings.STORAGE_BACKEND == 'postgres':
        await container.database().create_tables()
        Logger.base.info('🗄️ [Ticketing Core] PostgreSQL ready')
    else:
        Logger.base.warning('⚠️ [Ticketing Core] In-memory storage, data is lost on restart')

    if settings.LOCK_BACKEND == 'kvrocks':
        # Fail fast when Kvrocks is unreachable
        await kvrocks_client.initialize()
        Logger.base.info('📡 [Ticketing Core] Kvrocks initialized')

    Logger.base.info('✅ [Ticketing Core] Ready to serve requests')

    yield

    Logger.base.info('🛑 [Ticketing Core] Shutting down...')

    if settings.LOCK_BACKEND == 'kvrocks':
        await kvrocks_client.disconnect()
        Logger.base.info('📡 [Ticketing Core] Kvrocks disconnected')

    if settings.STORAGE_BACKEND == 'postgres':
        await container.database().dispose()
        Logger.base.info('🗄️ [Ticketing Core] Database engine disposed')

    container.unwire()
    cleanup()

    tracing.shutdown()
    Logger.base.info('📊 [Ticketing Core] Tracing shutdown complete')

    Logger.base.info('👋 [Ticketing Core] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
