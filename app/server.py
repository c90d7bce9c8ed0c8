from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.analysis.factory import AnalysisClientFactory
from app.api import health, receipts
from app.cache.result_cache import ResultCache
from app.config.settings import Settings
from app.dashboard.session import ReceiptSession
from app.logging.logger import Log
from app.presentation.log import PresentationLog
from app.processor.processor import build_processor
from app.processor.validation import FileValidator
from app.proxy import routes as proxy_routes
from app.proxy.dify_client import DifyClient
from app.proxy.exceptions import ProxyError
from app.proxy.handlers import proxy_error_handler
from app.worker.job_runner import ReceiptJobRunner
from app.worker.upload_queue import UploadQueue


def create_app(
    settings: Settings | None = None,
    *,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
    analysis_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the application: proxy endpoints, session endpoints and the pipeline.

    Without ``analysis_proxy_base_url`` the analysis client reaches the proxy
    endpoints in-process through an ASGI transport onto this app.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        Log.info("server.started", env=settings.app_env)
        try:
            yield
        finally:
            await app.state.upload_queue.join()
            await app.state.analysis_client.aclose()
            await app.state.dify_client.aclose()
            Log.info("server.stopped")

    app = FastAPI(title="Receipt Scanner", lifespan=lifespan)

    if analysis_transport is None and not settings.analysis_proxy_base_url.strip():
        analysis_transport = httpx.ASGITransport(app=app)
    analysis_client = AnalysisClientFactory.create(settings, transport=analysis_transport)
    dify_client = DifyClient(
        http_client=httpx.AsyncClient(
            transport=upstream_transport,
            timeout=settings.dify_timeout_seconds,
        ),
        settings=settings,
    )

    cache = ResultCache(ttl_seconds=settings.cache_ttl_seconds)
    log = PresentationLog()
    processor = build_processor(settings, client=analysis_client, cache=cache)
    queue = UploadQueue(ReceiptJobRunner(processor, log))

    app.state.settings = settings
    app.state.analysis_client = analysis_client
    app.state.dify_client = dify_client
    app.state.result_cache = cache
    app.state.upload_queue = queue
    app.state.session = ReceiptSession(
        validator=FileValidator.from_settings(settings),
        queue=queue,
        log=log,
        max_uploads=settings.max_uploads,
    )

    app.add_exception_handler(ProxyError, proxy_error_handler)  # type: ignore[arg-type]
    app.include_router(health.router)
    app.include_router(proxy_routes.router)
    app.include_router(receipts.router)
    return app
