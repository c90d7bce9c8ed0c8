from typing import ClassVar

import httpx

from app.analysis.base import BaseAnalysisClient
from app.analysis.example_client import ExampleAnalysisClient
from app.analysis.proxy_client import ProxyAnalysisClient
from app.config.settings import Settings


class AnalysisClientFactory:
    """Creates the configured analysis client."""

    CLIENTS: ClassVar[tuple[str, ...]] = ("example", "proxy")
    IN_PROCESS_BASE_URL: ClassVar[str] = "http://receipt-scanner.internal"

    @classmethod
    def create(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> BaseAnalysisClient:
        """Create a client from settings.

        With no ``analysis_proxy_base_url`` the proxy client needs a transport
        (normally an ASGI transport onto this application).
        """
        name = settings.analysis_client.lower()
        if name == "example":
            return ExampleAnalysisClient(output_key=settings.dify_output_key)
        if name != "proxy":
            raise ValueError(
                f"Unknown analysis client '{name}'. Choose from: {list(cls.CLIENTS)}"
            )
        base_url = settings.analysis_proxy_base_url.strip()
        if not base_url and transport is None:
            raise ValueError(
                "analysis_proxy_base_url is required when no in-process transport is given"
            )
        http_client = httpx.AsyncClient(
            base_url=base_url or cls.IN_PROCESS_BASE_URL,
            transport=transport,
            timeout=settings.analysis_timeout_seconds,
        )
        return ProxyAnalysisClient(http_client=http_client, output_key=settings.dify_output_key)
