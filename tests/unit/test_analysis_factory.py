import httpx
import pytest

from app.analysis.example_client import ExampleAnalysisClient
from app.analysis.factory import AnalysisClientFactory
from app.analysis.proxy_client import ProxyAnalysisClient
from app.config.settings import Settings


class TestAnalysisClientFactory:
    def test_creates_example_client(self) -> None:
        settings = Settings(_env_file=None, analysis_client="example")
        assert isinstance(AnalysisClientFactory.create(settings), ExampleAnalysisClient)

    def test_creates_proxy_client_with_base_url(self) -> None:
        settings = Settings(_env_file=None, analysis_proxy_base_url="http://localhost:8000")
        assert isinstance(AnalysisClientFactory.create(settings), ProxyAnalysisClient)

    def test_creates_proxy_client_with_transport(self) -> None:
        settings = Settings(_env_file=None)
        transport = httpx.MockTransport(lambda r: httpx.Response(200))
        client = AnalysisClientFactory.create(settings, transport=transport)
        assert isinstance(client, ProxyAnalysisClient)

    def test_proxy_client_needs_base_url_or_transport(self) -> None:
        settings = Settings(_env_file=None)
        with pytest.raises(ValueError, match="analysis_proxy_base_url"):
            AnalysisClientFactory.create(settings)

    def test_unknown_client_raises(self) -> None:
        settings = Settings(_env_file=None, analysis_client="carrier-pigeon")
        with pytest.raises(ValueError, match="Unknown analysis client"):
            AnalysisClientFactory.create(settings)
