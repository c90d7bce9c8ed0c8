import io
import json
from typing import Any

import httpx
import pytest
from PIL import Image

from app.config.settings import Settings

RECEIPT_OUTPUT = json.dumps({"date": "2024-02-01", "category": "Travel", "amount": 4000})


def make_image_bytes(
    image_format: str = "JPEG",
    size: tuple[int, int] = (64, 48),
    color: tuple[int, int, int] = (200, 30, 30),
) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=image_format)
    return buf.getvalue()


class FakeDify:
    """Stands in for the Dify API: records requests and answers with canned bodies."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.failing_paths: set[str] = set()
        self.upload: tuple[int, Any] = (
            201,
            {
                "id": "f1",
                "name": "receipt.jpg",
                "size": 2048,
                "mime_type": "image/jpeg",
                "created_at": 1706745600,
            },
        )
        self.workflow: tuple[int, Any] = (
            200,
            {
                "workflow_run_id": "r1",
                "task_id": "t1",
                "data": {
                    "id": "r1",
                    "status": "succeeded",
                    "outputs": {"成功": RECEIPT_OUTPUT},
                },
            },
        )
        self.status: tuple[int, Any] = (
            200,
            {"id": "r1", "status": "succeeded", "outputs": {"成功": RECEIPT_OUTPUT}},
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def calls(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.failing_paths:
            raise httpx.ConnectError("connection refused", request=request)
        if path == "/v1/files/upload":
            return self._respond(self.upload)
        if path == "/v1/workflows/run" and request.method == "POST":
            return self._respond(self.workflow)
        if path.startswith("/v1/workflows/run/"):
            return self._respond(self.status)
        return httpx.Response(404, json={"message": "not found"})

    @staticmethod
    def _respond(canned: tuple[int, Any]) -> httpx.Response:
        status_code, body = canned
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        dify_api_key="test-key",
        dify_workflow_id="wf-1",
        poll_interval_seconds=0.0,
        max_poll_attempts=3,
    )


@pytest.fixture()
def fake_dify() -> FakeDify:
    return FakeDify()


@pytest.fixture()
def jpeg_bytes() -> bytes:
    """A small (~1-2 KB) JPEG receipt photo."""
    return make_image_bytes("JPEG")


@pytest.fixture()
def png_bytes() -> bytes:
    return make_image_bytes("PNG", size=(2400, 1600), color=(10, 120, 240))


@pytest.fixture()
def image_factory() -> Any:
    """Return ``make_image_bytes`` so tests can build distinct images."""
    return make_image_bytes
