"""Proxy endpoints against a fake Dify API."""

import pytest
from fastapi.testclient import TestClient

from app.config.settings import Settings
from app.server import create_app

PLACEHOLDER = {"date": "", "category": "", "amount": ""}


@pytest.fixture()
def client(settings, fake_dify) -> TestClient:
    app = create_app(settings, upstream_transport=fake_dify.transport)
    return TestClient(app)


def _upload(client: TestClient, content: bytes = b"jpeg-bytes"):
    return client.post(
        "/api/dify/upload",
        files={"file": ("receipt.jpg", content, "image/jpeg")},
    )


class TestUploadEndpoint:
    def test_relays_file(self, client, fake_dify) -> None:
        response = _upload(client)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "succeeded"
        assert body["id"] == body["file_id"] == "f1"
        request = fake_dify.calls("/v1/files/upload")[0]
        assert request.headers["Authorization"] == "Bearer test-key"

    def test_missing_file(self, client, fake_dify) -> None:
        response = client.post("/api/dify/upload", data={"other": "value"})

        assert response.status_code == 400
        assert response.json()["code"] == "NO_FILE"
        assert fake_dify.requests == []

    def test_malformed_form(self, client) -> None:
        response = client.post(
            "/api/dify/upload",
            content=b"garbage",
            headers={"Content-Type": "multipart/form-data"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FORM_DATA"

    def test_upstream_rejection(self, client, fake_dify) -> None:
        fake_dify.upload = (413, {"message": "file too large"})

        response = _upload(client)

        assert response.status_code == 413
        body = response.json()
        assert body["status"] == "failed"
        assert body["code"] == "UPLOAD_ERROR"
        assert body["message"] == "file too large"

    def test_upstream_unreachable(self, client, fake_dify) -> None:
        fake_dify.failing_paths.add("/v1/files/upload")

        response = _upload(client)

        assert response.status_code == 500
        assert response.json()["code"] == "CONNECTION_ERROR"

    def test_non_json_upstream_body(self, client, fake_dify) -> None:
        fake_dify.upload = (200, "<html>gateway</html>")

        response = _upload(client)

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "INVALID_RESPONSE"
        assert body["details"]["responseText"] == "<html>gateway</html>"

    def test_missing_configuration(self, fake_dify) -> None:
        settings = Settings(_env_file=None, dify_api_key="")
        client = TestClient(create_app(settings, upstream_transport=fake_dify.transport))

        response = _upload(client)

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "DIFY_CONFIGURATION_ERROR"
        assert "DIFY_API_KEY" in body["message"]
        assert fake_dify.requests == []


class TestWorkflowEndpoint:
    def test_runs_workflow(self, client) -> None:
        response = client.post("/api/dify/workflow", json={"fileId": "f1"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "succeeded"
        assert body["run_id"] == "r1"
        assert body["result"] == {"date": "2024-02-01", "category": "Travel", "amount": 4000}

    def test_missing_file_id(self, client, fake_dify) -> None:
        response = client.post("/api/dify/workflow", json={})

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FILE_ID"
        assert fake_dify.requests == []

    def test_invalid_body(self, client) -> None:
        response = client.post(
            "/api/dify/workflow",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"

    def test_upstream_error_keeps_status(self, client, fake_dify) -> None:
        fake_dify.workflow = (429, {"message": "rate limited"})

        response = client.post("/api/dify/workflow", json={"fileId": "f1"})

        assert response.status_code == 429
        body = response.json()
        assert body["code"] == "DIFY_API_ERROR"
        assert body["details"] == {"message": "rate limited"}

    def test_missing_run_id(self, client, fake_dify) -> None:
        fake_dify.workflow = (200, {"data": {"status": "succeeded"}})

        response = client.post("/api/dify/workflow", json={"fileId": "f1"})

        assert response.status_code == 500
        assert response.json()["code"] == "MISSING_RUN_ID"

    def test_raw_string_output_is_passed_through(self, client, fake_dify) -> None:
        fake_dify.workflow = (
            200,
            {"workflow_run_id": "r1", "data": {"outputs": {"成功": "no structure here"}}},
        )

        body = client.post("/api/dify/workflow", json={"fileId": "f1"}).json()

        assert body["result"] == "no structure here"


class TestWorkflowStatusEndpoint:
    def test_returns_result(self, client, fake_dify) -> None:
        response = client.get("/api/dify/workflow/status", params={"runId": "r1"})

        assert response.status_code == 200
        assert response.json() == {
            "status": "succeeded",
            "result": {"date": "2024-02-01", "category": "Travel", "amount": 4000},
        }
        assert fake_dify.calls("/v1/workflows/run/r1")

    def test_without_run_id_returns_placeholder(self, client, fake_dify) -> None:
        response = client.get("/api/dify/workflow/status")

        assert response.status_code == 200
        assert response.json() == {"status": "succeeded", "result": PLACEHOLDER}
        assert fake_dify.requests == []

    def test_unfinished_run_reports_placeholder(self, client, fake_dify) -> None:
        fake_dify.status = (200, {"id": "r1", "status": "running"})

        response = client.get("/api/dify/workflow/status", params={"runId": "r1"})

        assert response.status_code == 200
        assert response.json() == {"status": "succeeded", "result": PLACEHOLDER}

    @pytest.mark.parametrize(
        "status",
        [(500, {"message": "boom"}), (200, "not json"), (200, {"status": "succeeded"})],
    )
    def test_failures_return_placeholder(self, client, fake_dify, status) -> None:
        fake_dify.status = status

        response = client.get("/api/dify/workflow/status", params={"runId": "r1"})

        assert response.status_code == 200
        assert response.json() == {"status": "succeeded", "result": PLACEHOLDER}

    def test_unreachable_upstream_returns_placeholder(self, client, fake_dify) -> None:
        fake_dify.failing_paths.add("/v1/workflows/run/r1")

        response = client.get("/api/dify/workflow/status", params={"runId": "r1"})

        assert response.status_code == 200
        assert response.json()["result"] == PLACEHOLDER


class TestHealth:
    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"status": "ok", "env": "dev"}
