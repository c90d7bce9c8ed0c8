import json
from typing import Any, ClassVar

import httpx

from app.analysis.base import BaseAnalysisClient
from app.analysis.exceptions import (
    AnalysisConnectionError,
    AnalysisError,
    InvalidResponseError,
    MissingRunIdError,
    UploadError,
    UpstreamError,
)
from app.analysis.models import AnalysisResult, WorkflowRun
from app.analysis.outputs import extract_output
from app.logging.logger import Log
from app.processor.models import UploadedFile


class ProxyAnalysisClient(BaseAnalysisClient):
    """Analysis client that goes through the server-side proxy endpoints."""

    UPLOAD_PATH: ClassVar[str] = "/api/dify/upload"
    WORKFLOW_PATH: ClassVar[str] = "/api/dify/workflow"
    STATUS_PATH: ClassVar[str] = "/api/dify/workflow/status"
    RUNNING_STATUSES: ClassVar[frozenset[str]] = frozenset({"running", "waiting"})

    def __init__(self, *, http_client: httpx.AsyncClient, output_key: str) -> None:
        self._http = http_client
        self._output_key = output_key

    async def upload(self, file: UploadedFile) -> str:
        Log.info(
            "analysis.upload.started",
            file_name=file.name,
            size=file.size,
            media_type=file.media_type,
        )
        response = await self._send(
            "POST",
            self.UPLOAD_PATH,
            files={"file": (file.name, file.content, file.media_type)},
        )
        if response.is_error:
            raise self._upstream_error(response, UploadError, "File upload failed")
        data = self._parse_json(response)
        file_id = data.get("id") or data.get("file_id")
        if not file_id:
            raise InvalidResponseError("Upload response does not contain id or file_id")
        Log.info("analysis.upload.completed", file_id=file_id)
        return str(file_id)

    async def trigger_analysis(self, file_id: str) -> WorkflowRun:
        if not file_id:
            raise ValueError("file_id is required")
        response = await self._send("POST", self.WORKFLOW_PATH, json={"fileId": file_id})
        if response.is_error:
            raise self._upstream_error(response, UpstreamError, "Workflow trigger failed")
        data = self._parse_json(response)
        run_id = data.get("run_id")
        if not run_id:
            raise MissingRunIdError("No run_id in workflow response")
        outputs = data.get("outputs")
        run = WorkflowRun(
            run_id=str(run_id),
            status=str(data.get("status") or ""),
            outputs=outputs if isinstance(outputs, dict) else {},
        )
        Log.info("analysis.trigger.completed", run_id=run.run_id, status=run.status)
        return run

    async def poll_status(self, run_id: str) -> AnalysisResult | None:
        if not run_id:
            return AnalysisResult.placeholder()
        try:
            response = await self._send("GET", self.STATUS_PATH, params={"runId": run_id})
            if response.is_error:
                raise self._upstream_error(response, UpstreamError, "Status check failed")
            data = self._parse_json(response)
        except AnalysisError as exc:
            Log.warning("analysis.poll.fallback", run_id=run_id, code=exc.code, error=str(exc))
            return AnalysisResult.placeholder()

        if data.get("status") in self.RUNNING_STATUSES:
            Log.debug("analysis.poll.running", run_id=run_id)
            return None
        payload = data.get("result")
        if payload is None:
            payload = extract_output(data.get("outputs"), self._output_key)
        return AnalysisResult.from_payload(payload)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise AnalysisConnectionError(f"Request to {url} failed: {exc}") from exc

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        text = response.text.strip()
        if not text:
            raise InvalidResponseError("Empty response from server")
        if text.startswith("<!DOCTYPE") or text.startswith("<html"):
            raise InvalidResponseError(f"Invalid API endpoint or server error: {response.url}")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidResponseError(f"Invalid JSON response: {text[:100]}") from exc
        if not isinstance(data, dict):
            raise InvalidResponseError("JSON response must be an object")
        return data

    @staticmethod
    def _upstream_error(
        response: httpx.Response,
        error_cls: type[UpstreamError],
        prefix: str,
    ) -> UpstreamError:
        detail = f"HTTP {response.status_code}"
        code: str | None = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = str(body.get("message") or body.get("error") or detail)
            code = body.get("code") if isinstance(body.get("code"), str) else None
        return error_cls(f"{prefix}: {detail}", status_code=response.status_code, code=code)
