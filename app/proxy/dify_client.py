from typing import Any, ClassVar

import httpx

from app.config.settings import Settings
from app.logging.logger import Log
from app.proxy.exceptions import ConfigurationError, ProxyError


class DifyClient:
    """Server-side client for the Dify workflow API. Holds the credential."""

    STATUS_PLACEHOLDER: ClassVar[str] = ":workflow_id"

    def __init__(self, *, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http_client
        self._settings = settings

    def require_upload_config(self) -> None:
        self._require(
            DIFY_API_KEY=self._settings.dify_api_key,
            DIFY_FILE_UPLOAD_ENDPOINT=self._settings.dify_file_upload_endpoint,
        )

    def require_workflow_config(self) -> None:
        self._require(
            DIFY_API_KEY=self._settings.dify_api_key,
            DIFY_WORKFLOW_ID=self._settings.dify_workflow_id,
            DIFY_WORKFLOW_ENDPOINT=self._settings.dify_workflow_endpoint,
        )

    def require_status_config(self) -> None:
        self._require(
            DIFY_API_KEY=self._settings.dify_api_key,
            DIFY_WORKFLOW_STATUS_ENDPOINT=self._settings.dify_workflow_status_endpoint,
        )

    async def upload_file(self, name: str, content: bytes, media_type: str) -> httpx.Response:
        self.require_upload_config()
        endpoint = self._settings.dify_file_upload_endpoint
        Log.info("dify.upload.request", endpoint=endpoint, file_name=name, size=len(content))
        return await self._send(
            "POST",
            endpoint,
            files={"file": (name, content, media_type)},
            data={"user": self._settings.dify_user},
        )

    async def run_workflow(self, file_id: str) -> httpx.Response:
        self.require_workflow_config()
        endpoint = self._settings.dify_workflow_endpoint
        body = {
            "workflow_id": self._settings.dify_workflow_id,
            "inputs": {
                "image": [
                    {
                        "upload_file_id": file_id,
                        "transfer_method": "local_file",
                        "type": "image",
                    }
                ]
            },
            "response_mode": "blocking",
            "user": self._settings.dify_user,
        }
        Log.info("dify.workflow.request", endpoint=endpoint, file_id=file_id)
        return await self._send("POST", endpoint, json=body)

    async def get_workflow_run(self, run_id: str) -> httpx.Response:
        self.require_status_config()
        endpoint = self._settings.dify_workflow_status_endpoint.replace(
            self.STATUS_PLACEHOLDER, run_id
        )
        Log.info("dify.status.request", endpoint=endpoint, run_id=run_id)
        return await self._send("GET", endpoint)

    async def aclose(self) -> None:
        await self._http.aclose()

    @staticmethod
    def resolve_run_id(data: dict[str, Any]) -> str | None:
        """Pick the run identifier: workflow_run_id, then data.id, then id."""
        nested = data.get("data")
        candidates = (
            data.get("workflow_run_id"),
            nested.get("id") if isinstance(nested, dict) else None,
            data.get("id"),
        )
        for candidate in candidates:
            if candidate:
                return str(candidate)
        return None

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self._settings.dify_api_key}"}
        try:
            return await self._http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            Log.error("dify.request.failed", endpoint=url, error=str(exc))
            raise ProxyError(
                "Failed to connect to Dify API",
                code="CONNECTION_ERROR",
                status_code=500,
            ) from exc

    @staticmethod
    def _require(**values: str) -> None:
        missing = [name for name, value in values.items() if not value.strip()]
        if missing:
            Log.error("dify.configuration.missing", missing=",".join(missing))
            raise ConfigurationError(missing)
