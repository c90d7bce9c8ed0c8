"""Proxy endpoints relaying receipt analysis calls to Dify."""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar

import httpx
from fastapi import APIRouter, Depends, Query, Request
from starlette.datastructures import UploadFile

from app.analysis.models import AnalysisResult
from app.analysis.outputs import extract_output
from app.api.dependencies import get_dify_client, get_settings
from app.config.settings import Settings
from app.logging.logger import Log
from app.proxy.dify_client import DifyClient
from app.proxy.exceptions import ProxyError

router = APIRouter(prefix="/api/dify", tags=["proxy"])

P = ParamSpec("P")
R = TypeVar("R")


def _internal_errors(handler: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Report unexpected failures as INTERNAL_ERROR envelopes."""

    @functools.wraps(handler)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await handler(*args, **kwargs)
        except ProxyError:
            raise
        except Exception as exc:
            Log.error("proxy.internal_error", handler=handler.__name__, error=str(exc))
            raise ProxyError(
                str(exc) or "Unknown error",
                code="INTERNAL_ERROR",
                status_code=500,
            ) from exc

    return wrapper


def placeholder_envelope() -> dict[str, Any]:
    return {"status": "succeeded", "result": AnalysisResult.placeholder().to_dict()}


def _decode_json(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError as exc:
        raise ProxyError(
            "Invalid JSON response from Dify API",
            code="INVALID_RESPONSE",
            status_code=500,
            details={"responseText": response.text[:500]},
        ) from exc
    if not isinstance(data, dict):
        raise ProxyError(
            "Unexpected JSON response from Dify API",
            code="INVALID_RESPONSE",
            status_code=500,
            details={"responseText": response.text[:500]},
        )
    return data


@router.post("/upload")
@_internal_errors
async def upload_file(
    request: Request,
    dify: DifyClient = Depends(get_dify_client),
) -> dict[str, Any]:
    dify.require_upload_config()
    try:
        form = await request.form()
    except Exception as exc:
        raise ProxyError("Invalid form data", code="INVALID_FORM_DATA", status_code=400) from exc

    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise ProxyError("No file provided", code="NO_FILE", status_code=400)

    content = await upload.read()
    name = upload.filename or "receipt"
    media_type = upload.content_type or "application/octet-stream"
    Log.info("proxy.upload.received", file_name=name, media_type=media_type, size=len(content))

    response = await dify.upload_file(name, content, media_type)
    data = _decode_json(response)
    if response.is_error:
        raise ProxyError(
            str(data.get("message") or "File upload failed"),
            code="UPLOAD_ERROR",
            status_code=response.status_code,
            details=data,
        )
    Log.info("proxy.upload.completed", file_id=data.get("id") or data.get("file_id"))
    return {"status": "succeeded", **data, "file_id": data.get("id") or data.get("file_id")}


@router.post("/workflow")
@_internal_errors
async def trigger_workflow(
    request: Request,
    dify: DifyClient = Depends(get_dify_client),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    dify.require_workflow_config()
    try:
        body = await request.json()
    except ValueError as exc:
        raise ProxyError("Invalid request body", code="INVALID_REQUEST", status_code=400) from exc

    file_id = body.get("fileId") if isinstance(body, dict) else None
    if not file_id:
        raise ProxyError("No file ID provided", code="MISSING_FILE_ID", status_code=400)

    response = await dify.run_workflow(str(file_id))
    data = _decode_json(response)
    if response.is_error:
        raise ProxyError(
            f"Dify API error: {response.status_code} {response.reason_phrase}",
            code="DIFY_API_ERROR",
            status_code=response.status_code,
            details=data,
        )

    run_id = DifyClient.resolve_run_id(data)
    if not run_id:
        raise ProxyError(
            "No run ID in Dify response",
            code="MISSING_RUN_ID",
            status_code=500,
            details=data,
        )

    run = data.get("data")
    outputs = run.get("outputs") if isinstance(run, dict) else None
    outputs = outputs if isinstance(outputs, dict) else {}
    Log.info("proxy.workflow.completed", run_id=run_id)
    return {
        "status": "succeeded",
        "run_id": run_id,
        "outputs": outputs,
        "result": extract_output(outputs, settings.dify_output_key),
    }


@router.get("/workflow/status")
async def workflow_status(
    run_id: str | None = Query(default=None, alias="runId"),
    dify: DifyClient = Depends(get_dify_client),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Report a run's result. Never fails: any problem yields the placeholder."""
    if not run_id:
        Log.info("proxy.status.no_run_id")
        return placeholder_envelope()
    try:
        return await _fetch_status(dify, run_id, settings.dify_output_key)
    except Exception as exc:
        Log.warning("proxy.status.fallback", run_id=run_id, error=str(exc))
        return placeholder_envelope()


async def _fetch_status(dify: DifyClient, run_id: str, output_key: str) -> dict[str, Any]:
    response = await dify.get_workflow_run(run_id)
    data = _decode_json(response)
    if response.is_error:
        raise ProxyError(
            f"Dify API returned status {response.status_code}",
            code="DIFY_API_ERROR",
            status_code=response.status_code,
        )
    run = data.get("data") if isinstance(data.get("data"), dict) else data
    result = extract_output(run.get("outputs"), output_key)
    if result is None:
        result = AnalysisResult.placeholder().to_dict()
    return {"status": "succeeded", "result": result}
