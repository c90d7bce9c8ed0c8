import asyncio
from collections.abc import Awaitable, Callable

from app.analysis.base import BaseAnalysisClient
from app.analysis.exceptions import PollTimeoutError
from app.analysis.models import AnalysisResult
from app.analysis.outputs import extract_output
from app.cache.result_cache import ResultCache
from app.logging.logger import Log
from app.processor.exceptions import ImageCompressionError
from app.processor.fingerprint import fingerprint
from app.processor.image_compressor import ImageCompressor
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.validation import FileValidator

Sleep = Callable[[float], Awaitable[None]]


class ValidateStep(PipelineStep):
    name = "validating"

    def __init__(self, validator: FileValidator) -> None:
        self._validator = validator

    async def run(self, context: PipelineContext) -> PipelineContext:
        self._validator.validate(context.file)
        return context


class CompressStep(PipelineStep):
    name = "compressing"

    def __init__(self, compressor: ImageCompressor) -> None:
        self._compressor = compressor

    async def run(self, context: PipelineContext) -> PipelineContext:
        original = context.file
        try:
            compressed = await asyncio.to_thread(self._compressor.compress, original)
        except ImageCompressionError as exc:
            Log.warning("receipt.compress.skipped", file_name=original.name, error=str(exc))
            context.payload = original
            return context
        # keep the original when re-encoding does not make it smaller
        context.payload = compressed if compressed.size < original.size else original
        Log.info(
            "receipt.compress.completed",
            file_name=original.name,
            original_size=original.size,
            upload_size=context.payload.size,
        )
        return context


class FingerprintStep(PipelineStep):
    name = "fingerprinting"

    def __init__(self, prefix_bytes: int) -> None:
        self._prefix_bytes = prefix_bytes

    async def run(self, context: PipelineContext) -> PipelineContext:
        payload = context.payload or context.file
        context.fingerprint = fingerprint(payload.content, self._prefix_bytes)
        Log.debug("receipt.fingerprint.completed", fingerprint=context.fingerprint)
        return context


class CacheLookupStep(PipelineStep):
    name = "cache_check"

    def __init__(self, cache: ResultCache) -> None:
        self._cache = cache

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.fingerprint is None:
            return context
        cached = self._cache.get(context.fingerprint)
        if cached is not None:
            context.result = cached
            context.from_cache = True
            Log.info("receipt.cache.hit", fingerprint=context.fingerprint)
        return context


class UploadStep(PipelineStep):
    name = "uploading"

    def __init__(self, client: BaseAnalysisClient) -> None:
        self._client = client

    async def run(self, context: PipelineContext) -> PipelineContext:
        context.file_id = await self._client.upload(context.payload or context.file)
        return context


class TriggerStep(PipelineStep):
    name = "triggering"

    def __init__(self, client: BaseAnalysisClient, output_key: str) -> None:
        self._client = client
        self._output_key = output_key

    async def run(self, context: PipelineContext) -> PipelineContext:
        run = await self._client.trigger_analysis(context.file_id)
        context.workflow_run = run
        # blocking runs already carry their outputs; polling is only needed otherwise
        payload = extract_output(run.outputs, self._output_key)
        if isinstance(payload, dict):
            context.result = AnalysisResult.from_payload(payload)
            Log.info("receipt.trigger.result_inline", run_id=run.run_id)
        return context


class PollStep(PipelineStep):
    name = "polling"

    def __init__(
        self,
        client: BaseAnalysisClient,
        *,
        interval_seconds: float,
        max_attempts: int,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._interval = interval_seconds
        self._max_attempts = max(1, max_attempts)
        self._sleep = sleep

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.workflow_run is None:
            raise ValueError("PipelineContext.workflow_run must be set before polling")
        run_id = context.workflow_run.run_id
        for attempt in range(1, self._max_attempts + 1):
            result = await self._client.poll_status(run_id)
            if result is not None:
                context.result = result
                Log.info("receipt.poll.completed", run_id=run_id, attempts=attempt)
                return context
            if attempt < self._max_attempts:
                await self._sleep(self._interval)
        raise PollTimeoutError(
            f"Workflow run {run_id} still running after {self._max_attempts} status checks"
        )
