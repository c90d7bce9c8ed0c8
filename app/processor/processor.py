from app.analysis.base import BaseAnalysisClient
from app.analysis.exceptions import AnalysisError
from app.analysis.models import AnalysisResult
from app.cache.result_cache import ResultCache
from app.config.settings import Settings
from app.logging.logger import Log
from app.processor.exceptions import FileValidationError, ProcessorError
from app.processor.image_compressor import ImageCompressor
from app.processor.models import AnalysisOutcome, Diagnostic, UploadedFile
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    CacheLookupStep,
    CompressStep,
    FingerprintStep,
    PollStep,
    TriggerStep,
    UploadStep,
    ValidateStep,
)
from app.processor.validation import FileValidator


class ReceiptProcessor:
    """Drives one receipt through the analysis pipeline.

    Pipeline: validate -> compress -> fingerprint -> cache check -> upload ->
    trigger -> poll. The first step that produces a result ends the run.
    """

    def __init__(self, *, steps: list[PipelineStep], cache: ResultCache) -> None:
        self._steps = steps
        self._cache = cache

    async def process(self, file: UploadedFile) -> AnalysisOutcome:
        """Run the pipeline for ``file``.

        Raises:
            FileValidationError: if the file is rejected. Every other failure
                ends in a placeholder outcome instead.
        """
        context = PipelineContext(file=file)
        Log.info("receipt.pipeline.started", file_name=file.name, size=file.size)
        try:
            for step in self._steps:
                if context.result is not None:
                    break
                context.stage = step.name
                Log.debug("receipt.pipeline.stage", file_name=file.name, stage=step.name)
                context = await step.run(context)
        except FileValidationError:
            raise
        except Exception as exc:
            return self._fall_back(context, exc)

        if context.result is None:
            context.result = AnalysisResult.placeholder()
        return self._finish(context, diagnostic=None)

    def _fall_back(self, context: PipelineContext, exc: Exception) -> AnalysisOutcome:
        """Turn a pipeline failure into a placeholder success.

        This is the only place where failures are converted. The diagnostic
        travels with the outcome so callers can still report the error.
        """
        if isinstance(exc, (AnalysisError, ProcessorError)):
            code = exc.code
        else:
            code = "INTERNAL_ERROR"
        diagnostic = Diagnostic(
            stage=context.stage,
            code=code,
            message=str(exc) or type(exc).__name__,
        )
        Log.error(
            "receipt.pipeline.failed",
            file_name=context.file.name,
            stage=diagnostic.stage,
            code=diagnostic.code,
            error=diagnostic.message,
        )
        context.result = AnalysisResult.placeholder()
        return self._finish(context, diagnostic)

    def _finish(self, context: PipelineContext, diagnostic: Diagnostic | None) -> AnalysisOutcome:
        result = context.result or AnalysisResult.placeholder()
        if context.fingerprint is not None and not context.from_cache:
            self._cache.put(context.fingerprint, result)
        Log.info(
            "receipt.pipeline.completed",
            file_name=context.file.name,
            from_cache=context.from_cache,
            fallback=diagnostic is not None,
        )
        return AnalysisOutcome(result=result, diagnostic=diagnostic, from_cache=context.from_cache)


def build_processor(
    settings: Settings,
    *,
    client: BaseAnalysisClient,
    cache: ResultCache,
) -> ReceiptProcessor:
    """Build a ReceiptProcessor with the standard step sequence."""
    steps: list[PipelineStep] = [
        ValidateStep(FileValidator.from_settings(settings)),
        CompressStep(
            ImageCompressor(max_side=settings.image_max_side, quality=settings.image_quality)
        ),
        FingerprintStep(settings.fingerprint_bytes),
        CacheLookupStep(cache),
        UploadStep(client),
        TriggerStep(client, settings.dify_output_key),
        PollStep(
            client,
            interval_seconds=settings.poll_interval_seconds,
            max_attempts=settings.max_poll_attempts,
        ),
    ]
    return ReceiptProcessor(steps=steps, cache=cache)
