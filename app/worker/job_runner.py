from app.logging.logger import Log
from app.presentation.log import LogDetails, PresentationLog
from app.processor.exceptions import FileValidationError
from app.processor.models import AnalysisOutcome, UploadedFile
from app.processor.processor import ReceiptProcessor


class ReceiptJobRunner:
    """Run one receipt through the processor and record the outcome in the log."""

    def __init__(self, processor: ReceiptProcessor, log: PresentationLog) -> None:
        self._processor = processor
        self._log = log

    async def run(self, file: UploadedFile) -> AnalysisOutcome | None:
        """Process ``file``; returns None when it was rejected by validation."""
        self._log.record(
            "processing",
            f"Started analyzing receipt '{file.name}'",
            LogDetails(file_name=file.name),
        )
        try:
            outcome = await self._processor.process(file)
        except FileValidationError as exc:
            Log.warning("receipt.rejected", file_name=file.name, error=str(exc))
            self._log.record(
                "error",
                str(exc),
                LogDetails(file_name=file.name, error_code=exc.code),
            )
            return None

        if outcome.diagnostic is not None:
            self._log.record(
                "error",
                f"Analysis of receipt '{file.name}' failed: {outcome.diagnostic.message}",
                LogDetails(file_name=file.name, error_code=outcome.diagnostic.code),
            )
        result = outcome.result
        self._log.record(
            "complete",
            f"Finished analyzing receipt '{file.name}'",
            LogDetails(
                file_name=file.name,
                date=result.date,
                category=result.category,
                amount=result.amount,
            ),
        )
        return outcome
