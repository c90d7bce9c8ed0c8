from collections.abc import Sequence
from dataclasses import dataclass, field

from app.logging.logger import Log
from app.presentation.log import LogDetails, PresentationLog
from app.processor.exceptions import FileValidationError
from app.processor.models import UploadedFile
from app.processor.validation import FileValidator
from app.worker.upload_queue import UploadQueue


@dataclass
class Submission:
    accepted: list[str] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)


class ReceiptSession:
    """Visible uploads of a session together with the queue and log behind them."""

    def __init__(
        self,
        *,
        validator: FileValidator,
        queue: UploadQueue,
        log: PresentationLog,
        max_uploads: int,
    ) -> None:
        self._validator = validator
        self._queue = queue
        self._log = log
        self._max_uploads = max_uploads
        self._uploads: list[str] = []

    @property
    def log(self) -> PresentationLog:
        return self._log

    @property
    def uploads(self) -> tuple[str, ...]:
        return tuple(self._uploads)

    def submit(self, files: Sequence[UploadedFile]) -> Submission:
        """Validate ``files`` and enqueue the acceptable ones in order."""
        submission = Submission()
        available = max(self._max_uploads - len(self._uploads), 0)
        if len(files) > available:
            self._log.record(
                "error",
                f"Upload limit: at most {self._max_uploads} receipts at a time",
                LogDetails(error_code="UPLOAD_LIMIT"),
            )
            submission.rejected.extend(file.name for file in files[available:])
            files = files[:available]

        for file in files:
            try:
                self._validator.validate(file)
            except FileValidationError as exc:
                Log.warning("receipt.rejected", file_name=file.name, error=str(exc))
                self._log.record(
                    "error",
                    str(exc),
                    LogDetails(file_name=file.name, error_code=exc.code),
                )
                submission.rejected.append(file.name)
                continue
            self._uploads.append(file.name)
            self._queue.enqueue(file)
            submission.accepted.append(file.name)
        return submission

    def remove(self, index: int) -> str:
        """Drop an upload from the visible list, freeing its slot.

        Raises:
            IndexError: if ``index`` is out of range.
        """
        if not 0 <= index < len(self._uploads):
            raise IndexError(f"No upload at index {index}")
        return self._uploads.pop(index)

    def status(self) -> dict[str, object]:
        return {
            "status": self._log.processing_status(),
            "uploads": list(self._uploads),
            "max_uploads": self._max_uploads,
            "queue_depth": self._queue.depth,
        }
