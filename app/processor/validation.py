from collections.abc import Iterable

from app.config.settings import Settings
from app.processor.exceptions import FileValidationError
from app.processor.models import UploadedFile


class FileValidator:
    """Checks media type and declared size before any network call."""

    def __init__(self, *, allowed_media_types: Iterable[str], max_bytes: int) -> None:
        self._allowed = tuple(allowed_media_types)
        self._max_bytes = max_bytes

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileValidator":
        return cls(
            allowed_media_types=settings.allowed_mime_types,
            max_bytes=settings.max_upload_bytes,
        )

    def validate(self, file: UploadedFile) -> None:
        """Raise FileValidationError if ``file`` may not be analyzed."""
        if file.media_type not in self._allowed:
            raise FileValidationError(
                f"Unsupported file type: {file.media_type or 'unknown'}. "
                f"Supported types are: {', '.join(self._allowed)}"
            )
        if file.size > self._max_bytes:
            raise FileValidationError(
                f"File size too large: {file.size / 1024 / 1024:.2f}MB. "
                f"Maximum size is {self._max_bytes / 1024 / 1024:.0f}MB"
            )
