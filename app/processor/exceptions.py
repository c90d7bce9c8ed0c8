class ProcessorError(Exception):
    """Base exception for all processor-related errors."""

    code = "PROCESSOR_ERROR"


class FileValidationError(ProcessorError):
    """Raised when a file has a disallowed media type or is too large."""

    code = "VALIDATION_ERROR"


class FingerprintError(ProcessorError):
    """Raised when a cache key cannot be derived from a file."""

    code = "FINGERPRINT_ERROR"


class ImageCompressionError(ProcessorError):
    """Raised when an image cannot be decoded or re-encoded."""

    code = "COMPRESSION_ERROR"
