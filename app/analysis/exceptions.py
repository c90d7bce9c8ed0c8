class AnalysisError(Exception):
    """Base exception for all analysis client errors."""

    code = "ANALYSIS_ERROR"


class AnalysisConnectionError(AnalysisError):
    """Raised when the analysis proxy cannot be reached."""

    code = "CONNECTION_ERROR"


class UpstreamError(AnalysisError):
    """Raised when the proxy or the analysis service answers with a non-success status."""

    code = "DIFY_API_ERROR"

    def __init__(self, message: str, *, status_code: int, code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        if code:
            self.code = code


class UploadError(UpstreamError):
    """Raised when the file upload is rejected."""

    code = "UPLOAD_ERROR"


class InvalidResponseError(AnalysisError):
    """Raised when a response body is not the JSON object we expect."""

    code = "INVALID_RESPONSE"


class MissingRunIdError(InvalidResponseError):
    """Raised when a trigger response carries no run identifier."""

    code = "MISSING_RUN_ID"


class PollTimeoutError(AnalysisError):
    """Raised when a workflow run is still in progress after the last poll."""

    code = "POLL_TIMEOUT"
