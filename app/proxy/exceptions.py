from typing import Any


class ProxyError(Exception):
    """Failure of a proxy endpoint, rendered as a JSON error envelope."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        status_code: int = 500,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    def to_envelope(self) -> dict[str, Any]:
        envelope: dict[str, Any] = {
            "status": "failed",
            "error": self.message,
            "message": self.message,
            "code": self.code,
        }
        if self.details is not None:
            envelope["details"] = self.details
        return envelope


class ConfigurationError(ProxyError):
    """Raised when required analysis service settings are missing."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Missing required environment variables: {', '.join(missing)}",
            code="DIFY_CONFIGURATION_ERROR",
            status_code=500,
        )
        self.missing = missing
