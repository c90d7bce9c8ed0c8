from dataclasses import dataclass

from app.analysis.models import AnalysisResult


@dataclass(frozen=True)
class UploadedFile:
    """A receipt image selected or captured by the user."""

    name: str
    content: bytes
    media_type: str
    size: int

    @classmethod
    def from_bytes(cls, name: str, content: bytes, media_type: str) -> "UploadedFile":
        return cls(name=name, content=content, media_type=media_type, size=len(content))


@dataclass(frozen=True)
class Diagnostic:
    """Why a pipeline run fell back to the placeholder result."""

    stage: str
    code: str
    message: str


@dataclass(frozen=True)
class AnalysisOutcome:
    """Terminal outcome for one file: always a result, sometimes a diagnostic."""

    result: AnalysisResult
    diagnostic: Diagnostic | None = None
    from_cache: bool = False

    @property
    def is_fallback(self) -> bool:
        return self.diagnostic is not None
