from dataclasses import asdict, dataclass, field
from typing import Any

Amount = str | int | float


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_amount(value: object) -> Amount:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (str, int, float)):
        return value
    return str(value)


@dataclass(frozen=True)
class AnalysisResult:
    """Fields extracted from a receipt. Empty strings mean nothing was found."""

    date: str = ""
    category: str = ""
    amount: Amount = ""

    @classmethod
    def placeholder(cls) -> "AnalysisResult":
        return cls()

    @classmethod
    def from_payload(cls, payload: object) -> "AnalysisResult":
        """Build a result from a decoded workflow output.

        Anything other than a mapping (e.g. a raw undecodable string) yields
        the placeholder result.
        """
        if not isinstance(payload, dict):
            return cls.placeholder()
        return cls(
            date=_as_text(payload.get("date")),
            category=_as_text(payload.get("category")),
            amount=_as_amount(payload.get("amount")),
        )

    @property
    def is_empty(self) -> bool:
        return self == self.placeholder()

    def to_dict(self) -> dict[str, Amount]:
        return asdict(self)


@dataclass(frozen=True)
class WorkflowRun:
    """Handle for a workflow run while analysis is in flight."""

    run_id: str
    status: str = ""
    outputs: dict[str, Any] = field(default_factory=dict)
