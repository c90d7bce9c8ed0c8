"""Offline analysis client.

Returns a fixed receipt without any network calls. Handy for local development
of the upload flow when no analysis service is configured.
"""

import json
from typing import ClassVar

from app.analysis.base import BaseAnalysisClient
from app.analysis.models import AnalysisResult, WorkflowRun
from app.analysis.outputs import extract_output
from app.processor.models import UploadedFile


class ExampleAnalysisClient(BaseAnalysisClient):
    """Example client that reports the same receipt for every upload."""

    DEFAULT_RESULT: ClassVar[dict[str, object]] = {
        "date": "2024-02-01",
        "category": "Travel",
        "amount": 4000,
    }

    def __init__(self, *, output_key: str) -> None:
        self._output_key = output_key
        self._uploads = 0

    async def upload(self, file: UploadedFile) -> str:
        self._uploads += 1
        return f"example-file-{self._uploads}"

    async def trigger_analysis(self, file_id: str) -> WorkflowRun:
        return WorkflowRun(
            run_id=f"example-run-{file_id}",
            status="succeeded",
            outputs={self._output_key: json.dumps(self.DEFAULT_RESULT)},
        )

    async def poll_status(self, run_id: str) -> AnalysisResult | None:
        _ = run_id
        outputs = {self._output_key: json.dumps(self.DEFAULT_RESULT)}
        return AnalysisResult.from_payload(extract_output(outputs, self._output_key))
