from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from app.analysis.models import AnalysisResult, WorkflowRun
from app.processor.models import UploadedFile


@dataclass(slots=True)
class PipelineContext:
    file: UploadedFile
    stage: str = "idle"
    payload: UploadedFile | None = None
    fingerprint: str | None = None
    file_id: str = ""
    workflow_run: WorkflowRun | None = None
    result: AnalysisResult | None = None
    from_cache: bool = False


class PipelineStep(ABC):
    name: ClassVar[str]

    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
