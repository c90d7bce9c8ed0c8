from abc import ABC, abstractmethod

from app.analysis.models import AnalysisResult, WorkflowRun
from app.processor.models import UploadedFile


class BaseAnalysisClient(ABC):
    """Contract for clients of the receipt analysis service."""

    @abstractmethod
    async def upload(self, file: UploadedFile) -> str:
        """Upload a receipt image and return the service's file id.

        Raises:
            AnalysisConnectionError: if the request cannot be made.
            UploadError: if the upload is rejected.
            InvalidResponseError: if the body is not usable JSON.
        """

    @abstractmethod
    async def trigger_analysis(self, file_id: str) -> WorkflowRun:
        """Start the analysis workflow for an uploaded file.

        Raises:
            MissingRunIdError: if the response names no run.
        """

    @abstractmethod
    async def poll_status(self, run_id: str) -> AnalysisResult | None:
        """Return the run's result, or None while it is still running.

        Never raises for transport, parse or upstream errors: those yield the
        placeholder result.
        """

    async def aclose(self) -> None:
        """Release network resources held by the client."""
