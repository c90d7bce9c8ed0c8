"""Tests for ExampleAnalysisClient (offline reference client)."""

import pytest

from app.analysis.example_client import ExampleAnalysisClient
from app.analysis.models import AnalysisResult
from app.processor.models import UploadedFile


class TestExampleAnalysisClient:
    @pytest.mark.asyncio
    async def test_full_round_returns_fixed_result(self) -> None:
        client = ExampleAnalysisClient(output_key="成功")
        file = UploadedFile.from_bytes("r.jpg", b"data", "image/jpeg")

        file_id = await client.upload(file)
        run = await client.trigger_analysis(file_id)
        result = await client.poll_status(run.run_id)

        assert run.status == "succeeded"
        assert result == AnalysisResult(date="2024-02-01", category="Travel", amount=4000)

    @pytest.mark.asyncio
    async def test_trigger_outputs_use_configured_key(self) -> None:
        client = ExampleAnalysisClient(output_key="result")
        run = await client.trigger_analysis("f1")
        assert "result" in run.outputs

    @pytest.mark.asyncio
    async def test_file_ids_are_distinct(self) -> None:
        client = ExampleAnalysisClient(output_key="成功")
        file = UploadedFile.from_bytes("r.jpg", b"data", "image/jpeg")
        assert await client.upload(file) != await client.upload(file)
