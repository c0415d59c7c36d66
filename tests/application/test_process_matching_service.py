"""
Test suite for ProcessMatchingService.

System role: Verification of document-to-process matching modes
"""

import json
from unittest.mock import AsyncMock

import pytest

from backend.application.services import ProcessMatchingService
from backend.application.services.process_matching_service import fuzzy_score
from backend.boundary.anthropic import StepOutput
from backend.core.exceptions import ExtractionError, ValidationError


@pytest.fixture
def llm() -> AsyncMock:
    """Provide mock ClaudeExtractionClient."""
    return AsyncMock()


@pytest.fixture
def service(nocodb, tables, llm) -> ProcessMatchingService:
    return ProcessMatchingService(nocodb=nocodb, tables=tables, client=llm, model="claude-haiku")


@pytest.fixture
def processes(nocodb, tables) -> list[dict]:
    """Provide active and closed processes."""
    return nocodb.seed(
        tables.table_processos_importacao,
        {"numero_processo": "IMP-INV1", "invoiceNumber": "INV1", "empresa": "ACME Trading",
         "valor_total_estimado": 1000, "status": "active"},
        {"numero_processo": "IMP-INV2", "invoiceNumber": "INV2", "empresa": "Other", "status": "active"},
        {"numero_processo": "IMP-INV3", "invoiceNumber": "INV1", "status": "completed"},
    )


class TestFuzzyScore:
    """Test suite for fuzzy_score."""

    def test_should_weight_fields(self):
        process = {"invoiceNumber": "INV-2024-01", "empresa": "ACME Trading Ltda", "valor_total_estimado": "1000"}

        assert fuzzy_score({"invoiceNumber": "2024-01"}, process) == 5
        assert fuzzy_score({"companyName": "acme trading"}, process) == 3
        assert fuzzy_score({"amount": 1050}, process) == 2
        assert fuzzy_score({"amount": 2000}, process) == 0

    def test_numeric_invoice_numbers_are_compared_as_text(self):
        assert fuzzy_score({"invoiceNumber": "12345"}, {"invoiceNumber": 12345}) == 5
        assert fuzzy_score({"invoiceNumber": 345}, {"invoiceNumber": "INV-12345"}) == 5


class TestFindMatches:
    """Test suite for find_matches."""

    @pytest.mark.asyncio
    async def test_strict_mode_matches_invoice_of_active_processes(self, service, processes):
        result = await service.find_matches({"invoiceNumber": "INV1"}, "strict")

        assert [m["numero_processo"] for m in result["matches"]] == ["IMP-INV1"]
        assert result["totalProcesses"] == 2
        assert result["searchMode"] == "strict"

    @pytest.mark.asyncio
    async def test_fuzzy_mode_uses_minimum_score(self, service, processes):
        result = await service.find_matches({"companyName": "acme"}, "fuzzy")

        assert [m["numero_processo"] for m in result["matches"]] == ["IMP-INV1"]

    @pytest.mark.asyncio
    async def test_ai_mode_should_rank_by_confidence(self, service, processes, llm):
        answer = [
            {"processo_numero": "IMP-INV2", "confidence": 40, "matching_criteria": ["empresa"]},
            {"processo_numero": "IMP-INV1", "confidence": 95, "explanation": "invoice igual"},
            {"processo_numero": "IMP-404", "confidence": 99},
        ]
        llm.complete = AsyncMock(return_value=StepOutput(text=f"Resultado:\n{json.dumps(answer)}"))

        result = await service.find_matches({"invoiceNumber": "INV1"})

        assert [m["numero_processo"] for m in result["matches"]] == ["IMP-INV1", "IMP-INV2"]
        assert result["matches"][0]["ai_explanation"] == "invoice igual"
        assert llm.complete.call_args.kwargs == {"model": "claude-haiku", "max_tokens": 1000}

    @pytest.mark.asyncio
    async def test_numeric_invoice_in_store_matches_in_strict_and_fuzzy(self, service, nocodb, tables):
        nocodb.seed(
            tables.table_processos_importacao,
            {"numero_processo": "IMP-NUM", "invoiceNumber": 12345, "status": "active"},
        )

        strict = await service.find_matches({"invoiceNumber": "12345"}, "strict")
        fuzzy = await service.find_matches({"invoiceNumber": "12345"}, "fuzzy")

        assert [m["numero_processo"] for m in strict["matches"]] == ["IMP-NUM"]
        assert [m["numero_processo"] for m in fuzzy["matches"]] == ["IMP-NUM"]

    @pytest.mark.asyncio
    async def test_ai_non_numeric_confidence_ranks_last(self, service, processes, llm):
        answer = [
            {"processo_numero": "IMP-INV1", "confidence": "high"},
            {"processo_numero": "IMP-INV2", "confidence": 0.5},
        ]
        llm.complete = AsyncMock(return_value=StepOutput(text=json.dumps(answer)))

        result = await service.find_matches({"invoiceNumber": "INV1"}, "ai")

        assert [m["numero_processo"] for m in result["matches"]] == ["IMP-INV2", "IMP-INV1"]
        assert result["matches"][1]["ai_confidence"] == 0.0

    @pytest.mark.asyncio
    async def test_ai_failure_should_suggest_fuzzy_mode(self, service, processes, llm):
        llm.complete = AsyncMock(side_effect=ExtractionError("Claude API timeout"))

        result = await service.find_matches({"invoiceNumber": "INV1"}, "ai")

        assert result["matches"] == []
        assert result["message"] == "AI matching failed, please try fuzzy mode"
        assert result["error"] == "Claude API timeout"

    @pytest.mark.asyncio
    async def test_ai_answer_without_array_has_no_matches(self, service, processes, llm):
        llm.complete = AsyncMock(return_value=StepOutput(text="Nenhum processo corresponde."))

        result = await service.find_matches({"invoiceNumber": "INV9"}, "ai")

        assert result["matches"] == []

    @pytest.mark.asyncio
    async def test_no_active_processes(self, service):
        result = await service.find_matches({"invoiceNumber": "INV1"}, "strict")

        assert result == {"matches": [], "message": "Nenhum processo ativo encontrado"}

    @pytest.mark.asyncio
    async def test_invalid_mode_should_raise(self, service):
        with pytest.raises(ValidationError):
            await service.find_matches({}, "exact")


class TestInvoiceExists:
    """Test suite for invoice_exists."""

    @pytest.mark.asyncio
    async def test_invoice_exists(self, service, processes):
        found = await service.invoice_exists("INV2")
        missing = await service.invoice_exists("INV9")

        assert found["exists"] is True
        assert found["process"]["numero_processo"] == "IMP-INV2"
        assert missing == {"exists": False, "process": None}

    @pytest.mark.asyncio
    async def test_invoice_required(self, service):
        with pytest.raises(ValidationError):
            await service.invoice_exists("")
