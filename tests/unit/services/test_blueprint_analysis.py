"""
Unit tests for the blueprint analysis service.
"""

import pytest

from buildtrack.core.exceptions import BlueprintAnalysisError, ValidationFailedError
from buildtrack.integrations.azure_openai_client import AzureOpenAIVisionClient
from buildtrack.integrations.gemini_client import GeminiClient
from buildtrack.models.blueprint import BlueprintAnalysisRequest
from buildtrack.services.blueprint_analysis import (
    ANALYSIS_PROMPT,
    BlueprintAnalysisService,
    build_prompt,
    build_vision_model,
    normalize_image,
    parse_analysis,
)


class TestParseAnalysis:
    """Test cases for parsing the model answer."""

    def test_plain_json(self):
        result = parse_analysis('{"analysis": "ok", "keywords": ["a"], "related_questions": ["q?"]}')
        assert result.analysis == "ok"
        assert result.keywords == ["a"]
        assert result.related_questions == ["q?"]

    def test_fenced_json(self):
        result = parse_analysis('```json\n{"analysis": "fenced", "keywords": []}\n```')
        assert result.analysis == "fenced"

    def test_camel_case_questions_accepted(self):
        result = parse_analysis('{"analysis": "x", "relatedQuestions": ["why?"]}')
        assert result.related_questions == ["why?"]

    def test_not_json(self):
        with pytest.raises(BlueprintAnalysisError) as excinfo:
            parse_analysis("The blueprint looks fine.")
        assert excinfo.value.status_code == 502
        assert excinfo.value.details == "The blueprint looks fine."

    def test_wrong_shape(self):
        with pytest.raises(BlueprintAnalysisError):
            parse_analysis('["just", "a", "list"]')


class TestNormalizeImage:
    """Test cases for image payload handling."""

    def test_data_url_prefix_stripped(self, png_base64):
        payload, mime_type = normalize_image(f"data:image/png;base64,{png_base64}", "image/jpeg")
        assert payload == png_base64
        assert mime_type == "image/png"

    def test_bare_payload_keeps_mime_type(self, png_base64):
        assert normalize_image(png_base64, "image/jpeg") == (png_base64, "image/jpeg")

    @pytest.mark.parametrize("value", ["", "   ", "data:image/png;base64,"])
    def test_missing_image(self, value):
        with pytest.raises(ValidationFailedError, match="missing"):
            normalize_image(value, "image/jpeg")

    def test_invalid_base64(self):
        with pytest.raises(ValidationFailedError, match="base64"):
            normalize_image("not base64!!", "image/jpeg")


def test_build_prompt_appends_user_text():
    assert build_prompt(None) == ANALYSIS_PROMPT
    assert build_prompt("  Focus on the roof.  ").endswith("\n\nFocus on the roof.")


def test_build_vision_model_selects_provider(settings):
    assert isinstance(build_vision_model(settings), GeminiClient)
    settings.blueprint_provider = "azure_openai"
    assert isinstance(build_vision_model(settings), AzureOpenAIVisionClient)
    settings.blueprint_provider = "unknown"
    with pytest.raises(ValueError):
        build_vision_model(settings)


class TestBlueprintAnalysisService:
    """Test cases for BlueprintAnalysisService."""

    @pytest.mark.asyncio
    async def test_analyze(self, vision_model, png_base64):
        service = BlueprintAnalysisService(vision_model)
        result = await service.analyze(BlueprintAnalysisRequest(
            image_base64=png_base64,
            additional_prompt="Budget is tight.",
            mime_type="image/png",
        ))

        assert len(result.keywords) == 5
        assert len(result.related_questions) == 5
        call = vision_model.calls[0]
        assert call["image_base64"] == png_base64
        assert call["mime_type"] == "image/png"
        assert call["prompt"].endswith("Budget is tight.")

    @pytest.mark.asyncio
    async def test_missing_image_never_calls_model(self, vision_model):
        service = BlueprintAnalysisService(vision_model)
        with pytest.raises(ValidationFailedError):
            await service.analyze(BlueprintAnalysisRequest())
        assert vision_model.calls == []

    @pytest.mark.asyncio
    async def test_azure_client_without_configuration(self, png_base64):
        client = AzureOpenAIVisionClient(None, "gpt-4o")
        with pytest.raises(BlueprintAnalysisError) as excinfo:
            await client.generate("prompt", png_base64)
        assert excinfo.value.status_code == 500
