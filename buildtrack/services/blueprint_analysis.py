"""
Blueprint analysis service.

Forwards a blueprint image to a vision model with a fixed construction
analyst prompt and parses the model's JSON answer.
"""

import base64
import binascii
import json
from typing import Optional, Protocol

import httpx
import structlog
from pydantic import ValidationError

from ..config.settings import Settings
from ..core.exceptions import BlueprintAnalysisError, ValidationFailedError
from ..integrations.azure_openai_client import AzureOpenAIVisionClient
from ..integrations.gemini_client import GeminiClient
from ..models.blueprint import BlueprintAnalysisRequest, BlueprintAnalysisResponse

logger = structlog.get_logger(__name__)

ANALYSIS_PROMPT = """
You are an expert construction analyst.

Tasks:
1. Analyze the uploaded blueprint image for any measurement errors.
2. Recommend sustainable materials for construction.
3. Provide a price range in PHP for your recommended material.
4. Extract 5 important keywords related to the blueprint content.
5. Suggest 5 related questions that a user might ask about this blueprint.

Respond ONLY in the following JSON format:

{
  "analysis": "short analysis text here",
  "keywords": ["keyword1", "keyword2", "keyword3", "keyword4", "keyword5"],
  "related_questions": ["question1", "question2", "question3", "question4", "question5"]
}
""".strip()


class VisionModel(Protocol):
    async def generate(self, prompt: str, image_base64: str, mime_type: str = "image/jpeg") -> str:
        ...


def build_prompt(additional_prompt: Optional[str] = None) -> str:
    if additional_prompt and additional_prompt.strip():
        return f"{ANALYSIS_PROMPT}\n\n{additional_prompt.strip()}"
    return ANALYSIS_PROMPT


def normalize_image(image_base64: str, mime_type: str) -> tuple:
    """
    Strip an optional ``data:<mime>;base64,`` prefix and check the payload decodes.

    Returns the bare base64 string and the effective mime type.
    """
    payload = (image_base64 or "").strip()
    if payload.startswith("data:") and "," in payload:
        header, payload = payload.split(",", 1)
        declared = header[len("data:"):].split(";", 1)[0]
        if declared:
            mime_type = declared

    if not payload:
        raise ValidationFailedError("Image data is missing.")
    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationFailedError("Image data is not valid base64.") from None
    return payload, mime_type


def parse_analysis(raw_text: str) -> BlueprintAnalysisResponse:
    """Parse the model's JSON answer, tolerating a markdown code fence."""
    text = raw_text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Error parsing model response as JSON", error=str(e))
        raise BlueprintAnalysisError("Failed to parse model response.", details=raw_text) from e

    if isinstance(data, dict) and "relatedQuestions" in data and "related_questions" not in data:
        data["related_questions"] = data.pop("relatedQuestions")

    try:
        return BlueprintAnalysisResponse.model_validate(data)
    except ValidationError as e:
        raise BlueprintAnalysisError("Model response has an unexpected shape.", details=raw_text) from e


def build_vision_model(settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> VisionModel:
    provider = settings.blueprint_provider.lower()
    if provider == "gemini":
        return GeminiClient.from_settings(settings, http_client=http_client)
    if provider == "azure_openai":
        return AzureOpenAIVisionClient.from_settings(settings)
    raise ValueError(f"Unknown blueprint provider: {settings.blueprint_provider}")


class BlueprintAnalysisService:
    """Validates the request, calls the vision model and parses its answer."""

    def __init__(self, model: VisionModel):
        self.model = model

    async def analyze(self, request: BlueprintAnalysisRequest) -> BlueprintAnalysisResponse:
        image_base64, mime_type = normalize_image(request.image_base64, request.mime_type)
        prompt = build_prompt(request.additional_prompt)

        raw_text = await self.model.generate(prompt, image_base64, mime_type)
        result = parse_analysis(raw_text)
        logger.info(
            "Blueprint analyzed",
            keyword_count=len(result.keywords),
            question_count=len(result.related_questions),
        )
        return result
