"""
Azure OpenAI vision client for blueprint image analysis.
"""

from typing import Optional

import structlog
from openai import AsyncAzureOpenAI, OpenAIError

from ..config.settings import Settings
from ..core.exceptions import BlueprintAnalysisError

logger = structlog.get_logger(__name__)


class AzureOpenAIVisionClient:
    """Sends a prompt plus one image to an Azure OpenAI chat deployment."""

    def __init__(self, client: Optional[AsyncAzureOpenAI], deployment_name: str):
        self.client = client
        self.deployment_name = deployment_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "AzureOpenAIVisionClient":
        client = None
        if settings.azure_openai_endpoint and settings.azure_openai_api_key:
            client = AsyncAzureOpenAI(
                azure_endpoint=settings.azure_openai_endpoint,
                api_key=settings.azure_openai_api_key,
                api_version=settings.azure_openai_api_version,
                timeout=settings.http_timeout_seconds,
                max_retries=0,
            )
        return cls(client, settings.azure_openai_deployment_name)

    async def generate(self, prompt: str, image_base64: str, mime_type: str = "image/jpeg") -> str:
        if self.client is None:
            raise BlueprintAnalysisError("Azure OpenAI is missing in server configuration.", status_code=500)

        logger.info("Calling Azure OpenAI", deployment=self.deployment_name, image_chars=len(image_base64))
        try:
            response = await self.client.chat.completions.create(
                model=self.deployment_name,
                messages=[
                    {"role": "system", "content": "You are an expert construction analyst. Always respond with valid JSON."},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{image_base64}"}},
                        ],
                    },
                ],
                max_tokens=800,
                temperature=0.2,
            )
        except OpenAIError as e:
            logger.error("Error contacting Azure OpenAI", error=str(e), error_type=type(e).__name__)
            raise BlueprintAnalysisError("Failed to contact Azure OpenAI.", details=str(e)) from e

        if not response.choices or not response.choices[0].message.content:
            raise BlueprintAnalysisError("Invalid response from Azure OpenAI.")
        return response.choices[0].message.content
