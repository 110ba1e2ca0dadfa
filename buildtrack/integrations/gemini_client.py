"""
Google Gemini client for blueprint image analysis.
Talks to the ``generateContent`` REST endpoint with httpx.
"""

from typing import Any, Optional

import httpx
import structlog

from ..config.settings import Settings
from ..core.exceptions import BlueprintAnalysisError

logger = structlog.get_logger(__name__)


class GeminiClient:
    """Sends a prompt plus one inline image to Gemini and returns the text answer."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        endpoint: str = "https://generativelanguage.googleapis.com/v1beta/models",
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            endpoint=settings.gemini_endpoint,
            timeout=settings.http_timeout_seconds,
            http_client=http_client,
        )

    async def generate(self, prompt: str, image_base64: str, mime_type: str = "image/jpeg") -> str:
        if not self.api_key:
            raise BlueprintAnalysisError("Gemini API key is missing in server configuration.", status_code=500)

        url = f"{self.endpoint}/{self.model}:generateContent"
        body = {
            "contents": [
                {
                    "parts": [
                        {"text": prompt},
                        {"inline_data": {"mime_type": mime_type, "data": image_base64}},
                    ]
                }
            ]
        }

        logger.info("Calling Gemini", model=self.model, image_chars=len(image_base64))
        try:
            response = await self._post(url, body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            details = _error_details(e.response)
            logger.error("Gemini returned an error", status_code=e.response.status_code, details=details)
            raise BlueprintAnalysisError("Failed to contact Gemini API.", details=details) from e
        except httpx.HTTPError as e:
            logger.error("Error contacting Gemini API", error=str(e), error_type=type(e).__name__)
            raise BlueprintAnalysisError("Failed to contact Gemini API.", details=str(e)) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Gemini returned a non-JSON body", error=str(e))
            raise BlueprintAnalysisError("Invalid response from Gemini API.", details=response.text) from e

        text = _first_candidate_text(data)
        if not text:
            raise BlueprintAnalysisError("Invalid response from Gemini API.")
        return text

    async def _post(self, url: str, body: dict) -> httpx.Response:
        params = {"key": self.api_key}
        if self._http_client is not None:
            return await self._http_client.post(url, params=params, json=body, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, params=params, json=body)


def _first_candidate_text(data: Any) -> Optional[str]:
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None


def _error_details(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
