"""
Unit tests for the Gemini client.
"""

import json

import httpx
import pytest

from buildtrack.core.exceptions import BlueprintAnalysisError
from buildtrack.integrations.gemini_client import GeminiClient


def gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_client(handler, api_key="secret"):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiClient(api_key=api_key, model="gemini-1.5-flash", http_client=http_client)


class TestGeminiClient:
    """Test cases for GeminiClient."""

    @pytest.mark.asyncio
    async def test_sends_prompt_and_inline_image(self, png_base64):
        seen = {}

        def handler(request):
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_reply('{"analysis": "ok"}'))

        text = await make_client(handler).generate("Review this plan", png_base64, "image/png")

        assert text == '{"analysis": "ok"}'
        assert seen["url"].path.endswith("/gemini-1.5-flash:generateContent")
        assert seen["url"].params["key"] == "secret"
        parts = seen["body"]["contents"][0]["parts"]
        assert parts[0] == {"text": "Review this plan"}
        assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": png_base64}}

    @pytest.mark.asyncio
    async def test_missing_api_key(self, png_base64):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(BlueprintAnalysisError) as excinfo:
            await make_client(handler, api_key="").generate("p", png_base64)
        assert excinfo.value.status_code == 500

    @pytest.mark.asyncio
    async def test_upstream_error_carries_details(self, png_base64):
        def handler(request):
            return httpx.Response(403, json={"error": {"message": "API key not valid"}})

        with pytest.raises(BlueprintAnalysisError) as excinfo:
            await make_client(handler).generate("p", png_base64)
        assert excinfo.value.status_code == 502
        assert excinfo.value.details == {"error": {"message": "API key not valid"}}

    @pytest.mark.asyncio
    async def test_transport_error(self, png_base64):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(BlueprintAnalysisError) as excinfo:
            await make_client(handler).generate("p", png_base64)
        assert "connection refused" in excinfo.value.details

    @pytest.mark.asyncio
    async def test_non_json_body(self, png_base64):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        with pytest.raises(BlueprintAnalysisError) as excinfo:
            await make_client(handler).generate("p", png_base64)
        assert excinfo.value.status_code == 502
        assert excinfo.value.message == "Invalid response from Gemini API."
        assert excinfo.value.details == "<html>gateway</html>"

    @pytest.mark.asyncio
    async def test_empty_candidates(self, png_base64):
        def handler(request):
            return httpx.Response(200, json={"candidates": []})

        with pytest.raises(BlueprintAnalysisError, match="Invalid response"):
            await make_client(handler).generate("p", png_base64)
