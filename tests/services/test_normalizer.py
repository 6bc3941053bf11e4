"""Tests for GeminiNormalizer."""

import httpx
import pytest
from types import SimpleNamespace

from broker.errors import NormalizationFailure
from broker.services.normalizer import GEMINI_API_BASE, GeminiNormalizer, build_normalizer
from tests.fakes import null_text_handler


def _normalizer(handler) -> GeminiNormalizer:
    client = httpx.AsyncClient(base_url=GEMINI_API_BASE, transport=httpx.MockTransport(handler))
    return GeminiNormalizer(api_key="test-key", model="gemini-test", client=client)


class TestGeminiNormalizer:
    """SUT: GeminiNormalizer.normalize"""

    async def test_returns_candidate_text(self):
        """The first candidate's text is returned stripped."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            return httpx.Response(200, json={
                "candidates": [{"content": {"parts": [{"text": "  Price: 500\n"}]}}]
            })

        normalizer = _normalizer(handler)
        assert await normalizer.normalize("price 500") == "Price: 500"
        assert "models/gemini-test:generateContent" in seen["url"]
        assert "key=test-key" in seen["url"]
        await normalizer.close()

    async def test_http_error_raises_normalization_failure(self):
        """HTTP error statuses become NormalizationFailure."""
        normalizer = _normalizer(lambda request: httpx.Response(503))
        with pytest.raises(NormalizationFailure):
            await normalizer.normalize("price 500")
        await normalizer.close()

    async def test_unexpected_payload_raises_normalization_failure(self):
        """A response without candidates becomes NormalizationFailure."""
        normalizer = _normalizer(lambda request: httpx.Response(200, json={"candidates": []}))
        with pytest.raises(NormalizationFailure):
            await normalizer.normalize("price 500")
        await normalizer.close()

    async def test_null_text_raises_normalization_failure(self):
        """A candidate whose text is null becomes NormalizationFailure."""
        normalizer = _normalizer(null_text_handler)
        with pytest.raises(NormalizationFailure):
            await normalizer.normalize("price 500")
        await normalizer.close()

    async def test_timeout_raises_normalization_failure(self):
        """Timeouts become NormalizationFailure."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        normalizer = _normalizer(handler)
        with pytest.raises(NormalizationFailure):
            await normalizer.normalize("price 500")
        await normalizer.close()


class TestBuildNormalizer:
    """SUT: build_normalizer"""

    def test_none_without_key(self):
        """No API key means no normalizer."""
        assert build_normalizer(SimpleNamespace(gemini_api_key=None)) is None

    def test_gemini_with_key(self):
        """An API key selects the Gemini normalizer."""
        settings = SimpleNamespace(gemini_api_key="k", gemini_model="m", normalizer_timeout=5.0)
        assert isinstance(build_normalizer(settings), GeminiNormalizer)
