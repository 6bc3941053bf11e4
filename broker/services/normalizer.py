"""Text normalizer - reformats free-form respondent text into labelled fields."""

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from ..errors import NormalizationFailure
from ..utils.logger import get_app_logger


GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


class BaseNormalizer(ABC):
    """Best-effort text rewriting collaborator."""

    @abstractmethod
    async def normalize(self, raw_text: str) -> str:
        """
        Rewrite raw respondent text into clean, field-labelled text.

        Args:
            raw_text: Accumulated respondent text

        Returns:
            Formatted text

        Raises:
            NormalizationFailure: On any failure; callers fall back to raw text
        """
        pass

    async def close(self) -> None:
        pass

    @staticmethod
    def build_prompt(raw_text: str) -> str:
        return (
            "Extract and format the following seller information in clean, simple format "
            "without excessive asterisks or bold formatting:\n\n"
            f"\"{raw_text}\"\n\n"
            "Format it with simple sections like:\n"
            "Price: [amount]\n"
            "Quality: [description]\n"
            "Delivery: [time]\n"
            "Company: [name]\n\n"
            "Keep it clean and readable."
        )


class GeminiNormalizer(BaseNormalizer):
    """Normalizer using the Google Generative Language REST API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the normalizer.

        Args:
            api_key: Generative Language API key
            model: Model name
            timeout: Request timeout in seconds
            client: Optional pre-built client (used by tests)
        """
        if not api_key:
            raise ValueError("GEMINI_API_KEY must be provided")

        self.api_key = api_key
        self.model = model
        self.client = client or httpx.AsyncClient(base_url=GEMINI_API_BASE, timeout=timeout)
        self.logger = get_app_logger()

    async def normalize(self, raw_text: str) -> str:
        payload = {
            "contents": [
                {"parts": [{"text": self.build_prompt(raw_text)}]}
            ]
        }

        try:
            response = await self.client.post(
                f"/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=payload
            )
            response.raise_for_status()
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"].strip()
        except httpx.TimeoutException as e:
            raise NormalizationFailure(f"Normalizer timed out: {e}") from e
        except httpx.HTTPError as e:
            raise NormalizationFailure(f"Normalizer request failed: {e}") from e
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise NormalizationFailure(f"Unexpected normalizer response: {e}") from e

        if not text:
            raise NormalizationFailure("Normalizer returned empty text")

        self.logger.debug(f"Normalized {len(raw_text)} chars into {len(text)} chars")
        return text

    async def close(self) -> None:
        await self.client.aclose()


def build_normalizer(settings) -> Optional[BaseNormalizer]:
    """
    Create the configured normalizer.

    Returns:
        GeminiNormalizer, or None when no API key is configured
    """
    if not settings.gemini_api_key:
        get_app_logger().warning("GEMINI_API_KEY not set, reports will carry raw text only")
        return None
    return GeminiNormalizer(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout=settings.normalizer_timeout
    )
