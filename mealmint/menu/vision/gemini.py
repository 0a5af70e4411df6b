"""Gemini API vision backend for menu extraction."""

from __future__ import annotations

from .. import errors
from ..models import MenuInfo
from . import SYSTEM_PROMPT, USER_PROMPT, MenuExtractor, parse_menu_response


class GeminiMenuExtractor(MenuExtractor):
    """Read menu photos using Google Gemini's vision capability."""

    name = "gemini"

    def __init__(self, api_key: str = "", model: str = "gemini-2.0-flash") -> None:
        self._api_key = api_key
        self._model = model

    async def extract_menu(self, image: bytes, mime_type: str) -> MenuInfo:
        if not self._api_key:
            raise ValueError(
                "Gemini API key is not set. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model, system_instruction=SYSTEM_PROMPT)

        parts: list = [
            {"mime_type": mime_type, "data": image},
            USER_PROMPT,
        ]
        try:
            response = await model.generate_content_async(
                parts,
                generation_config={
                    "temperature": 0.2,
                    "response_mime_type": "application/json",
                },
            )
            text = response.text
        except Exception as exc:
            raise errors.vision_api_error(f"Gemini vision request failed: {exc}", exc) from exc

        return parse_menu_response(text)
