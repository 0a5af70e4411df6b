"""Claude API vision backend for menu extraction."""

from __future__ import annotations

import base64

from .. import errors
from ..models import MenuInfo
from . import (
    SYSTEM_PROMPT,
    USER_PROMPT,
    MenuExtractor,
    parse_menu_response,
    response_text,
)

# Claude accepts image/jpeg but not the image/jpg alias
_MEDIA_TYPE_ALIASES = {"image/jpg": "image/jpeg"}


class ClaudeMenuExtractor(MenuExtractor):
    """Read menu photos using Claude's vision capability."""

    name = "claude"

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def extract_menu(self, image: bytes, mime_type: str) -> MenuInfo:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key is not set. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": _MEDIA_TYPE_ALIASES.get(mime_type, mime_type),
                    "data": base64.standard_b64encode(image).decode(),
                },
            },
            {"type": "text", "text": USER_PROMPT},
        ]

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=4096,
                temperature=0.2,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIError as exc:
            raise errors.vision_api_error(f"Claude vision request failed: {exc}", exc) from exc

        text = response_text(response.content)
        return parse_menu_response(text)
