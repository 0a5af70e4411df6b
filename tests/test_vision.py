"""Tests for menu extractors (mocked API calls)."""

import json
import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mealmint.menu import errors
from mealmint.menu.config import MenuConfig
from mealmint.menu.errors import MenuAnalysisError
from mealmint.menu.vision import (
    create_extractor,
    normalize_menu_payload,
    parse_menu_response,
)
from mealmint.menu.vision.claude import ClaudeMenuExtractor
from mealmint.menu.vision.gemini import GeminiMenuExtractor
from mealmint.menu.vision.mock import SAMPLE_MENU, MockMenuExtractor

_MENU_JSON = json.dumps(
    {
        "currency": "€",
        "items": [
            {"name": "Margherita", "description": "Tomato, basil", "price": 9.5, "category": "Pizza"},
            {"name": "Tiramisu", "price": "6"},
        ],
    }
)


class TestCreateExtractor:
    def test_missing_key_falls_back_to_mock(self):
        config = MenuConfig()
        assert isinstance(create_extractor(config), MockMenuExtractor)

    def test_claude_with_key(self):
        config = MenuConfig()
        config.vision.claude.api_key = "test-key"
        assert isinstance(create_extractor(config), ClaudeMenuExtractor)

    def test_gemini_with_key(self):
        config = MenuConfig()
        config.vision.backend = "gemini"
        config.vision.gemini.api_key = "test-key"
        assert isinstance(create_extractor(config), GeminiMenuExtractor)

    def test_test_mode_forces_mock(self):
        config = MenuConfig()
        config.general.test_mode = True
        config.vision.claude.api_key = "test-key"
        assert isinstance(create_extractor(config), MockMenuExtractor)

    def test_mock_backend(self):
        config = MenuConfig()
        config.vision.backend = "mock"
        assert isinstance(create_extractor(config), MockMenuExtractor)

    def test_unknown_backend(self):
        config = MenuConfig()
        config.vision.backend = "unknown"
        with pytest.raises(ValueError, match="Unknown vision backend"):
            create_extractor(config)


class TestParseMenuResponse:
    def test_parse_json_object(self):
        menu = parse_menu_response(_MENU_JSON)
        assert menu.currency == "€"
        assert [i.name for i in menu.items] == ["Margherita", "Tiramisu"]
        assert menu.items[1].price == 6.0
        assert menu.items[1].description == ""

    def test_parse_with_markdown_fences(self):
        menu = parse_menu_response(f"```json\n{_MENU_JSON}\n```")
        assert len(menu.items) == 2

    def test_empty_response(self):
        with pytest.raises(MenuAnalysisError) as exc_info:
            parse_menu_response("   ")
        assert exc_info.value.code == errors.VISION_API_ERROR

    def test_invalid_json(self):
        with pytest.raises(MenuAnalysisError) as exc_info:
            parse_menu_response("not json at all")
        assert exc_info.value.code == errors.VISION_API_ERROR
        assert exc_info.value.original_error is not None

    def test_non_object_json(self):
        with pytest.raises(MenuAnalysisError) as exc_info:
            parse_menu_response("[1, 2]")
        assert exc_info.value.code == errors.VISION_API_ERROR


class TestNormalizeMenuPayload:
    def test_drops_invalid_items(self):
        menu = normalize_menu_payload(
            {
                "items": [
                    {"name": "  ", "price": 5},
                    {"name": "Soup", "price": "abc"},
                    {"name": "Bread", "price": -1},
                    {"name": "Water", "price": None},
                    {"name": "Salad", "price": 7},
                    "garbage",
                ]
            }
        )
        assert [i.name for i in menu.items] == ["Salad"]

    def test_default_currency(self):
        menu = normalize_menu_payload({"items": [{"name": "Salad", "price": 7}]})
        assert menu.currency == "$"

    def test_zero_items_is_hard_failure(self):
        with pytest.raises(MenuAnalysisError) as exc_info:
            normalize_menu_payload({"currency": "$", "items": []})
        assert exc_info.value.code == errors.NO_MENU_ITEMS
        assert exc_info.value.status_code == 422

    def test_missing_items_key(self):
        with pytest.raises(MenuAnalysisError) as exc_info:
            normalize_menu_payload({"currency": "$"})
        assert exc_info.value.code == errors.NO_MENU_ITEMS


class TestMockMenuExtractor:
    @pytest.mark.asyncio
    async def test_returns_sample_menu(self):
        menu = await MockMenuExtractor().extract_menu(b"anything", "image/png")
        assert [i.name for i in menu.items] == [
            "Spring Rolls",
            "Fried Rice",
            "Kung Pao Chicken",
            "Jasmine Tea",
            "Mango Pudding",
        ]

    @pytest.mark.asyncio
    async def test_returns_independent_copies(self):
        extractor = MockMenuExtractor()
        menu = await extractor.extract_menu(b"x", "image/png")
        menu.items.clear()
        assert len(SAMPLE_MENU.items) == 5


class TestClaudeMenuExtractor:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        extractor = ClaudeMenuExtractor(api_key="")
        with pytest.raises(ValueError, match="API key"):
            await extractor.extract_menu(b"img", "image/jpeg")

    @pytest.mark.asyncio
    async def test_extract_mocked(self):
        mock_response = MagicMock()
        mock_response.content = [MagicMock(text=_MENU_JSON)]

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        mock_anthropic = MagicMock()
        mock_anthropic.AsyncAnthropic.return_value = mock_client

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            extractor = ClaudeMenuExtractor(api_key="test-key")
            menu = await extractor.extract_menu(b"\xff\xd8\xff\xe0fake-jpeg", "image/jpg")

        assert menu.items[0].name == "Margherita"
        kwargs = mock_client.messages.create.call_args.kwargs
        image_block = kwargs["messages"][0]["content"][0]
        assert image_block["source"]["media_type"] == "image/jpeg"

    @pytest.mark.asyncio
    async def test_non_text_first_block(self):
        mock_response = MagicMock()
        mock_response.content = [
            SimpleNamespace(type="thinking", thinking="reading the menu"),
            SimpleNamespace(type="text", text=_MENU_JSON),
        ]
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)
        mock_anthropic = MagicMock()
        mock_anthropic.AsyncAnthropic.return_value = mock_client

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            extractor = ClaudeMenuExtractor(api_key="test-key")
            menu = await extractor.extract_menu(b"img", "image/png")

        assert [i.name for i in menu.items] == ["Margherita", "Tiramisu"]

    @pytest.mark.asyncio
    async def test_no_text_blocks_is_vision_error(self):
        mock_response = MagicMock()
        mock_response.content = [SimpleNamespace(type="thinking", thinking="hmm")]
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)
        mock_anthropic = MagicMock()
        mock_anthropic.AsyncAnthropic.return_value = mock_client

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            extractor = ClaudeMenuExtractor(api_key="test-key")
            with pytest.raises(MenuAnalysisError) as exc_info:
                await extractor.extract_menu(b"img", "image/png")

        assert exc_info.value.code == errors.VISION_API_ERROR

    @pytest.mark.asyncio
    async def test_api_error_is_wrapped(self):
        class FakeAPIError(Exception):
            pass

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(side_effect=FakeAPIError("boom"))

        mock_anthropic = MagicMock()
        mock_anthropic.APIError = FakeAPIError
        mock_anthropic.AsyncAnthropic.return_value = mock_client

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            extractor = ClaudeMenuExtractor(api_key="test-key")
            with pytest.raises(MenuAnalysisError) as exc_info:
                await extractor.extract_menu(b"img", "image/png")

        assert exc_info.value.code == errors.VISION_API_ERROR


class TestGeminiMenuExtractor:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        extractor = GeminiMenuExtractor(api_key="")
        with pytest.raises(ValueError, match="API key"):
            await extractor.extract_menu(b"img", "image/jpeg")

    @pytest.mark.asyncio
    async def test_extract_mocked(self):
        mock_model = MagicMock()
        mock_model.generate_content_async = AsyncMock(
            return_value=MagicMock(text=_MENU_JSON)
        )
        mock_genai = MagicMock()
        mock_genai.GenerativeModel.return_value = mock_model
        mock_google = MagicMock()
        mock_google.generativeai = mock_genai

        with patch.dict(
            sys.modules,
            {"google": mock_google, "google.generativeai": mock_genai},
        ):
            extractor = GeminiMenuExtractor(api_key="test-key")
            menu = await extractor.extract_menu(b"img", "image/png")

        assert menu.currency == "€"
        mock_genai.configure.assert_called_once_with(api_key="test-key")
