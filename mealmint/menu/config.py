"""TOML configuration loader for the menu module."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .rules import DEFAULT_TAGS

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_MIME_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/webp"]
DEFAULT_MAX_SIZE_BYTES = 6 * 1024 * 1024


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip() == "1"


@dataclass
class GeneralConfig:
    test_mode: bool = False


@dataclass
class ClaudeConfig:
    api_key: str = ""
    model: str = DEFAULT_CLAUDE_MODEL


@dataclass
class GeminiConfig:
    api_key: str = ""
    model: str = DEFAULT_GEMINI_MODEL


@dataclass
class VisionConfig:
    backend: str = "claude"
    timeout_seconds: float = 60.0
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)


@dataclass
class BudgetConfig:
    backend: str = "claude"
    timeout_seconds: float = 60.0
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)


@dataclass
class UploadConfig:
    allowed_mime_types: list[str] = field(default_factory=lambda: list(DEFAULT_MIME_TYPES))
    max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES


@dataclass
class TagsConfig:
    defaults: list[str] = field(default_factory=lambda: list(DEFAULT_TAGS))


@dataclass
class CacheConfig:
    ttl_seconds: float = 0.0


@dataclass
class MenuConfig:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    vision: VisionConfig = field(default_factory=VisionConfig)
    budget: BudgetConfig = field(default_factory=BudgetConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    tags: TagsConfig = field(default_factory=TagsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)


def load_config(path: str | Path | None = None) -> MenuConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys and test mode can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    gen = raw.get("general", {})
    vis = raw.get("vision", {})
    bud = raw.get("budget", {})
    upl = raw.get("upload", {})
    tgs = raw.get("tags", {})
    cch = raw.get("cache", {})

    vis_claude = vis.get("claude", {})
    vis_gemini = vis.get("gemini", {})
    bud_claude = bud.get("claude", {})

    # Resolve API keys: config file → environment variable
    anthropic_key = os.environ.get("ANTHROPIC_API_KEY", "")
    gemini_key = os.environ.get("GEMINI_API_KEY", "")

    return MenuConfig(
        general=GeneralConfig(
            test_mode=bool(gen.get("test_mode", False)) or _env_flag("MEALMINT_TEST_MODE"),
        ),
        vision=VisionConfig(
            backend=vis.get("backend", "claude"),
            timeout_seconds=vis.get("timeout_seconds", 60.0),
            claude=ClaudeConfig(
                api_key=vis_claude.get("api_key", "") or anthropic_key,
                model=vis_claude.get("model", DEFAULT_CLAUDE_MODEL),
            ),
            gemini=GeminiConfig(
                api_key=vis_gemini.get("api_key", "") or gemini_key,
                model=vis_gemini.get("model", DEFAULT_GEMINI_MODEL),
            ),
        ),
        budget=BudgetConfig(
            backend=bud.get("backend", "claude"),
            timeout_seconds=bud.get("timeout_seconds", 60.0),
            claude=ClaudeConfig(
                api_key=bud_claude.get("api_key", "") or anthropic_key,
                model=bud_claude.get("model", DEFAULT_CLAUDE_MODEL),
            ),
        ),
        upload=UploadConfig(
            allowed_mime_types=upl.get("allowed_mime_types", list(DEFAULT_MIME_TYPES)),
            max_size_bytes=upl.get("max_size_bytes", DEFAULT_MAX_SIZE_BYTES),
        ),
        tags=TagsConfig(
            defaults=tgs.get("defaults", list(DEFAULT_TAGS)),
        ),
        cache=CacheConfig(
            ttl_seconds=cch.get("ttl_seconds", 0.0),
        ),
    )
