"""Dietary tag parsing: normalization, negative-term expansion and precedence."""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from .rules import CORE_HARD_TAGS, DEFAULT_TAGS, DINING_STYLE_TAGS, INGREDIENT_SYNONYMS

_TAG_INVALID_CHARS = re.compile(r"[^a-z0-9:\- ]")
_KEY_INVALID_CHARS = re.compile(r"[^a-z0-9]")

_NEGATIVE_PREFIXES = ("no ", "avoid ", "exclude ")
_FREE_SUFFIXES = (" free", "-free")

# Tried in order after the attached ``no<word>`` form; first match wins.
_NEGATIVE_AFFIXES: list[tuple[str, str]] = [
    ("prefix", "no-"),
    ("prefix", "no:"),
    ("prefix", "avoid "),
    ("prefix", "avoid-"),
    ("prefix", "avoid:"),
    ("prefix", "exclude "),
    ("prefix", "exclude-"),
    ("prefix", "exclude:"),
    ("suffix", "-free"),
    ("suffix", " free"),
]


@dataclass
class TagClassification:
    hard_core: list[str] = field(default_factory=list)
    neg_keys: list[str] = field(default_factory=list)
    soft: list[str] = field(default_factory=list)


def _dedupe(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _split_tag_string(text: str) -> list[str]:
    tokens: list[str] = []
    for part in text.split(","):
        part = part.strip()
        lowered = part.lower()
        if lowered.startswith(_NEGATIVE_PREFIXES) or lowered.endswith(_FREE_SUFFIXES):
            # "no mushroom" stays one tag
            tokens.append(part)
        else:
            tokens.extend(part.split())
    return tokens


def normalize_tags(
    tags: str | Iterable[str] | None,
    defaults: list[str] | None = None,
) -> list[str]:
    """Turn free-form tag input into a deduplicated list of canonical tags.

    A string is split on commas, then on whitespace unless the segment is a
    negative phrase such as ``no mushroom`` or ``dairy free``. Any other
    iterable is taken element by element. Tags are lower-cased and stripped
    of everything outside ``[a-z0-9: -]``.

    Never returns an empty list: when nothing survives, a fresh copy of the
    default tags is returned.
    """
    fallback = DEFAULT_TAGS if defaults is None else defaults

    if not tags:
        return list(fallback)
    if isinstance(tags, str):
        raw = _split_tag_string(tags)
    elif isinstance(tags, Iterable):
        raw = [str(t) for t in tags if t is not None]
    else:
        return list(fallback)

    cleaned: list[str] = []
    for tag in raw:
        tag = _TAG_INVALID_CHARS.sub("", tag.lower().strip()).strip()
        if tag:
            cleaned.append(tag)

    unique = _dedupe(cleaned)
    return unique if unique else list(fallback)


def _negative_key(tag: str) -> str | None:
    if tag.startswith("no") and len(tag) > 2:
        return tag[2:]
    for kind, affix in _NEGATIVE_AFFIXES:
        if kind == "prefix" and tag.startswith(affix):
            return tag[len(affix):]
        if kind == "suffix" and tag.endswith(affix):
            return tag[: -len(affix)]
    return None


def parse_dynamic_negative_keys(tags: Iterable[str]) -> list[str]:
    """Extract the excluded ingredient from every negative tag.

    ``no-dairy`` → ``dairy``, ``avoid nuts`` → ``nuts``, ``gluten-free`` →
    ``gluten``. Any word is accepted, not only ones with known synonyms.
    """
    keys: list[str] = []
    for tag in tags:
        raw = _negative_key(tag)
        if raw is None:
            continue
        key = _KEY_INVALID_CHARS.sub("", raw)
        if key:
            keys.append(key)
    return _dedupe(keys)


def terms_for_key(key: str) -> list[str]:
    """Known ingredients expand to their synonyms; anything else is literal."""
    return INGREDIENT_SYNONYMS.get(key, [key])


def build_dynamic_hard_terms(negative_keys: Iterable[str]) -> list[str]:
    terms: list[str] = []
    for key in negative_keys:
        terms.extend(terms_for_key(key))
    return _dedupe(term.lower() for term in terms)


def _is_negative_tag(tag: str) -> bool:
    return (
        tag.startswith(("no", "avoid", "exclude"))
        or tag.endswith("free")
    )


def split_hard_soft_tags(tags: Iterable[str]) -> TagClassification:
    """Partition tags into core diets, negative keys and soft preferences."""
    tags = list(tags)
    return TagClassification(
        hard_core=[t for t in tags if t in CORE_HARD_TAGS],
        neg_keys=parse_dynamic_negative_keys(tags),
        soft=[
            t for t in tags
            if t not in CORE_HARD_TAGS and not _is_negative_tag(t)
        ],
    )


def tags_hash(tags: Iterable[str] | None) -> str:
    """SHA-1 of the sorted, comma-joined tags; order-insensitive."""
    joined = ",".join(sorted(tags or []))
    return hashlib.sha1(joined.encode("utf-8")).hexdigest()


def map_profile_dining_style_to_tags(styles: Iterable[str] | None) -> list[str]:
    """Map profile dining styles (``"Gluten-free"``, ``"Dairy Free"``) to tags.

    Unknown styles are dropped.
    """
    tags: list[str] = []
    for style in styles or []:
        tag = DINING_STYLE_TAGS.get(str(style).strip().lower())
        if tag:
            tags.append(tag)
    return _dedupe(tags)


def determine_final_tags(
    request_tags: str | Iterable[str] | None = None,
    profile_tags: Iterable[str] | None = None,
    ignore_profile_tags: bool = False,
    defaults: list[str] | None = None,
) -> tuple[list[str], str]:
    """Choose the tag set for a request and report where it came from.

    Explicit request tags win, then profile tags unless
    ``ignore_profile_tags`` is set, then the defaults. The second element is
    ``"user"``, ``"profile"`` or ``"defaults"``.
    """
    if isinstance(request_tags, str):
        if request_tags.strip():
            return normalize_tags(request_tags, defaults), "user"
    elif request_tags:
        request_list = [t for t in request_tags if t]
        if request_list:
            return normalize_tags(request_list, defaults), "user"

    profile_list = [t for t in (profile_tags or []) if t]
    if profile_list and not ignore_profile_tags:
        return normalize_tags(profile_list, defaults), "profile"

    return list(DEFAULT_TAGS if defaults is None else defaults), "defaults"
