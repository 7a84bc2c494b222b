import re
from collections.abc import Iterable
from datetime import UTC, datetime

SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^a-z0-9-]")


def is_slug(value: str) -> bool:
    return bool(SLUG_RE.fullmatch(value))


def is_email(value: str) -> bool:
    return bool(EMAIL_RE.fullmatch(value))


def now() -> datetime:
    return datetime.now(UTC)


def clean_string(value: str) -> str:
    """Trim and collapse inner whitespace."""
    return _WHITESPACE_RE.sub(" ", value.strip())


def normalize_key(value: str) -> str:
    """Case- and whitespace-insensitive lookup key, e.g. for city names."""
    return clean_string(value).lower()


def slugify(value: str) -> str:
    slug = _NON_SLUG_RE.sub("", _WHITESPACE_RE.sub("-", value.strip().lower()))
    return re.sub(r"-{2,}", "-", slug).strip("-")


def build_search_keywords(*values: str | None) -> list[str]:
    """Lowercased words and whole phrases, deduplicated, order preserved.

    Single-character tokens are dropped.
    """
    keywords: list[str] = []
    for value in values:
        if not value:
            continue
        phrase = normalize_key(value)
        keywords.extend([phrase, *phrase.split(" ")])
    return _unique(k for k in keywords if len(k) > 1)


def _unique(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
