from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, cast
from urllib.parse import parse_qs, urlparse

YOUTUBE_DOMAIN = "youtube.com"

ISO8601_DURATION_PATTERN = re.compile(
    r"PT(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?"
)


@dataclass(frozen=True)
class ThumbnailCandidate:
    url: str
    width: int
    height: int


@dataclass(frozen=True)
class ParsedYouTubeUrl:
    video_id: str | None
    list_id: str | None


class InvalidYouTubeUrlError(ValueError):
    pass


def parse_duration_seconds(raw_value: str) -> int:
    """Convert a `PT#H#M#S` duration into seconds; anything unparseable is 0."""
    matched = ISO8601_DURATION_PATTERN.search(raw_value)
    if matched is None:
        return 0

    hours = int(matched.group("hours") or 0)
    minutes = int(matched.group("minutes") or 0)
    seconds = int(matched.group("seconds") or 0)
    return hours * 3_600 + minutes * 60 + seconds


def parse_clock_seconds(raw_value: object) -> int | None:
    if not isinstance(raw_value, str):
        return None
    parts = raw_value.strip().split(":")
    if not 1 <= len(parts) <= 3 or not all(part.isdigit() for part in parts):
        return None

    total_seconds = 0
    for part in parts:
        total_seconds = total_seconds * 60 + int(part)
    return total_seconds


def select_best_thumbnail(candidates: Sequence[ThumbnailCandidate]) -> ThumbnailCandidate:
    """
    Pick the widest candidate.

    Ties keep the earliest candidate: only a strictly wider one replaces the
    current best.
    """
    if not candidates:
        raise ValueError("Cannot select a thumbnail from an empty candidate list.")

    best = candidates[0]
    for candidate in candidates[1:]:
        if candidate.width > best.width:
            best = candidate
    return best


def parse_thumbnail_candidates(raw_value: object) -> list[ThumbnailCandidate]:
    candidates: list[ThumbnailCandidate] = []
    for raw_item in as_list(raw_value):
        item = as_dict(raw_item)
        url = coerce_nonempty_string(item.get("url"))
        if url is None:
            continue
        candidates.append(
            ThumbnailCandidate(
                url=url,
                width=coerce_int(item.get("width")) or 0,
                height=coerce_int(item.get("height")) or 0,
            )
        )
    return candidates


def parse_youtube_url(raw_url: str) -> ParsedYouTubeUrl:
    try:
        parsed = urlparse(raw_url.strip())
        hostname = (parsed.hostname or "").lower()
    except ValueError as exc:
        raise InvalidYouTubeUrlError(f"Unparseable URL: {exc}") from exc
    if not hostname.endswith(YOUTUBE_DOMAIN):
        raise InvalidYouTubeUrlError(f"Not a YouTube hostname: {hostname or '<empty>'}")

    query = parse_qs(parsed.query)
    return ParsedYouTubeUrl(
        video_id=_first_query_value(query, "v"),
        list_id=_first_query_value(query, "list"),
    )


def _first_query_value(query: dict[str, list[str]], key: str) -> str | None:
    for value in query.get(key, []):
        if value:
            return value
    return None


def coerce_nonempty_string(raw_value: object) -> str | None:
    if isinstance(raw_value, str) and raw_value.strip():
        return raw_value
    return None


def coerce_int(raw_value: object) -> int | None:
    if isinstance(raw_value, bool):
        return int(raw_value)
    if isinstance(raw_value, int):
        return raw_value
    if isinstance(raw_value, float):
        return int(raw_value)
    if isinstance(raw_value, str):
        try:
            return int(raw_value)
        except ValueError:
            return None
    return None


def as_dict(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        raw_dict = cast(dict[object, object], value)
        converted: dict[str, Any] = {}
        for key, item in raw_dict.items():
            if isinstance(key, str):
                converted[key] = item
        return converted
    return {}


def as_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        raw_list = cast(list[Any], value)
        return list(raw_list)
    return []
