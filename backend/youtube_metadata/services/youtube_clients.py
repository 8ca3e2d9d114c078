from __future__ import annotations

import logging
import threading
from importlib import import_module
from typing import Any, cast

from backend.youtube_metadata.services.youtube_parsing import (
    ThumbnailCandidate,
    as_dict,
    parse_thumbnail_candidates,
)

LOGGER = logging.getLogger("youtube_metadata.clients")

DATA_API_VIDEO_PARTS = "snippet,statistics,contentDetails"

_NOT_FOUND_MARKERS: tuple[str, ...] = (
    "http 404",
    "http 400",
    "not found",
    "does not exist",
    "playlist is not available",
)


class YouTubeMetadataError(Exception):
    pass


class VideoNotFoundError(YouTubeMetadataError):
    def __init__(self, video_id: str) -> None:
        super().__init__(f"Video not found: {video_id}")
        self.video_id = video_id


class PlaylistNotFoundError(YouTubeMetadataError):
    def __init__(self, list_id: str) -> None:
        super().__init__(f"Playlist not found: {list_id}")
        self.list_id = list_id


class UpstreamError(YouTubeMetadataError):
    pass


class UpstreamDataError(UpstreamError):
    pass


class YouTubeDataApiClient:
    """
    Thin wrapper over the YouTube Data API v3 `videos.list` call.

    googleapiclient resources sit on a non thread-safe `httplib2.Http`, so each
    worker thread builds and keeps its own resource. An injected `client` is
    used as-is from every thread.
    """

    def __init__(self, api_key: str, *, client: Any | None = None) -> None:
        self._api_key = api_key
        self._client = client
        self._thread_state = threading.local()

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        client = getattr(self._thread_state, "client", None)
        if client is None:
            client = _build_data_api_client(self._api_key)
            self._thread_state.client = client
        return client

    def fetch_video_item(self, video_id: str) -> dict[str, Any] | None:
        try:
            response = cast(
                dict[str, Any],
                self._get_client()
                .videos()
                .list(part=DATA_API_VIDEO_PARTS, id=video_id, maxResults=1)
                .execute(),
            )
        except YouTubeMetadataError:
            raise
        except Exception as exc:
            raise UpstreamError(
                f"YouTube Data API request failed for video_id={video_id}: "
                f"{_summarize_exception_message(exc)}"
            ) from exc

        if not isinstance(response, dict):
            raise UpstreamDataError(
                f"YouTube Data API returned a non-object payload for video_id={video_id}"
            )
        items = response.get("items")
        if items is None:
            return None
        if not isinstance(items, list):
            raise UpstreamDataError(
                f"YouTube Data API returned malformed items for video_id={video_id}"
            )
        for item in cast(list[Any], items):
            item_dict = as_dict(item)
            if item_dict:
                return item_dict
        return None


class YouTubeMusicClient:
    """InnerTube access through ytmusicapi: song thumbnails and playlist payloads."""

    def __init__(self, *, language: str = "en", client: Any | None = None) -> None:
        self._language = language
        self._client = client
        self._thread_state = threading.local()

    def _get_client(self) -> Any:
        # One YTMusic (and its requests session) per worker thread.
        if self._client is not None:
            return self._client
        client = getattr(self._thread_state, "client", None)
        if client is None:
            client = _build_ytmusic_client(self._language)
            self._thread_state.client = client
        return client

    def fetch_thumbnail_candidates(self, video_id: str) -> list[ThumbnailCandidate]:
        try:
            payload = self._get_client().get_song(video_id)
        except Exception as exc:
            raise UpstreamError(
                f"InnerTube song lookup failed for video_id={video_id}: "
                f"{_summarize_exception_message(exc)}"
            ) from exc

        video_details = as_dict(as_dict(payload).get("videoDetails"))
        thumbnail = as_dict(video_details.get("thumbnail"))
        candidates = parse_thumbnail_candidates(thumbnail.get("thumbnails"))
        if not candidates:
            raise UpstreamDataError(f"No thumbnails returned for video_id={video_id}")
        return candidates

    def fetch_playlist(self, list_id: str, *, limit: int | None) -> dict[str, Any]:
        try:
            payload = self._get_client().get_playlist(list_id, limit=limit)
        except Exception as exc:
            if _is_not_found_error(exc):
                raise PlaylistNotFoundError(list_id) from exc
            raise UpstreamError(
                f"InnerTube playlist lookup failed for list_id={list_id}: "
                f"{_summarize_exception_message(exc)}"
            ) from exc

        playlist = as_dict(payload)
        if not playlist:
            raise PlaylistNotFoundError(list_id)
        return playlist

    def fetch_watch_playlist(self, list_id: str, *, limit: int) -> dict[str, Any]:
        try:
            payload = self._get_client().get_watch_playlist(playlistId=list_id, limit=limit)
        except Exception as exc:
            if _is_not_found_error(exc):
                raise PlaylistNotFoundError(list_id) from exc
            raise UpstreamError(
                f"InnerTube watch playlist lookup failed for list_id={list_id}: "
                f"{_summarize_exception_message(exc)}"
            ) from exc

        playlist = as_dict(payload)
        if not playlist:
            raise PlaylistNotFoundError(list_id)
        return playlist


def _build_data_api_client(api_key: str) -> Any:
    try:
        discovery_module = import_module("googleapiclient.discovery")
    except ImportError as exc:  # pragma: no cover - dependency controlled at runtime
        raise UpstreamError("YouTube Data API access requires google-api-python-client") from exc

    build_fn: Any = discovery_module.build
    LOGGER.info("youtube data_api client_build")
    return build_fn("youtube", "v3", developerKey=api_key, cache_discovery=False)


def _build_ytmusic_client(language: str) -> Any:
    try:
        ytmusic_module = import_module("ytmusicapi")
    except ImportError as exc:  # pragma: no cover - dependency controlled at runtime
        raise UpstreamError("InnerTube access requires the ytmusicapi dependency") from exc

    ytmusic_cls: Any = ytmusic_module.YTMusic
    LOGGER.info("youtube innertube client_build language=%s", language)
    return ytmusic_cls(language=language)


def _is_not_found_error(exc: Exception) -> bool:
    class_name = exc.__class__.__name__.lower()
    if "usererror" in class_name:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _NOT_FOUND_MARKERS)


def _summarize_exception_message(exc: Exception, *, max_length: int = 400) -> str:
    raw = str(exc).strip()
    if not raw:
        raw = repr(exc)
    if len(raw) <= max_length:
        return raw
    return f"{raw[: max_length - 3]}..."
