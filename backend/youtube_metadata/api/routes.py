from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from structlog.contextvars import bind_contextvars, reset_contextvars

from backend.youtube_metadata.dependencies import get_metadata_service, get_telemetry
from backend.youtube_metadata.models.metadata_contracts import (
    ErrorResponse,
    PlaylistMetadataResponse,
    VideoMetadataResponse,
)
from backend.youtube_metadata.services.metadata_service import YouTubeMetadataService
from backend.youtube_metadata.services.youtube_clients import (
    PlaylistNotFoundError,
    VideoNotFoundError,
)
from backend.youtube_metadata.services.youtube_parsing import (
    InvalidYouTubeUrlError,
    ParsedYouTubeUrl,
    parse_youtube_url,
)
from backend.youtube_metadata.telemetry import TelemetryClient

LOGGER = logging.getLogger("youtube_metadata.api")

MISSING_URL_MESSAGE = "Missing URL parameter"
INVALID_DOMAIN_MESSAGE = "Invalid URL. Please provide a YouTube URL"
MISSING_VIDEO_ID_MESSAGE = "Invalid YouTube URL. Missing video ID"
MISSING_PLAYLIST_ID_MESSAGE = "Invalid YouTube URL. Missing playlist ID"
VIDEO_NOT_FOUND_MESSAGE = "Video not found"
PLAYLIST_NOT_FOUND_MESSAGE = "Playlist not found or invalid"
VIDEO_FETCH_ERROR_MESSAGE = "Error fetching video metadata"
PLAYLIST_FETCH_ERROR_MESSAGE = "Error fetching playlist metadata"

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter()


class MetadataRequestError(Exception):
    """Client-visible failure rendered as `{"error": message}`."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _parse_request_url(url: str | None) -> ParsedYouTubeUrl:
    if url is None or not url.strip():
        raise MetadataRequestError(400, MISSING_URL_MESSAGE)
    try:
        return parse_youtube_url(url)
    except InvalidYouTubeUrlError as exc:
        raise MetadataRequestError(400, INVALID_DOMAIN_MESSAGE) from exc


@router.get(
    "/video",
    response_model=VideoMetadataResponse,
    responses=_ERROR_RESPONSES,
    tags=["youtube"],
    operation_id="get_video_metadata",
)
async def get_video_metadata(
    service: Annotated[YouTubeMetadataService, Depends(get_metadata_service)],
    telemetry: Annotated[TelemetryClient, Depends(get_telemetry)],
    url: Annotated[str | None, Query(description="YouTube watch URL with a `v` parameter.")] = None,
) -> VideoMetadataResponse:
    parsed = _parse_request_url(url)
    if parsed.video_id is None:
        raise MetadataRequestError(400, MISSING_VIDEO_ID_MESSAGE)

    context_tokens = bind_contextvars(video_id=parsed.video_id, list_id=parsed.list_id)
    try:
        record = await service.get_video(parsed.video_id)
    except VideoNotFoundError as exc:
        telemetry.lookup("video", "not_found", video_id=parsed.video_id)
        raise MetadataRequestError(404, VIDEO_NOT_FOUND_MESSAGE) from exc
    except Exception as exc:
        LOGGER.exception("youtube video fetch_failed video_id=%s", parsed.video_id)
        telemetry.lookup(
            "video",
            "error",
            video_id=parsed.video_id,
            error_type=type(exc).__name__,
        )
        raise MetadataRequestError(500, VIDEO_FETCH_ERROR_MESSAGE) from exc
    finally:
        reset_contextvars(**context_tokens)

    telemetry.lookup("video", "ok", video_id=parsed.video_id)
    return VideoMetadataResponse.from_record(record, list_id=parsed.list_id)


@router.get(
    "/playlist",
    response_model=PlaylistMetadataResponse,
    responses=_ERROR_RESPONSES,
    tags=["youtube"],
    operation_id="get_playlist_metadata",
)
async def get_playlist_metadata(
    service: Annotated[YouTubeMetadataService, Depends(get_metadata_service)],
    telemetry: Annotated[TelemetryClient, Depends(get_telemetry)],
    url: Annotated[str | None, Query(description="YouTube URL with a `list` parameter.")] = None,
) -> PlaylistMetadataResponse:
    parsed = _parse_request_url(url)
    if parsed.list_id is None:
        raise MetadataRequestError(400, MISSING_PLAYLIST_ID_MESSAGE)

    context_tokens = bind_contextvars(video_id=parsed.video_id, list_id=parsed.list_id)
    try:
        result = await service.get_playlist(parsed.list_id, video_id=parsed.video_id)
    except PlaylistNotFoundError as exc:
        telemetry.lookup("playlist", "not_found", list_id=parsed.list_id)
        raise MetadataRequestError(404, PLAYLIST_NOT_FOUND_MESSAGE) from exc
    except Exception as exc:
        LOGGER.exception("youtube playlist fetch_failed list_id=%s", parsed.list_id)
        telemetry.lookup(
            "playlist",
            "error",
            list_id=parsed.list_id,
            error_type=type(exc).__name__,
        )
        raise MetadataRequestError(500, PLAYLIST_FETCH_ERROR_MESSAGE) from exc
    finally:
        reset_contextvars(**context_tokens)

    telemetry.lookup(
        "playlist",
        "ok",
        list_id=parsed.list_id,
        video_count=result.video_count,
        video_index_in_playlist=result.video_index_in_playlist,
    )
    return PlaylistMetadataResponse.from_result(result)
