from __future__ import annotations

from functools import lru_cache

from backend.youtube_metadata.config import AppSettings, load_settings
from backend.youtube_metadata.services.metadata_service import YouTubeMetadataService
from backend.youtube_metadata.services.playlist_service import PlaylistResolver
from backend.youtube_metadata.services.video_service import VideoMetadataFetcher
from backend.youtube_metadata.services.youtube_clients import (
    YouTubeDataApiClient,
    YouTubeMusicClient,
)
from backend.youtube_metadata.telemetry import TelemetryClient, build_telemetry_client


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()


@lru_cache(maxsize=1)
def get_music_client() -> YouTubeMusicClient:
    return YouTubeMusicClient(language=get_settings().ytmusic_language)


@lru_cache(maxsize=1)
def get_metadata_service() -> YouTubeMetadataService:
    settings = get_settings()
    api_key = settings.youtube_api_key
    assert api_key is not None
    music_client = get_music_client()

    return YouTubeMetadataService(
        video_fetcher=VideoMetadataFetcher(
            data_api_client=YouTubeDataApiClient(api_key),
            music_client=music_client,
        ),
        playlist_resolver=PlaylistResolver(
            music_client=music_client,
            playlist_track_limit=settings.playlist_track_limit,
            mix_track_limit=settings.mix_track_limit,
        ),
    )


@lru_cache(maxsize=1)
def get_telemetry() -> TelemetryClient:
    settings = get_settings()
    return build_telemetry_client(
        enabled=settings.telemetry_enabled,
        sink=settings.telemetry_sink,
    )


def reset_cached_dependencies() -> None:
    get_metadata_service.cache_clear()
    get_music_client.cache_clear()
    get_telemetry.cache_clear()
    get_settings.cache_clear()
