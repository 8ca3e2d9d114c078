from __future__ import annotations

from typing import Any

from backend.youtube_metadata.services.metadata_service import YouTubeMetadataService
from backend.youtube_metadata.services.playlist_service import PlaylistResolver
from backend.youtube_metadata.services.video_service import VideoMetadataFetcher
from backend.youtube_metadata.services.youtube_clients import (
    YouTubeDataApiClient,
    YouTubeMusicClient,
)


def data_api_item(
    video_id: str,
    *,
    title: str = "Test Video",
    channel_title: str = "Test Channel",
    duration: str = "PT4M13S",
) -> dict[str, Any]:
    return {
        "id": video_id,
        "snippet": {
            "title": title,
            "description": f"Description for {title}",
            "publishedAt": "2026-02-01T12:00:00Z",
            "channelTitle": channel_title,
            "thumbnails": {
                "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"},
            },
        },
        "statistics": {"viewCount": "1200", "likeCount": "34", "commentCount": "5"},
        "contentDetails": {"duration": duration},
    }


def song_payload(video_id: str) -> dict[str, Any]:
    return {
        "videoDetails": {
            "videoId": video_id,
            "thumbnail": {
                "thumbnails": [
                    {"url": f"https://lh3.test/{video_id}=w60", "width": 60, "height": 60},
                    {"url": f"https://lh3.test/{video_id}=w544", "width": 544, "height": 544},
                    {"url": f"https://lh3.test/{video_id}=w120", "width": 120, "height": 120},
                ]
            },
        }
    }


def playlist_track(
    video_id: str,
    *,
    title: str | None = None,
    artist: str | None = "Playlist Artist",
    duration_seconds: int | None = 200,
) -> dict[str, Any]:
    track: dict[str, Any] = {
        "videoId": video_id,
        "title": title or f"Track {video_id}",
        "artists": [{"name": artist, "id": "UC123"}] if artist is not None else [],
        "thumbnails": [
            {"url": f"https://playlist.test/{video_id}/small.jpg", "width": 60, "height": 60},
            {"url": f"https://playlist.test/{video_id}/large.jpg", "width": 120, "height": 120},
        ],
    }
    if duration_seconds is not None:
        track["duration_seconds"] = duration_seconds
    return track


def watch_track(video_id: str, *, title: str | None = None, length: str = "3:05") -> dict[str, Any]:
    return {
        "videoId": video_id,
        "title": title or f"Mix track {video_id}",
        "length": length,
        "artists": [{"name": "Mix Artist", "id": "UC456"}],
        "thumbnail": [
            {"url": f"https://watch.test/{video_id}/small.jpg", "width": 60, "height": 60},
            {"url": f"https://watch.test/{video_id}/large.jpg", "width": 226, "height": 226},
        ],
    }


class FakeDataApiClient:
    """Mimics the `client.videos().list(...).execute()` chain of googleapiclient."""

    def __init__(self, items: dict[str, dict[str, Any]] | None = None) -> None:
        self.items = dict(items or {})
        self.failing_ids: set[str] = set()
        self.calls: list[dict[str, object]] = []
        self._kwargs: dict[str, object] = {}

    def videos(self) -> FakeDataApiClient:
        return self

    def list(self, **kwargs: object) -> FakeDataApiClient:
        self._kwargs = kwargs
        return self

    def execute(self) -> dict[str, object]:
        kwargs = self._kwargs
        self.calls.append(kwargs)
        video_id = kwargs.get("id")
        if video_id in self.failing_ids:
            raise ConnectionError(f"connection reset while fetching {video_id}")
        item = self.items.get(str(video_id))
        if item is None:
            return {"kind": "youtube#videoListResponse", "items": []}
        return {"kind": "youtube#videoListResponse", "items": [item]}


class FakeYTMusic:
    def __init__(self) -> None:
        self.songs: dict[str, dict[str, Any]] = {}
        self.playlists: dict[str, dict[str, Any]] = {}
        self.watch_playlists: dict[str, dict[str, Any]] = {}
        self.failing_song_ids: set[str] = set()
        self.song_calls: list[str] = []
        self.watch_calls: list[dict[str, object]] = []

    def get_song(self, video_id: str) -> dict[str, Any]:
        self.song_calls.append(video_id)
        if video_id in self.failing_song_ids:
            raise ConnectionError(f"InnerTube unavailable for {video_id}")
        return self.songs.get(video_id, song_payload(video_id))

    def get_playlist(self, playlist_id: str, limit: int | None = 100) -> dict[str, Any]:
        _ = limit
        playlist = self.playlists.get(playlist_id)
        if playlist is None:
            raise Exception("Server returned HTTP 404: Not Found.\nRequested entity was not found.")
        return playlist

    def get_watch_playlist(
        self,
        videoId: str | None = None,  # noqa: N803
        playlistId: str | None = None,  # noqa: N803
        limit: int = 25,
    ) -> dict[str, Any]:
        self.watch_calls.append({"videoId": videoId, "playlistId": playlistId, "limit": limit})
        return self.watch_playlists.get(str(playlistId), {"tracks": [], "playlistId": playlistId})


class Upstreams:
    def __init__(self) -> None:
        self.data_api = FakeDataApiClient()
        self.ytmusic = FakeYTMusic()

    def build_service(self) -> YouTubeMetadataService:
        music_client = YouTubeMusicClient(client=self.ytmusic)
        return YouTubeMetadataService(
            video_fetcher=VideoMetadataFetcher(
                data_api_client=YouTubeDataApiClient("test-api-key", client=self.data_api),
                music_client=music_client,
            ),
            playlist_resolver=PlaylistResolver(music_client=music_client),
        )
