from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from backend.youtube_metadata.services.playlist_service import PlaylistResolver
from backend.youtube_metadata.services.video_service import (
    VideoMetadataFetcher,
    VideoRecord,
    VideoStub,
)

LOGGER = logging.getLogger("youtube_metadata.service")


@dataclass(frozen=True)
class PlaylistResult:
    title: str
    video_index_in_playlist: int | None
    video_count: int
    videos: list[VideoStub]


class YouTubeMetadataService:
    """
    Request-scoped aggregation over the video fetcher and playlist resolver.

    Playlist flow:
    - resolve the playlist and locate the requested video by exact id,
    - fetch a missing requested video standalone and prepend it (best effort),
    - re-fetch every thumbnail through the InnerTube song lookup.
    """

    def __init__(
        self,
        *,
        video_fetcher: VideoMetadataFetcher,
        playlist_resolver: PlaylistResolver,
    ) -> None:
        self._video_fetcher = video_fetcher
        self._playlist_resolver = playlist_resolver

    async def get_video(self, video_id: str) -> VideoRecord:
        return await self._video_fetcher.fetch_video(video_id)

    async def get_playlist(self, list_id: str, *, video_id: str | None = None) -> PlaylistResult:
        playlist = await self._playlist_resolver.resolve_playlist(list_id)

        video_index = _find_video_index(playlist.entries, video_id)
        if video_id is not None and video_index is None:
            standalone = await self._fetch_standalone_video(video_id, list_id=list_id)
            if standalone is not None:
                playlist = playlist.prepend(standalone.to_stub())
                video_index = 0

        patched_videos = await self._patch_thumbnails(playlist.entries)
        return PlaylistResult(
            title=playlist.title,
            video_index_in_playlist=video_index,
            video_count=playlist.video_count,
            videos=patched_videos,
        )

    async def _fetch_standalone_video(self, video_id: str, *, list_id: str) -> VideoRecord | None:
        try:
            return await self._video_fetcher.fetch_video(video_id)
        except Exception:
            LOGGER.warning(
                "youtube playlist standalone_fetch_failed list_id=%s video_id=%s",
                list_id,
                video_id,
                exc_info=True,
            )
            return None

    async def _patch_thumbnails(self, videos: Sequence[VideoStub]) -> list[VideoStub]:
        thumbnail_urls = await asyncio.gather(
            *(self._video_fetcher.fetch_thumbnail_url(video.video_id) for video in videos)
        )
        return [
            replace(video, thumbnail_url=thumbnail_url)
            for video, thumbnail_url in zip(videos, thumbnail_urls, strict=True)
        ]


def _find_video_index(videos: Sequence[VideoStub], video_id: str | None) -> int | None:
    if video_id is None:
        return None
    for index, video in enumerate(videos):
        if video.video_id == video_id:
            return index
    return None
