from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from backend.youtube_metadata.services.youtube_clients import (
    UpstreamDataError,
    VideoNotFoundError,
    YouTubeDataApiClient,
    YouTubeMusicClient,
)
from backend.youtube_metadata.services.youtube_parsing import (
    as_dict,
    coerce_int,
    coerce_nonempty_string,
    parse_duration_seconds,
    select_best_thumbnail,
)

LOGGER = logging.getLogger("youtube_metadata.video")


@dataclass(frozen=True)
class VideoStub:
    video_id: str
    title: str
    thumbnail_url: str
    duration_seconds: int
    author: str | None = None


@dataclass(frozen=True)
class VideoRecord:
    video_id: str
    title: str
    channel_title: str
    thumbnail_url: str
    duration_seconds: int
    description: str | None = None
    published_at: str | None = None
    view_count: int | None = None
    like_count: int | None = None
    comment_count: int | None = None

    @property
    def author(self) -> str:
        return self.channel_title

    def to_stub(self) -> VideoStub:
        return VideoStub(
            video_id=self.video_id,
            title=self.title,
            thumbnail_url=self.thumbnail_url,
            duration_seconds=self.duration_seconds,
            author=self.author,
        )


class VideoMetadataFetcher:
    def __init__(
        self,
        *,
        data_api_client: YouTubeDataApiClient,
        music_client: YouTubeMusicClient,
    ) -> None:
        self._data_api_client = data_api_client
        self._music_client = music_client

    async def fetch_video(self, video_id: str) -> VideoRecord:
        # The statistics result decides not-found before any thumbnail failure surfaces.
        item, thumbnail_url = await asyncio.gather(
            asyncio.to_thread(self._data_api_client.fetch_video_item, video_id),
            self.fetch_thumbnail_url(video_id),
            return_exceptions=True,
        )
        if isinstance(item, BaseException):
            raise item
        if item is None:
            raise VideoNotFoundError(video_id)
        if isinstance(thumbnail_url, BaseException):
            raise thumbnail_url

        record = _video_record_from_item(video_id, item, thumbnail_url=thumbnail_url)
        LOGGER.info(
            "youtube video fetched video_id=%s duration_seconds=%s",
            video_id,
            record.duration_seconds,
        )
        return record

    async def fetch_thumbnail_url(self, video_id: str) -> str:
        candidates = await asyncio.to_thread(
            self._music_client.fetch_thumbnail_candidates, video_id
        )
        return select_best_thumbnail(candidates).url


def _video_record_from_item(
    video_id: str,
    item: dict[str, Any],
    *,
    thumbnail_url: str,
) -> VideoRecord:
    snippet = as_dict(item.get("snippet"))
    statistics = as_dict(item.get("statistics"))
    content_details = as_dict(item.get("contentDetails"))

    title = snippet.get("title")
    if not isinstance(title, str):
        raise UpstreamDataError(f"YouTube Data API item has no title for video_id={video_id}")

    channel_title = snippet.get("channelTitle")
    raw_duration = content_details.get("duration")
    description = snippet.get("description")

    return VideoRecord(
        video_id=video_id,
        title=title,
        channel_title=channel_title if isinstance(channel_title, str) else "",
        thumbnail_url=thumbnail_url,
        duration_seconds=(
            parse_duration_seconds(raw_duration) if isinstance(raw_duration, str) else 0
        ),
        description=description if isinstance(description, str) else None,
        published_at=coerce_nonempty_string(snippet.get("publishedAt")),
        view_count=coerce_int(statistics.get("viewCount")),
        like_count=coerce_int(statistics.get("likeCount")),
        comment_count=coerce_int(statistics.get("commentCount")),
    )
