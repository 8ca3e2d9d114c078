from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from backend.youtube_metadata.services.metadata_service import PlaylistResult
from backend.youtube_metadata.services.video_service import VideoRecord, VideoStub

_CAMEL_CASE_CONFIG = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    error: str


class VideoMetadataResponse(BaseModel):
    model_config = _CAMEL_CASE_CONFIG

    video_id: str
    list_id: str | None = None
    title: str
    description: str | None = None
    published_at: str | None = None
    channel_title: str
    author: str
    view_count: int | None = None
    like_count: int | None = None
    comment_count: int | None = None
    thumbnail_url: str
    duration_in_seconds: int

    @classmethod
    def from_record(cls, record: VideoRecord, *, list_id: str | None) -> VideoMetadataResponse:
        return cls(
            video_id=record.video_id,
            list_id=list_id,
            title=record.title,
            description=record.description,
            published_at=record.published_at,
            channel_title=record.channel_title,
            author=record.author,
            view_count=record.view_count,
            like_count=record.like_count,
            comment_count=record.comment_count,
            thumbnail_url=record.thumbnail_url,
            duration_in_seconds=record.duration_seconds,
        )


class VideoStubResponse(BaseModel):
    model_config = _CAMEL_CASE_CONFIG

    title: str
    author: str | None = None
    video_id: str
    thumbnail_url: str
    duration_in_seconds: int

    @classmethod
    def from_stub(cls, stub: VideoStub) -> VideoStubResponse:
        return cls(
            title=stub.title,
            author=stub.author,
            video_id=stub.video_id,
            thumbnail_url=stub.thumbnail_url,
            duration_in_seconds=stub.duration_seconds,
        )


def _default_videos() -> list[VideoStubResponse]:
    return []


class PlaylistMetadataResponse(BaseModel):
    model_config = _CAMEL_CASE_CONFIG

    title: str
    video_index_in_playlist: int | None = None
    video_count: int
    videos: list[VideoStubResponse] = Field(default_factory=_default_videos)

    @classmethod
    def from_result(cls, result: PlaylistResult) -> PlaylistMetadataResponse:
        return cls(
            title=result.title,
            video_index_in_playlist=result.video_index_in_playlist,
            video_count=result.video_count,
            videos=[VideoStubResponse.from_stub(video) for video in result.videos],
        )
