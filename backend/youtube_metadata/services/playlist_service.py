from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any

from backend.youtube_metadata.services.video_service import VideoStub
from backend.youtube_metadata.services.youtube_clients import (
    PlaylistNotFoundError,
    YouTubeMusicClient,
)
from backend.youtube_metadata.services.youtube_parsing import (
    as_dict,
    as_list,
    coerce_int,
    coerce_nonempty_string,
    parse_clock_seconds,
    parse_thumbnail_candidates,
)

LOGGER = logging.getLogger("youtube_metadata.playlist")

MIX_PLAYLIST_PREFIX = "RD"
MIX_TITLE_PREFIX = "Mix"


@dataclass(frozen=True)
class MixPlaylist:
    """Auto-generated radio playlist; its count is whatever ends up in the response."""

    list_id: str
    title: str
    entries: tuple[VideoStub, ...]

    @property
    def video_count(self) -> int:
        return len(self.entries)

    def prepend(self, stub: VideoStub) -> MixPlaylist:
        return replace(self, entries=(stub, *self.entries))


@dataclass(frozen=True)
class StandardPlaylist:
    """User or channel playlist; the library-reported count is passed through as-is."""

    list_id: str
    title: str
    entries: tuple[VideoStub, ...]
    reported_video_count: int

    @property
    def video_count(self) -> int:
        return self.reported_video_count

    def prepend(self, stub: VideoStub) -> StandardPlaylist:
        return replace(self, entries=(stub, *self.entries))


PlaylistVariant = MixPlaylist | StandardPlaylist


def is_mix_playlist_id(list_id: str) -> bool:
    return list_id.startswith(MIX_PLAYLIST_PREFIX)


class PlaylistResolver:
    def __init__(
        self,
        *,
        music_client: YouTubeMusicClient,
        playlist_track_limit: int | None = 100,
        mix_track_limit: int = 25,
    ) -> None:
        self._music_client = music_client
        self._playlist_track_limit = playlist_track_limit
        self._mix_track_limit = max(1, mix_track_limit)

    async def resolve_playlist(self, list_id: str) -> PlaylistVariant:
        if is_mix_playlist_id(list_id):
            payload = await asyncio.to_thread(
                self._music_client.fetch_watch_playlist,
                list_id,
                limit=self._mix_track_limit,
            )
            playlist: PlaylistVariant = _mix_playlist_from_payload(list_id, payload)
        else:
            payload = await asyncio.to_thread(
                self._music_client.fetch_playlist,
                list_id,
                limit=self._playlist_track_limit,
            )
            playlist = _standard_playlist_from_payload(list_id, payload)

        LOGGER.info(
            "youtube playlist resolved list_id=%s variant=%s entries=%s",
            list_id,
            type(playlist).__name__,
            len(playlist.entries),
        )
        return playlist


def _mix_playlist_from_payload(list_id: str, payload: dict[str, Any]) -> MixPlaylist:
    raw_tracks = payload.get("tracks")
    if not isinstance(raw_tracks, list) or not raw_tracks:
        raise PlaylistNotFoundError(list_id)

    entries = tuple(
        entry
        for entry in (
            _stub_from_track(
                track,
                thumbnails_key="thumbnail",
                duration_seconds=parse_clock_seconds(as_dict(track).get("length")),
            )
            for track in as_list(raw_tracks)
        )
        if entry is not None
    )
    title = f"{MIX_TITLE_PREFIX} - {entries[0].title}" if entries else MIX_TITLE_PREFIX
    return MixPlaylist(list_id=list_id, title=title, entries=entries)


def _standard_playlist_from_payload(list_id: str, payload: dict[str, Any]) -> StandardPlaylist:
    if "tracks" not in payload:
        raise PlaylistNotFoundError(list_id)

    entries = tuple(
        entry
        for entry in (
            _stub_from_track(
                track,
                thumbnails_key="thumbnails",
                duration_seconds=coerce_int(as_dict(track).get("duration_seconds")),
            )
            for track in as_list(payload.get("tracks"))
        )
        if entry is not None
    )
    reported_count = coerce_int(payload.get("trackCount"))
    title = coerce_nonempty_string(payload.get("title")) or ""
    return StandardPlaylist(
        list_id=list_id,
        title=title,
        entries=entries,
        reported_video_count=reported_count if reported_count is not None else len(entries),
    )


def _stub_from_track(
    raw_track: object,
    *,
    thumbnails_key: str,
    duration_seconds: int | None,
) -> VideoStub | None:
    track = as_dict(raw_track)
    video_id = coerce_nonempty_string(track.get("videoId"))
    if video_id is None:
        return None

    thumbnails = parse_thumbnail_candidates(track.get(thumbnails_key))
    title = track.get("title")
    return VideoStub(
        video_id=video_id,
        title=title if isinstance(title, str) else "",
        thumbnail_url=thumbnails[-1].url if thumbnails else "",
        duration_seconds=duration_seconds or 0,
        author=_first_artist_name(track.get("artists")),
    )


def _first_artist_name(raw_artists: object) -> str | None:
    for raw_artist in as_list(raw_artists):
        name = coerce_nonempty_string(as_dict(raw_artist).get("name"))
        if name is not None:
            return name
    return None
