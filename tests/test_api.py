from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.youtube_metadata.dependencies import get_telemetry
from backend.youtube_metadata.telemetry import TelemetryClient
from tests.fakes import Upstreams, data_api_item, playlist_track, watch_track


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_root_redirects_to_homepage(client: TestClient) -> None:
    response = client.get("/", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == (
        "https://github.com/boring-design/youtube-metadata-service"
    )


def test_request_id_is_echoed(client: TestClient) -> None:
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    generated = client.get("/health")
    assert generated.headers["X-Request-ID"]


def test_video_returns_metadata(client: TestClient, upstreams: Upstreams) -> None:
    upstreams.data_api.items["abc"] = data_api_item("abc", duration="PT3M20S")

    response = client.get("/video", params={"url": "https://youtube.com/watch?v=abc"})

    assert response.status_code == 200
    assert response.json() == {
        "videoId": "abc",
        "listId": None,
        "title": "Test Video",
        "description": "Description for Test Video",
        "publishedAt": "2026-02-01T12:00:00Z",
        "channelTitle": "Test Channel",
        "author": "Test Channel",
        "viewCount": 1200,
        "likeCount": 34,
        "commentCount": 5,
        "thumbnailUrl": "https://lh3.test/abc=w544",
        "durationInSeconds": 200,
    }


def test_video_echoes_list_id(client: TestClient, upstreams: Upstreams) -> None:
    upstreams.data_api.items["abc"] = data_api_item("abc")

    response = client.get(
        "/video", params={"url": "https://www.youtube.com/watch?v=abc&list=PL9"}
    )

    assert response.status_code == 200
    assert response.json()["listId"] == "PL9"


def test_video_requires_url(client: TestClient) -> None:
    response = client.get("/video")
    assert response.status_code == 400
    assert response.json() == {"error": "Missing URL parameter"}


def test_video_rejects_non_youtube_domain(client: TestClient) -> None:
    response = client.get("/video", params={"url": "https://vimeo.com/123"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid URL. Please provide a YouTube URL"}


def test_video_requires_video_id(client: TestClient) -> None:
    response = client.get("/video", params={"url": "https://youtube.com/playlist?list=PL1"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid YouTube URL. Missing video ID"}


def test_video_not_found(client: TestClient) -> None:
    response = client.get("/video", params={"url": "https://youtube.com/watch?v=missing"})
    assert response.status_code == 404
    assert response.json() == {"error": "Video not found"}


def test_video_upstream_failure_hides_details(client: TestClient, upstreams: Upstreams) -> None:
    upstreams.data_api.items["abc"] = data_api_item("abc")
    upstreams.data_api.failing_ids.add("abc")

    response = client.get("/video", params={"url": "https://youtube.com/watch?v=abc"})

    assert response.status_code == 500
    assert response.json() == {"error": "Error fetching video metadata"}


def test_playlist_requires_list_id(client: TestClient) -> None:
    response = client.get("/playlist", params={"url": "https://youtube.com/watch?v=abc"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid YouTube URL. Missing playlist ID"}


def test_playlist_requires_url(client: TestClient) -> None:
    response = client.get("/playlist", params={"url": "  "})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing URL parameter"}


def test_playlist_not_found(client: TestClient) -> None:
    response = client.get("/playlist", params={"url": "https://youtube.com/playlist?list=PLnone"})
    assert response.status_code == 404
    assert response.json() == {"error": "Playlist not found or invalid"}


def test_playlist_prepends_missing_video(client: TestClient, upstreams: Upstreams) -> None:
    upstreams.ytmusic.playlists["PL1"] = {
        "title": "Road Trip",
        "trackCount": 2,
        "tracks": [playlist_track("v1"), playlist_track("v2")],
    }
    upstreams.data_api.items["xyz"] = data_api_item("xyz", title="Outsider")

    response = client.get(
        "/playlist", params={"url": "https://youtube.com/watch?v=xyz&list=PL1"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Road Trip"
    assert body["videoIndexInPlaylist"] == 0
    assert body["videoCount"] == 2
    assert [video["videoId"] for video in body["videos"]] == ["xyz", "v1", "v2"]
    assert body["videos"][0] == {
        "title": "Outsider",
        "author": "Test Channel",
        "videoId": "xyz",
        "thumbnailUrl": "https://lh3.test/xyz=w544",
        "durationInSeconds": 253,
    }


def test_playlist_mix_variant(client: TestClient, upstreams: Upstreams) -> None:
    upstreams.ytmusic.watch_playlists["RDabc"] = {
        "tracks": [watch_track("abc", title="Seed"), watch_track("m2", length="2:30")],
    }

    response = client.get(
        "/playlist", params={"url": "https://www.youtube.com/watch?v=abc&list=RDabc"}
    )

    assert response.status_code == 200
    assert response.json() == {
        "title": "Mix - Seed",
        "videoIndexInPlaylist": 0,
        "videoCount": 2,
        "videos": [
            {
                "title": "Seed",
                "author": "Mix Artist",
                "videoId": "abc",
                "thumbnailUrl": "https://lh3.test/abc=w544",
                "durationInSeconds": 185,
            },
            {
                "title": "Mix track m2",
                "author": "Mix Artist",
                "videoId": "m2",
                "thumbnailUrl": "https://lh3.test/m2=w544",
                "durationInSeconds": 150,
            },
        ],
    }


def test_playlist_thumbnail_patch_failure_is_server_error(
    client: TestClient, upstreams: Upstreams
) -> None:
    upstreams.ytmusic.playlists["PL1"] = {
        "title": "Road Trip",
        "trackCount": 1,
        "tracks": [playlist_track("v1")],
    }
    upstreams.ytmusic.failing_song_ids.add("v1")

    response = client.get("/playlist", params={"url": "https://youtube.com/playlist?list=PL1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Error fetching playlist metadata"}


def test_repeated_playlist_requests_are_byte_identical(
    client: TestClient, upstreams: Upstreams
) -> None:
    upstreams.ytmusic.playlists["PL1"] = {
        "title": "Road Trip",
        "trackCount": 3,
        "tracks": [playlist_track("v1"), playlist_track("v2"), playlist_track("v3")],
    }
    params = {"url": "https://youtube.com/watch?v=v3&list=PL1"}

    first = client.get("/playlist", params=params)
    second = client.get("/playlist", params=params)

    assert first.status_code == 200
    assert first.json()["videoIndexInPlaylist"] == 2
    assert first.content == second.content


def test_unparseable_url_is_a_json_client_error(client: TestClient) -> None:
    for path in ("/video", "/playlist"):
        response = client.get(path, params={"url": "http://[youtube.com/watch?v=abc&list=PL1"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid URL. Please provide a YouTube URL"}


def test_lookups_are_recorded_in_telemetry(client: TestClient, upstreams: Upstreams) -> None:
    events: list[tuple[str, dict[str, object]]] = []

    class _CaptureSink:
        def emit(self, *, event_name: str, attributes: Mapping[str, object]) -> None:
            events.append((event_name, dict(attributes)))

    telemetry = TelemetryClient(enabled=True, sink=_CaptureSink())
    cast(FastAPI, client.app).dependency_overrides[get_telemetry] = lambda: telemetry
    upstreams.data_api.items["abc"] = data_api_item("abc")

    client.get("/video", params={"url": "https://youtube.com/watch?v=abc"})
    client.get("/video", params={"url": "https://youtube.com/watch?v=missing"})

    assert events == [
        ("youtube.video.lookup", {"outcome": "ok", "video_id": "abc"}),
        ("youtube.video.lookup", {"outcome": "not_found", "video_id": "missing"}),
    ]
