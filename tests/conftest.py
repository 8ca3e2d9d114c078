from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.youtube_metadata.dependencies import get_metadata_service, reset_cached_dependencies
from backend.youtube_metadata.main import create_app
from tests.fakes import Upstreams


@pytest.fixture
def upstreams() -> Upstreams:
    return Upstreams()


@pytest.fixture
def client(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    upstreams: Upstreams,
) -> Iterator[TestClient]:
    data_dir = tmp_path / "runtime-data"
    data_dir.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("YOUTUBE_API_KEY", "test-api-key")
    monkeypatch.setenv("YOUTUBE_METADATA_DATA_DIR", str(data_dir))
    monkeypatch.setenv("YOUTUBE_METADATA_TELEMETRY_SINK", "none")
    reset_cached_dependencies()

    app = create_app()
    service = upstreams.build_service()
    app.dependency_overrides[get_metadata_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client

    reset_cached_dependencies()
