from __future__ import annotations

import pytest
from fakes import FakeGistBackend

from candlesync.config import SyncConfig
from candlesync.engine import SyncEngine
from candlesync.remote import RemoteStoreClient


@pytest.fixture
def config() -> SyncConfig:
    return SyncConfig(document_id="gist-1", token="ghp-secret", base_url="https://gists.test")


@pytest.fixture
def backend() -> FakeGistBackend:
    return FakeGistBackend()


@pytest.fixture
def remote(config: SyncConfig, backend: FakeGistBackend) -> RemoteStoreClient:
    return RemoteStoreClient(config, transport=backend)


@pytest.fixture
def warnings() -> list[str]:
    return []


@pytest.fixture
def engine(remote: RemoteStoreClient, warnings: list[str]) -> SyncEngine:
    return SyncEngine(remote, on_warning=warnings.append, poll_interval=0.01)
