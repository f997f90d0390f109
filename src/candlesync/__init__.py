"""candlesync - Async client that keeps a shared candle list in sync with a gist."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("candlesync")
except PackageNotFoundError:
    __version__ = "0+local"
from candlesync.config import SyncConfig
from candlesync.engine import SyncEngine
from candlesync.exceptions import (
    CandleSyncError,
    MalformedDocument,
    NotConfigured,
    RemoteError,
    RemoteRejected,
    RemoteUnavailable,
    SyncConfigError,
)
from candlesync.models import Item, MutationKind, MutationResult, RemoteDocument
from candlesync.poller import PollState
from candlesync.remote import RemoteStoreClient
from candlesync.state.gate import MutationGate
from candlesync.state.store import LocalStateCache

__all__ = [
    "__version__",
    "CandleSyncError",
    "Item",
    "LocalStateCache",
    "MalformedDocument",
    "MutationGate",
    "MutationKind",
    "MutationResult",
    "NotConfigured",
    "PollState",
    "RemoteDocument",
    "RemoteError",
    "RemoteRejected",
    "RemoteStoreClient",
    "RemoteUnavailable",
    "SyncConfig",
    "SyncConfigError",
    "SyncEngine",
]
