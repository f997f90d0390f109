"""Explicit observer registry used for change and poll fan-out."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import Any

_logger = logging.getLogger(__name__)

Callback = Callable[..., Any]


class ObserverRegistry:
    """Mapping of subscription handle to callback.

    Handles are positive integers, never reused within a registry. Callbacks
    are notified in registration order; an exception raised by one callback
    is logged and does not prevent the others from running.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._callbacks: dict[int, Callback] = {}
        self._handles = itertools.count(1)

    def __len__(self) -> int:
        return len(self._callbacks)

    def __contains__(self, handle: object) -> bool:
        return handle in self._callbacks

    def add(self, callback: Callback) -> int:
        handle = next(self._handles)
        self._callbacks[handle] = callback
        return handle

    def remove(self, handle: int) -> bool:
        """Drop one subscription. Returns ``False`` for an unknown handle."""
        return self._callbacks.pop(handle, None) is not None

    def clear(self) -> None:
        self._callbacks.clear()

    def notify(self, *args: Any) -> None:
        for handle, callback in list(self._callbacks.items()):
            try:
                callback(*args)
            except Exception:
                _logger.warning("%s subscriber %d failed", self._name, handle, exc_info=True)
