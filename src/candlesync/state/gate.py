"""Mutation gate: keeps poll results from overwriting an in-flight edit."""

from __future__ import annotations

import contextlib
from collections.abc import Iterator


class MutationGate:
    """Counter of local writes currently in flight.

    The polling loop consults :meth:`is_mutating` before applying a remote
    snapshot and discards the snapshot while any write is outstanding. The
    counter form supports overlapping mutations; :attr:`generation` lets a
    poll detect that a mutation started and finished while its fetch was
    outstanding.

    State is process-local and starts at zero.
    """

    def __init__(self) -> None:
        self._in_flight = 0
        self._generation = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def generation(self) -> int:
        return self._generation

    def is_mutating(self) -> bool:
        return self._in_flight > 0

    def begin_mutation(self) -> int:
        self._in_flight += 1
        self._generation += 1
        return self._generation

    def end_mutation(self) -> None:
        if self._in_flight <= 0:
            raise RuntimeError("end_mutation() called without a matching begin_mutation()")
        self._in_flight -= 1

    @contextlib.contextmanager
    def hold(self) -> Iterator[MutationGate]:
        """Hold the gate for the duration of the block, released on every exit path."""
        self.begin_mutation()
        try:
            yield self
        finally:
            self.end_mutation()
