"""Telemetry counters for conflict outcomes."""

from __future__ import annotations

from collections import Counter
from typing import Protocol, runtime_checkable

from deskgit.state.conflicts import ConflictSignal


@runtime_checkable
class StatsStore(Protocol):
    def increment(self, signal: ConflictSignal) -> None: ...


class InMemoryStatsStore:
    def __init__(self) -> None:
        self._counts: Counter[ConflictSignal] = Counter()

    def increment(self, signal: ConflictSignal) -> None:
        self._counts[signal] += 1

    def count(self, signal: ConflictSignal) -> int:
        return self._counts[signal]

    def snapshot(self) -> dict[str, int]:
        return {signal.value: self._counts[signal] for signal in ConflictSignal}

    def reset(self) -> None:
        self._counts.clear()
