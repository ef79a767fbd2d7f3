# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field


class FakeClock:
    """
    Frozen clock for TaskStore ids.

    Every call returns the same instant unless advanced, which forces the
    store's id-bump path.
    """

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass(slots=True)
class FakeConfirm:
    """Confirm prompt that records the counts it was asked about."""

    answer: bool = True
    asked: list[int] = field(default_factory=list)

    def __call__(self, count: int) -> bool:
        self.asked.append(count)
        return self.answer


class CountingKV:
    """MemoryKVStore-compatible store that counts writes per key."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes[key] = self.writes.get(key, 0) + 1

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self.data)

    def updated_at(self, key: str) -> float | None:
        # Write count stands in for a timestamp: it only ever grows.
        return float(self.writes.get(key, 0)) if key in self.data else None
