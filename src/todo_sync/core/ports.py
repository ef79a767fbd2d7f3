# src/todo_sync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage backends swappable and makes testing easier.
"""

from typing import Protocol


class KeyValueStore(Protocol):
    """String blob store with local-storage semantics (whole-value overwrite)."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...
    def keys(self) -> list[str]: ...
    def updated_at(self, key: str) -> float | None: ...


class ConfirmPrompt(Protocol):
    """Presentation-side yes/no question; gets the number of tasks about to go."""

    def __call__(self, count: int) -> bool: ...
