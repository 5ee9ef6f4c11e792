from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

from agent.profiles import CONFIG_ROOTS
from agent.services import ServiceState
from algorithm.dates import DateNormalizer

# a fixed "now" so signature ages are exact
FIXED_NOW = datetime(2026, 3, 15, 14, 30, 0)

WOW_ROOT, NATIVE_ROOT = CONFIG_ROOTS


class FakeConfigSource:
    """in-memory registry + filesystem. values are keyed by (subkey path, value name)."""

    def __init__(
        self,
        paths: tuple[str, ...] | list[str] = (),
        values: dict[tuple[str, str], Any] | None = None,
        failing: set[tuple[str, str]] | None = None,
    ) -> None:
        self.paths = set(paths)
        self.values = dict(values or {})
        self.failing = set(failing or ())
        self.reads: list[tuple[str, str]] = []
        self.checked: list[str] = []

    def exists(self, path: str) -> bool:
        self.checked.append(path)
        return path in self.paths

    def read(self, path: str, key: str) -> Any | None:
        self.reads.append((path, key))
        if (path, key) in self.failing:
            raise OSError(f"access denied: {path}\\{key}")
        return self.values.get((path, key))


class FakeServiceProbe:
    def __init__(self, states: dict[str, ServiceState] | None = None) -> None:
        self.states = dict(states or {})
        self.queried: list[str] = []

    def status(self, name: str) -> ServiceState:
        self.queried.append(name)
        return self.states.get(name, ServiceState.NOT_FOUND)


def misc(root: str = WOW_ROOT) -> str:
    return f"{root}\\Misc."


def rtscan(root: str = WOW_ROOT) -> str:
    return f"{root}\\Real Time Scan Configuration"


@pytest.fixture
def normalizer() -> DateNormalizer:
    return DateNormalizer(now=lambda: FIXED_NOW)
