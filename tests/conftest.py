from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from circl_walkthrough.tutorial.orchestrator import TutorialOrchestrator  # noqa: E402
from circl_walkthrough.tutorial.store import InMemoryPreferenceStore  # noqa: E402


class NavigationRecorder:
    """Navigation callback that remembers every destination."""

    def __init__(self) -> None:
        self.destinations: list[str] = []

    def __call__(self, destination: str) -> None:
        self.destinations.append(destination)


@pytest.fixture
def store() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()


@pytest.fixture
def navigation() -> NavigationRecorder:
    return NavigationRecorder()


@pytest.fixture
def make_orchestrator(store, navigation):
    """Build orchestrators over the shared store, as a fresh app launch would."""

    def factory(**kwargs) -> TutorialOrchestrator:
        kwargs.setdefault("store", store)
        kwargs.setdefault("navigation_callback", navigation)
        return TutorialOrchestrator(**kwargs)

    return factory
