"""Persona-driven tutorial walkthroughs: classification, content and orchestration."""

from circl_walkthrough.tutorial.classifier import classify
from circl_walkthrough.tutorial.content import TutorialCatalog
from circl_walkthrough.tutorial.events import EventType, TutorialEvent
from circl_walkthrough.tutorial.orchestrator import TutorialOrchestrator
from circl_walkthrough.tutorial.store import (
    PreferenceStore,
    InMemoryPreferenceStore,
    JsonPreferenceStore,
)
from circl_walkthrough.tutorial.views import (
    OnboardingAnswers,
    Persona,
    TooltipAlignment,
    HighlightRect,
    TutorialStep,
    TutorialFlow,
    TutorialStatus,
    TutorialState,
)

__all__ = [
    "classify",
    "TutorialCatalog",
    "EventType",
    "TutorialEvent",
    "TutorialOrchestrator",
    "PreferenceStore",
    "InMemoryPreferenceStore",
    "JsonPreferenceStore",
    "OnboardingAnswers",
    "Persona",
    "TooltipAlignment",
    "HighlightRect",
    "TutorialStep",
    "TutorialFlow",
    "TutorialStatus",
    "TutorialState",
]
