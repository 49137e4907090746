"""
Circl Walkthrough
=================

Personalized walkthrough engine: classifies a user into a persona from
onboarding answers, builds that persona's tutorial flow and drives the user
through it with progress persisted across restarts.

Main Components:
- classify: Maps onboarding answers to a Persona
- TutorialCatalog: Builds the tutorial flow for a persona
- TutorialOrchestrator: The tutorial state machine
- JsonPreferenceStore: File-backed preference store

Quick Start:
    >>> from circl_walkthrough import TutorialOrchestrator, JsonPreferenceStore
    >>> from circl_walkthrough import OnboardingAnswers
    >>>
    >>> orchestrator = TutorialOrchestrator(store=JsonPreferenceStore("prefs.json"))
    >>> orchestrator.set_navigation_callback(print)
    >>> orchestrator.detect_and_set_user_type(
    ...     OnboardingAnswers(usage_interests="Share Knowledge")
    ... )
    >>> orchestrator.start()
"""

__version__ = "1.0.0"
__author__ = "Circl Team"

# Lazy imports for better performance
_LAZY_IMPORTS = {
    "TutorialOrchestrator": ("circl_walkthrough.tutorial.orchestrator", "TutorialOrchestrator"),
    "TutorialCatalog": ("circl_walkthrough.tutorial.content", "TutorialCatalog"),
    "classify": ("circl_walkthrough.tutorial.classifier", "classify"),
    "Persona": ("circl_walkthrough.tutorial.views", "Persona"),
    "OnboardingAnswers": ("circl_walkthrough.tutorial.views", "OnboardingAnswers"),
    "TutorialFlow": ("circl_walkthrough.tutorial.views", "TutorialFlow"),
    "TutorialStep": ("circl_walkthrough.tutorial.views", "TutorialStep"),
    "TutorialState": ("circl_walkthrough.tutorial.views", "TutorialState"),
    "InMemoryPreferenceStore": ("circl_walkthrough.tutorial.store", "InMemoryPreferenceStore"),
    "JsonPreferenceStore": ("circl_walkthrough.tutorial.store", "JsonPreferenceStore"),
    "Config": ("circl_walkthrough.core.config", "Config"),
}


def __getattr__(name: str):
    """Lazy import mechanism for main components."""
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        from importlib import import_module
        module = import_module(module_path)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "TutorialOrchestrator",
    "TutorialCatalog",
    "classify",
    "Persona",
    "OnboardingAnswers",
    "TutorialFlow",
    "TutorialStep",
    "TutorialState",
    "InMemoryPreferenceStore",
    "JsonPreferenceStore",
    "Config",
    "__version__",
]
