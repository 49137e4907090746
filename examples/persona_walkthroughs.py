#!/usr/bin/env python3
"""
Example onboarding answers and the walkthrough each one produces.

Classifies a handful of typical onboarding answers, then drives the
resulting tutorial from start to finish with an in-memory store, printing
every navigation request the host app would receive.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from circl_walkthrough.core.config import Config
from circl_walkthrough.core.logging import setup_logging
from circl_walkthrough.tutorial import (
    EventType,
    InMemoryPreferenceStore,
    OnboardingAnswers,
    TutorialOrchestrator,
)
from circl_walkthrough.tutorial.store import KEY_JUST_COMPLETED_ONBOARDING


EXAMPLE_ANSWERS = [
    {"usage_interests": "Student", "industry_interests": "Education"},
    {"usage_interests": "Student, Start Your Business", "industry_interests": "Technology"},
    {"usage_interests": "Find Co-Founder/s", "industry_interests": "Startups & Entrepreneurship"},
    {"usage_interests": "Make Investments", "industry_interests": "Finance"},
    {"usage_interests": "Share Knowledge", "industry_interests": "Marketing"},
    {"usage_interests": "Be Part of the Community", "industry_interests": ""},
    {"usage_interests": "", "industry_interests": ""},
]


def run_example(answers: OnboardingAnswers) -> dict:
    """Run one onboarding-to-completion cycle and return a summary."""
    store = InMemoryPreferenceStore()
    navigations = []
    orchestrator = TutorialOrchestrator(store=store, navigation_callback=navigations.append)

    steps_seen = []
    orchestrator.subscribe(
        lambda event: steps_seen.append(event.step_index)
        if event.event_type in (EventType.STARTED, EventType.STEP_CHANGED) else None
    )

    persona = orchestrator.detect_and_set_user_type(answers)
    store.put(KEY_JUST_COMPLETED_ONBOARDING, True)

    orchestrator.check_and_trigger()
    flow_title = orchestrator.current_flow.title
    while orchestrator.is_showing_tutorial:
        orchestrator.next_step()

    return {
        "persona": persona,
        "flow": flow_title,
        "steps": len(steps_seen),
        "navigations": navigations,
        "completed": orchestrator.has_tutorial_been_completed(persona),
        "retriggers": orchestrator.check_and_trigger(),
    }


def main():
    config = Config.from_env()
    setup_logging(level="WARNING", log_file=config.log_file, json_logs=config.json_logs)

    print("🎓 Circl Walkthrough - Example Personas")
    print("=" * 60)

    for raw in EXAMPLE_ANSWERS:
        answers = OnboardingAnswers(**raw)
        result = run_example(answers)

        print(f"\nUsage: {answers.usage_interests or '(empty)'!r}")
        print(f"  Persona:     {result['persona'].display_name}")
        print(f"  Flow:        {result['flow']} ({result['steps']} steps)")
        print(f"  Navigations: {' -> '.join(result['navigations'])}")
        print(f"  Completed:   {'✅' if result['completed'] else '❌'}")
        print(f"  Re-triggers: {result['retriggers']}")


if __name__ == "__main__":
    main()
