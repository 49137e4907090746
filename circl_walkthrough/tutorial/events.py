"""Change notifications emitted by the tutorial orchestrator."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from circl_walkthrough.tutorial.views import Persona, TutorialState, TutorialStep


class EventType(str, Enum):
    """Types of tutorial events."""
    PERSONA_DETECTED = "persona_detected"
    STARTED = "started"
    STEP_CHANGED = "step_changed"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    RESET = "reset"


@dataclass(frozen=True)
class TutorialEvent:
    """Snapshot of the orchestrator right after a transition."""

    event_type: EventType
    state: TutorialState
    step_index: int
    persona: Optional[Persona] = None
    step: Optional[TutorialStep] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal


TutorialListener = Callable[[TutorialEvent], None]
NavigationCallback = Callable[[str], None]
