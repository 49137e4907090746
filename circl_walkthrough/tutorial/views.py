"""Data models for personas, tutorial steps, flows and state."""

from enum import Enum
from typing import Any, Iterable, Optional, Tuple
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field, model_validator

from circl_walkthrough.core.exceptions import PersistenceError


class Persona(str, Enum):
    """User persona driving which tutorial content is shown."""
    ENTREPRENEUR = "ENTREPRENEUR"
    STUDENT = "STUDENT"
    STUDENT_ENTREPRENEUR = "STUDENT_ENTREPRENEUR"
    MENTOR = "MENTOR"
    COMMUNITY_BUILDER = "COMMUNITY_BUILDER"
    INVESTOR = "INVESTOR"
    OTHER = "OTHER"

    @property
    def display_name(self) -> str:
        """Human-readable persona name."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: Any, key: str = "persona") -> "Persona":
        """
        Convert a stored tag back into a Persona.

        Raises:
            PersistenceError: If the value is not a known tag
        """
        try:
            return cls(value)
        except ValueError:
            raise PersistenceError(key, value) from None


_DISPLAY_NAMES = {
    Persona.ENTREPRENEUR: "Entrepreneur",
    Persona.STUDENT: "Student",
    Persona.STUDENT_ENTREPRENEUR: "Student Entrepreneur",
    Persona.MENTOR: "Mentor",
    Persona.COMMUNITY_BUILDER: "Community Builder",
    Persona.INVESTOR: "Investor",
    Persona.OTHER: "Other",
}


class OnboardingAnswers(BaseModel):
    """Answers captured by the onboarding flow."""

    model_config = ConfigDict(frozen=True)

    usage_interests: str = Field(default="", description="Main usage interests, free text")
    industry_interests: str = Field(default="", description="Industry interests, free text")
    location: str = Field(default="")
    user_goals: Optional[str] = Field(default=None)


class TooltipAlignment(str, Enum):
    """Where the tooltip sits relative to the highlighted region."""
    TOP = "TOP"
    BOTTOM = "BOTTOM"
    LEADING = "LEADING"
    TRAILING = "TRAILING"
    CENTER = "CENTER"


class HighlightRect(BaseModel):
    """Screen region to highlight. Opaque to the engine."""

    model_config = ConfigDict(frozen=True)

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


class TutorialStep(BaseModel):
    """A single unit of guided content."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    description: str
    target_view: str = Field(description="Identifier of the UI region this step points at")
    message: str = Field(description="Detailed explanation shown in the tooltip")
    navigation_destination: Optional[str] = Field(
        default=None,
        description="Screen to navigate to when the step is shown"
    )
    highlight_rect: Optional[HighlightRect] = Field(default=None)
    tooltip_alignment: TooltipAlignment = Field(default=TooltipAlignment.CENTER)
    duration: Optional[int] = Field(default=None, description="Duration in milliseconds")
    is_interactive: bool = Field(
        default=False,
        description="Whether the user needs to interact or just view"
    )


class TutorialFlow(BaseModel):
    """Ordered, immutable sequence of steps built for one persona."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    persona: Persona
    title: str
    description: str
    steps: Tuple[TutorialStep, ...] = Field(min_length=1)
    estimated_duration: int = Field(description="Duration in milliseconds")
    is_required: bool = Field(default=True)

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def calculate_progress(self, completed_steps: Iterable[str]) -> float:
        """Fraction of this flow's steps whose ids are in completed_steps."""
        done = set(completed_steps)
        completed = sum(1 for step in self.steps if step.id in done)
        return completed / len(self.steps)


class TutorialStatus(str, Enum):
    """Tag of the tutorial state."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class TutorialState(BaseModel):
    """
    Current state of the tutorial.

    `step_index` is carried only while the status is IN_PROGRESS.
    """

    model_config = ConfigDict(frozen=True)

    status: TutorialStatus
    step_index: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_payload(self) -> "TutorialState":
        if self.status is TutorialStatus.IN_PROGRESS and self.step_index is None:
            raise ValueError("in_progress state requires a step_index")
        if self.status is not TutorialStatus.IN_PROGRESS and self.step_index is not None:
            raise ValueError(f"{self.status.value} state carries no step_index")
        return self

    @classmethod
    def not_started(cls) -> "TutorialState":
        return cls(status=TutorialStatus.NOT_STARTED)

    @classmethod
    def in_progress(cls, step_index: int) -> "TutorialState":
        return cls(status=TutorialStatus.IN_PROGRESS, step_index=step_index)

    @classmethod
    def completed(cls) -> "TutorialState":
        return cls(status=TutorialStatus.COMPLETED)

    @classmethod
    def skipped(cls) -> "TutorialState":
        return cls(status=TutorialStatus.SKIPPED)

    @property
    def is_terminal(self) -> bool:
        return self.status in (TutorialStatus.COMPLETED, TutorialStatus.SKIPPED)

    def __str__(self) -> str:
        if self.status is TutorialStatus.IN_PROGRESS:
            return f"in_progress({self.step_index})"
        return self.status.value
