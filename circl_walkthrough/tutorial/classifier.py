"""Persona detection from onboarding answers."""

from typing import Callable, List, Tuple

from circl_walkthrough.core.logging import get_logger
from circl_walkthrough.tutorial.views import OnboardingAnswers, Persona

logger = get_logger(__name__)

# Options offered by the "Main Usage Interests" onboarding page
USAGE_INTEREST_OPTIONS = (
    "Student",
    "Start Your Business",
    "Scale Your Business",
    "Network with Entrepreneurs",
    "Find Co-Founder/s",
    "Find Mentors",
    "Find Investors",
    "Be Part of the Community",
    "Share Knowledge",
    "Make Investments",
    "Sell a Skill",
)

_BUSINESS_KEYWORDS = ("entrepreneur", "start your business", "scale your business")

Rule = Tuple[str, Persona, Callable[[str, str], bool]]


def _contains_any(text: str, keywords) -> bool:
    return any(keyword in text for keyword in keywords)


def _interest(keyword: str) -> Callable[[str, str], bool]:
    return lambda interests, industry: keyword in interests


# Evaluated top to bottom; the first matching rule wins.
RULES: List[Rule] = [
    (
        "student",
        Persona.STUDENT,
        lambda interests, industry: (
            "student" in interests and not _contains_any(interests, _BUSINESS_KEYWORDS)
        ),
    ),
    (
        "student + business",
        Persona.STUDENT_ENTREPRENEUR,
        lambda interests, industry: (
            "student" in interests and _contains_any(interests, _BUSINESS_KEYWORDS)
        ),
    ),
    ("start your business", Persona.ENTREPRENEUR, _interest("start your business")),
    ("scale your business", Persona.ENTREPRENEUR, _interest("scale your business")),
    ("network with entrepreneurs", Persona.ENTREPRENEUR, _interest("network with entrepreneurs")),
    ("find co-founder", Persona.ENTREPRENEUR, _interest("find co-founder")),
    ("find mentors", Persona.ENTREPRENEUR, _interest("find mentors")),
    ("find investors", Persona.ENTREPRENEUR, _interest("find investors")),
    ("make investments", Persona.INVESTOR, _interest("make investments")),
    ("share knowledge", Persona.MENTOR, _interest("share knowledge")),
    ("sell a skill", Persona.ENTREPRENEUR, _interest("sell a skill")),
    ("be part of the community", Persona.COMMUNITY_BUILDER, _interest("be part of the community")),
    # Broader keyword fallbacks
    (
        "broad: entrepreneur",
        Persona.ENTREPRENEUR,
        lambda interests, industry: (
            "entrepreneur" in interests or "startups & entrepreneurship" in industry
        ),
    ),
    (
        "broad: investing",
        Persona.INVESTOR,
        lambda interests, industry: _contains_any(interests, ("invest", "investor", "funding")),
    ),
    (
        "broad: mentoring",
        Persona.MENTOR,
        lambda interests, industry: _contains_any(interests, ("mentor", "teaching")),
    ),
    (
        "broad: community",
        Persona.COMMUNITY_BUILDER,
        lambda interests, industry: _contains_any(interests, ("community", "networking")),
    ),
]

DEFAULT_PERSONA = Persona.COMMUNITY_BUILDER


def classify(answers: OnboardingAnswers) -> Persona:
    """
    Map onboarding answers to a persona.

    Pure and total: matching is case-insensitive substring search over the
    usage and industry interests, and anything unmatched falls back to
    COMMUNITY_BUILDER.

    Args:
        answers: Answers captured by the onboarding flow

    Returns:
        Detected persona
    """
    interests = answers.usage_interests.lower()
    industry = answers.industry_interests.lower()

    for name, persona, matches in RULES:
        if matches(interests, industry):
            logger.debug(
                "Detected persona",
                persona=persona.value,
                rule=name,
                interests=interests,
                industry=industry,
            )
            return persona

    logger.debug("Detected persona", persona=DEFAULT_PERSONA.value, rule="default")
    return DEFAULT_PERSONA
