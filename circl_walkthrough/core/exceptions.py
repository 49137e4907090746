"""Custom exceptions for the walkthrough engine."""

from typing import Any, Optional


class WalkthroughError(Exception):
    """Base exception for all walkthrough errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        recoverable: bool = True
    ):
        self.message = message
        self.details = details
        self.recoverable = recoverable
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


class ConfigurationError(WalkthroughError):
    """No tutorial flow is defined for a persona."""

    def __init__(self, persona: Any, **kwargs):
        self.persona = persona
        super().__init__(
            f"No tutorial flow found for persona: {persona}",
            recoverable=False,
            **kwargs
        )


class PersistenceError(WalkthroughError):
    """A stored value does not match any known tag."""

    def __init__(self, key: str, value: Any, **kwargs):
        self.key = key
        self.value = value
        super().__init__(
            f"Invalid stored value for '{key}': {value!r}",
            **kwargs
        )


class ReentrancyRejection(WalkthroughError):
    """A tutorial start was requested while another start is in flight."""

    def __init__(self, **kwargs):
        super().__init__(
            "Tutorial is already starting, ignoring duplicate call",
            **kwargs
        )
