"""Configuration management for the walkthrough engine."""

import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from circl_walkthrough.tutorial.views import Persona

# Load environment variables from .env file
load_dotenv()


class StoreConfig(BaseModel):
    """Preference store configuration."""

    preferences_dir: str = Field(
        default="~/.circl",
        description="Directory holding the preferences file"
    )
    preferences_name: str = Field(
        default="tutorial_preferences",
        description="Preferences file name, without extension"
    )

    @property
    def path(self) -> Path:
        """Full path of the JSON preferences file."""
        return Path(self.preferences_dir).expanduser() / f"{self.preferences_name}.json"

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Create config from environment variables."""
        return cls(
            preferences_dir=os.getenv("CIRCL_PREFERENCES_DIR", "~/.circl"),
            preferences_name=os.getenv("CIRCL_PREFERENCES_NAME", "tutorial_preferences"),
        )


class WalkthroughConfig(BaseModel):
    """Walkthrough behaviour configuration."""

    default_persona: Persona = Field(
        default=Persona.COMMUNITY_BUILDER,
        description="Persona used when none has been detected yet"
    )
    auto_trigger: bool = Field(
        default=True,
        description="Check the post-onboarding trigger before a walk"
    )

    @classmethod
    def from_env(cls) -> "WalkthroughConfig":
        """Create config from environment variables."""
        return cls(
            default_persona=os.getenv("CIRCL_DEFAULT_PERSONA", Persona.COMMUNITY_BUILDER.value),
            auto_trigger=os.getenv("CIRCL_AUTO_TRIGGER", "true").lower() == "true",
        )


class Config(BaseModel):
    """Main configuration container."""

    store: StoreConfig = Field(default_factory=StoreConfig.from_env)
    walkthrough: WalkthroughConfig = Field(default_factory=WalkthroughConfig.from_env)

    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Log file path"
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON formatted logs"
    )

    @classmethod
    def from_env(cls) -> "Config":
        """Create complete config from environment variables."""
        return cls(
            store=StoreConfig.from_env(),
            walkthrough=WalkthroughConfig.from_env(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE"),
            json_logs=os.getenv("LOG_JSON", "false").lower() == "true",
        )

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        self.store.path.parent.mkdir(parents=True, exist_ok=True)
