"""Key-value preference stores shared with the host application."""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from circl_walkthrough.tutorial.views import Persona

logger = logging.getLogger(__name__)

# Keys are part of the compatibility surface: resuming across restarts
# depends on them staying exactly as they are.
KEY_USER_TYPE = "user_type_detected"
KEY_TUTORIAL_COMPLETED_PREFIX = "tutorial_completed_"
KEY_CURRENT_STEP = "tutorial_current_step"
KEY_CURRENT_FLOW = "tutorial_current_flow"
KEY_JUST_COMPLETED_ONBOARDING = "just_completed_onboarding"
KEY_ONBOARDING_COMPLETED = "onboarding_completed"

# Appended to the file name of an unusable preferences file before it is replaced
CORRUPT_SUFFIX = ".corrupt"


def completion_key(persona: Persona) -> str:
    """Key of the completion flag for one persona."""
    return f"{KEY_TUTORIAL_COMPLETED_PREFIX}{persona.value}"


def owned_keys() -> List[str]:
    """Every key the walkthrough engine writes."""
    return [
        KEY_USER_TYPE,
        KEY_CURRENT_STEP,
        KEY_CURRENT_FLOW,
        KEY_JUST_COMPLETED_ONBOARDING,
        *(completion_key(persona) for persona in Persona),
    ]


class PreferenceStore(ABC):
    """
    Minimal key-value store for JSON-compatible values.

    The store is shared with the rest of the application; callers must only
    touch their own keys.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value or `default`."""

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """Store a value."""

    @abstractmethod
    def remove(self, *keys: str) -> None:
        """Remove keys. Missing keys are ignored."""

    @abstractmethod
    def keys(self) -> List[str]:
        """All keys currently stored."""

    def contains(self, key: str) -> bool:
        return key in self.keys()

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        return value if isinstance(value, bool) else default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key)
        # bool is an int subclass; a stored flag is not a step index
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return default

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get(key)
        return value if isinstance(value, str) else default


class InMemoryPreferenceStore(PreferenceStore):
    """Dictionary-backed store, mostly for tests and embedding."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the stored data."""
        return dict(self._data)


class JsonPreferenceStore(PreferenceStore):
    """
    Store backed by a JSON object file.

    Every write re-reads the file and replaces it atomically, so values
    written by other parts of the application are preserved. A corrupt file
    is read as empty and moved aside to `<name>.corrupt` before the first
    write replaces it.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the store.

        Args:
            path: Location of the JSON file. Created on first write.
        """
        self.path = Path(path)

    def _load(self) -> Tuple[Dict[str, Any], bool]:
        """Return the stored data and whether the file content was usable."""
        if not self.path.exists():
            return {}, True
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except OSError as e:
            logger.warning(f"Unreadable preferences file {self.path}, treating as empty: {e}")
            return {}, True
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt preferences file {self.path}, treating as empty: {e}")
            return {}, False
        if not isinstance(data, dict):
            logger.error(f"Preferences file {self.path} is not a JSON object, treating as empty")
            return {}, False
        return data, True

    def _read(self) -> Dict[str, Any]:
        return self._load()[0]

    def _read_for_update(self) -> Dict[str, Any]:
        data, intact = self._load()
        if not intact:
            # Keep the unusable content for the host instead of overwriting it
            backup = self.path.with_name(f"{self.path.name}{CORRUPT_SUFFIX}")
            os.replace(self.path, backup)
            logger.error(f"Moved corrupt preferences file to {backup}")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def put(self, key: str, value: Any) -> None:
        data = self._read_for_update()
        data[key] = value
        self._write(data)
        logger.debug(f"Saved preference {key}={value!r}")

    def remove(self, *keys: str) -> None:
        data = self._read()
        removed = [key for key in keys if key in data]
        for key in removed:
            del data[key]
        if removed:
            self._write(data)
            logger.debug(f"Removed preferences: {', '.join(removed)}")

    def keys(self) -> List[str]:
        return list(self._read())
