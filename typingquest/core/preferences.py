from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class PreferenceStore(Protocol):
    """Where a confirmed layout choice is remembered between runs."""

    def get_layout(self) -> Optional[str]: ...

    def set_layout(self, layout_id: str) -> None: ...

    def clear_layout(self) -> None: ...


class InMemoryPreferenceStore:
    def __init__(self, layout_id: Optional[str] = None) -> None:
        self._layout_id = layout_id

    def get_layout(self) -> Optional[str]:
        return self._layout_id

    def set_layout(self, layout_id: str) -> None:
        self._layout_id = layout_id

    def clear_layout(self) -> None:
        self._layout_id = None


class JsonPreferenceStore:
    """Stores the confirmed keyboard layout and preferred word language.
    File: ~/.typingquest/preferences.json unless another path is given."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or Path.home() / ".typingquest" / "preferences.json"
        self._prefs = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def get_layout(self) -> Optional[str]:
        return self._prefs.get("layout")

    def set_layout(self, layout_id: str) -> None:
        self._prefs["layout"] = layout_id
        self._save()

    def clear_layout(self) -> None:
        if self._prefs.pop("layout", None) is not None:
            self._save()

    def get_language(self) -> Optional[str]:
        return self._prefs.get("language")

    def set_language(self, language: str) -> None:
        self._prefs["language"] = language
        self._save()

    def _load(self) -> Dict[str, str]:
        if not self._file_path.exists():
            return {}
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load preferences from %s: %s", self._file_path, e)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring malformed preferences in %s", self._file_path)
            return {}
        return {key: str(value) for key, value in payload.items() if key in ("layout", "language") and value}

    def _save(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(self._prefs, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save preferences to %s: %s", self._file_path, e)
