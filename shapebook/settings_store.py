"""JSON settings file with defaults filled in and dotted-key access."""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

from shapebook.settings_models import SettingsPaths, default_settings

logger = logging.getLogger(__name__)

_MISSING = object()


class SettingsStoreError(RuntimeError):
    """Raised when a settings file cannot be saved."""


def with_defaults(data: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``data`` with every key of ``defaults`` it lacks, section by section."""
    merged = {key: deepcopy(value) for key, value in data.items()}
    for key, fallback in defaults.items():
        current = merged.get(key, _MISSING)
        if current is _MISSING:
            merged[key] = deepcopy(fallback)
        elif isinstance(current, dict) and isinstance(fallback, dict):
            merged[key] = with_defaults(current, fallback)
    return merged


def lookup(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Resolve ``"section.name"`` inside nested dicts."""
    node: Any = data
    for part in key.split(".") if key else ():
        if not isinstance(node, Mapping):
            return default
        node = node.get(part, _MISSING)
        if node is _MISSING:
            return default
    return node


class JsonSettingsStore:
    def __init__(self, path: Path, defaults: Mapping[str, Any] | None = None) -> None:
        self.path = Path(path)
        self.defaults: dict[str, Any] = deepcopy(dict(defaults if defaults is not None else default_settings()))
        self.data: dict[str, Any] = {}
        self.dirty: bool = False
        self.last_error: str | None = None

    @classmethod
    def default(cls) -> "JsonSettingsStore":
        return cls(SettingsPaths.default().settings_file)

    def load(self) -> dict[str, Any]:
        """Read the file; a missing file marks the store dirty so defaults get written."""
        self.last_error = None
        if not self.path.exists():
            self.data = with_defaults({}, self.defaults)
            self.dirty = True
            return self.data

        loaded: dict[str, Any] = {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self.last_error = str(exc)
        else:
            if isinstance(raw, dict):
                loaded = raw
            else:
                self.last_error = f"{self.path} holds a JSON {type(raw).__name__}, not an object."

        if self.last_error:
            # The broken file stays untouched until the user fixes it.
            logger.warning("Ignoring settings file %s: %s", self.path, self.last_error)
        self.data = with_defaults(loaded, self.defaults)
        self.dirty = False
        return self.data

    def save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.data, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            raise SettingsStoreError(f"Could not write settings file '{self.path}': {exc}") from exc
        self.dirty = False
        self.last_error = None

    def get(self, key: str, default: Any = None) -> Any:
        return lookup(self.data, key, default)

    def get_int(self, key: str, default: int, *, minimum: int | None = None, maximum: int | None = None) -> int:
        try:
            value = int(self.get(key, default))
        except (TypeError, ValueError):
            value = int(default)
        if minimum is not None:
            value = max(minimum, value)
        if maximum is not None:
            value = min(maximum, value)
        return value

    def get_float(self, key: str, default: float, *, minimum: float | None = None) -> float:
        try:
            value = float(self.get(key, default))
        except (TypeError, ValueError):
            value = float(default)
        if minimum is not None:
            value = max(minimum, value)
        return value

    def get_str_list(self, key: str, default: list[str] | None = None) -> list[str]:
        value = self.get(key, default)
        if isinstance(value, str):
            return value.split()
        if not isinstance(value, list):
            return list(default or [])
        return [str(item) for item in value]
