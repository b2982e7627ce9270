from __future__ import annotations

import json
import threading
from enum import Enum
from pathlib import Path

from harness.config import get_settings
from harness.errors import ConfigurationError


class Locale(Enum):
    EN = "en"
    RU = "ru"

    @classmethod
    def from_code(cls, code: str) -> "Locale":
        try:
            return cls((code or "").strip().lower())
        except ValueError:
            raise ConfigurationError(f"Locale {code!r} is not supported") from None


class Localization:
    """Locale-dependent strings loaded from <resources root>/localization/<code>.json."""

    _instance: "Localization | None" = None
    _instance_lock = threading.Lock()

    def __init__(self, bundles_dir: Path | None = None, locale: Locale = Locale.RU) -> None:
        self.bundles_dir = bundles_dir or get_settings().resources_dir / "localization"
        self._locale = locale
        self._bundle: dict[str, str] | None = None

    @classmethod
    def instance(cls) -> "Localization":
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @property
    def locale(self) -> Locale:
        return self._locale

    def set_locale(self, locale: Locale) -> None:
        self._locale = locale
        self._bundle = None

    def _load(self) -> dict[str, str]:
        if self._bundle is None:
            path = self.bundles_dir / f"{self._locale.value}.json"
            try:
                self._bundle = json.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as e:
                raise ConfigurationError(f"Localization bundle not found: {path}") from e
        return self._bundle

    def get(self, key: str, **kwargs: object) -> str:
        try:
            text = self._load()[key]
        except KeyError:
            raise ConfigurationError(f"No {self._locale.value!r} translation for {key!r}") from None
        return text.format(**kwargs) if kwargs else text
