from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from harness.errors import ConfigurationError

REPO_ROOT = Path(__file__).resolve().parents[1]
RESOURCES_DIR = REPO_ROOT / "resources"
DEFAULT_PROPERTIES = RESOURCES_DIR / "config.properties"

ENV_PREFIX = "HARNESS_"

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}


def _env_key(key: str) -> str:
    return ENV_PREFIX + key.upper().replace(".", "_")


def _parse_bool(key: str, raw: str) -> bool:
    val = raw.strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE or not val:
        return False
    raise ConfigurationError(f"Property {key!r} is not a boolean: {raw!r}")


def read_properties(path: Path) -> dict[str, str]:
    """
    Parse a flat ``key=value`` properties file.

    Lines starting with ``#`` or ``!`` are comments. The first ``=`` or ``:``
    separates key and value; both sides are stripped. Multi-line values and
    unicode escapes are not supported.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(f"Properties file not found: {path}") from e

    props: dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped[0] in "#!":
            continue
        seps = [i for i in (stripped.find("="), stripped.find(":")) if i >= 0]
        if not seps:
            raise ConfigurationError(f"{path}:{lineno}: expected key=value, got {stripped!r}")
        idx = min(seps)
        props[stripped[:idx].strip()] = stripped[idx + 1:].strip()
    return props


class Properties:
    """Properties file values with per-key environment overrides."""

    def __init__(self, values: dict[str, str], environ: dict[str, str] | None = None) -> None:
        self._values = dict(values)
        self._environ = os.environ if environ is None else environ

    def get(self, key: str, default: str | None = None) -> str | None:
        env_val = self._environ.get(_env_key(key))
        if env_val is not None and env_val.strip():
            return env_val.strip()
        return self._values.get(key, default)

    def require(self, key: str) -> str:
        val = self.get(key)
        if val is None or val == "":
            raise ConfigurationError(f"Missing required property {key!r}")
        return val

    def get_bool(self, key: str, default: bool = False) -> bool:
        val = self.get(key)
        if val is None:
            return default
        return _parse_bool(key, val)

    def get_timeout(self, key: str) -> float:
        """Read a millisecond value and return it in seconds."""
        raw = self.require(key)
        try:
            millis = int(raw)
        except ValueError as e:
            raise ConfigurationError(f"Property {key!r} is not an integer: {raw!r}") from e
        if millis < 0:
            raise ConfigurationError(f"Property {key!r} must not be negative: {millis}")
        return millis / 1000.0


@dataclass(frozen=True)
class Settings:
    browser: str
    element_timeout: float
    remote: bool = False
    remote_url: str = ""
    driver_options_file: str = "driverOptions.json"
    locale: str = "ru"
    log_level: str = "INFO"
    resources_dir: Path = RESOURCES_DIR

    @property
    def driver_options_path(self) -> Path:
        return resource_path(self.driver_options_file, self.resources_dir)

    @classmethod
    def from_properties(cls, props: Properties, *, resources_dir: Path = RESOURCES_DIR) -> "Settings":
        remote = props.get_bool("remote.wd")
        return cls(
            browser=props.require("browser").strip().lower(),
            element_timeout=props.get_timeout("timeout.element.wait"),
            remote=remote,
            remote_url=props.require("browser.remote_wd.url") if remote else (props.get("browser.remote_wd.url") or ""),
            driver_options_file=props.require("browser.driver_options.file"),
            locale=(props.get("locale") or "ru").strip().lower(),
            log_level=(props.get("log.level") or "INFO").strip().upper(),
            resources_dir=resources_dir,
        )


def resource_path(relative: str | Path, resources_dir: Path = RESOURCES_DIR) -> Path:
    path = Path(relative)
    if path.is_absolute():
        return path
    return (resources_dir / path).resolve()


def load_settings(path: Path | None = None, environ: dict[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    if path is None:
        override = (env.get("HARNESS_PROPERTIES") or "").strip()
        path = Path(override) if override else DEFAULT_PROPERTIES
    props = Properties(read_properties(path), environ=env)
    return Settings.from_properties(props, resources_dir=path.resolve().parent)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
