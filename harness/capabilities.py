from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.firefox.options import Options as FirefoxOptions

from harness.errors import CapabilityConfigError, UnsupportedPlatformError


def platform_name(system: str | None = None) -> str:
    """Map ``sys.platform`` (or an explicit value) onto a driverOptions.json platform key."""
    system = (system if system is not None else sys.platform).lower()
    if system.startswith("win") or system == "cygwin":
        return "windows"
    if system.startswith("linux"):
        return "linux"
    raise UnsupportedPlatformError(system)


def load_driver_options(path: Path) -> dict[str, Any]:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise CapabilityConfigError(f"Driver options file not found: {path}") from e
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise CapabilityConfigError(f"Driver options file {path} is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise CapabilityConfigError(f"Driver options file {path} must contain a JSON object")
    return document


def _lookup(document: dict[str, Any], *keys: str) -> Any:
    node: Any = document
    walked: list[str] = []
    for key in keys:
        walked.append(key)
        if not isinstance(node, dict) or key not in node:
            raise CapabilityConfigError(f"Missing key {'.'.join(walked)!r} in driver options")
        node = node[key]
    return node


def _string_list(document: dict[str, Any], *keys: str) -> list[str]:
    value = _lookup(document, *keys)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise CapabilityConfigError(f"{'.'.join(keys)!r} must be a list of strings")
    return list(value)


def chrome_options(document: dict[str, Any], platform: str) -> ChromeOptions:
    opts = ChromeOptions()
    for arg in _string_list(document, "chrome", platform, "args"):
        opts.add_argument(arg)
    excludes = _string_list(document, "chrome", platform, "experimentalOptions", "excludeSwitches")
    opts.add_experimental_option("excludeSwitches", excludes)
    return opts


def firefox_options(document: dict[str, Any], platform: str) -> FirefoxOptions:
    opts = FirefoxOptions()
    for arg in _string_list(document, "firefox", platform, "args"):
        opts.add_argument(arg)
    return opts


_BUILDERS = {
    "chrome": chrome_options,
    "firefox": firefox_options,
}


def build_options(browser: str, document: dict[str, Any], platform: str) -> ChromeOptions | FirefoxOptions:
    try:
        builder = _BUILDERS[browser]
    except KeyError:
        raise CapabilityConfigError(f"No options builder for browser {browser!r}") from None
    return builder(document, platform)
