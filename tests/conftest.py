from __future__ import annotations

import json
from pathlib import Path

import pytest

from harness import session
from harness.config import Settings
from harness.container import DriverContainer

DRIVER_OPTIONS = {
    "chrome": {
        "linux": {
            "args": ["--headless", "--no-sandbox"],
            "experimentalOptions": {"excludeSwitches": ["enable-automation"]},
        },
        "windows": {
            "args": ["--start-maximized"],
            "experimentalOptions": {"excludeSwitches": ["enable-logging"]},
        },
    },
    "firefox": {
        "linux": {"args": ["-headless"]},
        "windows": {"args": ["-width=1400"]},
    },
}


class FakeDriver:
    """Stands in for a selenium session; records quit() calls."""

    def __init__(self, name: str = "fake", url: str = "about:blank") -> None:
        self.name = name
        self.current_url = url
        self.page_source = "<html><body>fake</body></html>"
        self.quit_calls = 0
        self.fail_on_quit: Exception | None = None

    def get(self, url: str) -> None:
        self.current_url = url

    def get_window_size(self) -> dict[str, int]:
        return {"width": 1400, "height": 900}

    def save_screenshot(self, path: str) -> bool:
        return False

    def quit(self) -> None:
        self.quit_calls += 1
        if self.fail_on_quit is not None:
            raise self.fail_on_quit

    def __repr__(self) -> str:
        return f"FakeDriver({self.name!r})"


class FakeFactory:
    def __init__(self) -> None:
        self.created: list[FakeDriver] = []

    def get_driver(self) -> FakeDriver:
        driver = FakeDriver(f"driver-{len(self.created) + 1}")
        self.created.append(driver)
        return driver


@pytest.fixture(autouse=True)
def clean_session():
    saved = session.config()
    session.clear()
    yield
    session.clear()
    session.configure(timeout=saved.timeout, page_load_strategy=saved.page_load_strategy)


@pytest.fixture
def factory() -> FakeFactory:
    return FakeFactory()


@pytest.fixture
def container(factory: FakeFactory) -> DriverContainer:
    return DriverContainer(factory)


@pytest.fixture
def driver_options_file(tmp_path: Path) -> Path:
    path = tmp_path / "driverOptions.json"
    path.write_text(json.dumps(DRIVER_OPTIONS), encoding="utf-8")
    return path


@pytest.fixture
def make_settings(driver_options_file: Path):
    def _make(**overrides) -> Settings:
        values = {
            "browser": "chrome",
            "element_timeout": 4.0,
            "remote": False,
            "remote_url": "",
            "driver_options_file": driver_options_file.name,
            "resources_dir": driver_options_file.parent,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def driver_options() -> dict:
    return json.loads(json.dumps(DRIVER_OPTIONS))
