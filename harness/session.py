"""
Active driver bookkeeping shared by the container, fixtures and page helpers.

The active driver is tracked per thread; the tuning values (element timeout,
page load strategy) are process-wide and rewritten whenever a session is made.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support.ui import WebDriverWait

from harness.errors import NoActiveDriverError


@dataclass(frozen=True)
class RunnerConfig:
    timeout: float = 4.0
    page_load_strategy: str = "normal"


_local = threading.local()
_config = RunnerConfig()
_config_lock = threading.Lock()


def configure(*, timeout: float, page_load_strategy: str) -> RunnerConfig:
    global _config
    with _config_lock:
        _config = RunnerConfig(timeout=timeout, page_load_strategy=page_load_strategy)
        return _config


def config() -> RunnerConfig:
    return _config


def set_driver(driver: WebDriver) -> None:
    _local.driver = driver


def active_driver() -> WebDriver | None:
    return getattr(_local, "driver", None)


def has_driver() -> bool:
    return active_driver() is not None


def get_driver() -> WebDriver:
    driver = active_driver()
    if driver is None:
        raise NoActiveDriverError(
            f"No active WebDriver on thread {threading.current_thread().name!r}; "
            "call DriverContainer.set_drivers() first"
        )
    return driver


def clear() -> None:
    _local.driver = None


def wait(timeout: float | None = None) -> WebDriverWait:
    return WebDriverWait(get_driver(), _config.timeout if timeout is None else timeout)
