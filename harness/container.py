from __future__ import annotations

import logging
import threading
from enum import Enum

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.remote.webdriver import WebDriver

from harness import session
from harness.driver import SupportsGetDriver
from harness.errors import DriverCreationError

logger = logging.getLogger(__name__)


class Instance(Enum):
    """Slots a test can keep a browser session in at the same time."""

    FIRST = "first"
    SECOND = "second"
    THIRD = "third"


class DriverContainer:
    """
    Per-thread registry of ready-to-use drivers, keyed by :class:`Instance`.

    Sessions are created lazily through the factory the first time a slot is
    switched to, and destroyed together by :meth:`quit`. Every thread, including
    one started from a test, sees its own registry which starts out empty.
    """

    def __init__(self, factory: SupportsGetDriver) -> None:
        self._factory = factory
        self._local = threading.local()

    def _drivers(self) -> dict[Instance, WebDriver]:
        drivers = getattr(self._local, "drivers", None)
        if drivers is None:
            drivers = self._local.drivers = {}
        return drivers

    def set_drivers(self) -> WebDriver:
        """Make sure the first slot has a session and make it the active one."""
        return self.switch_to_first()

    def _create_driver(self, instance: Instance) -> WebDriver:
        driver = self._factory.get_driver()
        if driver is None:
            raise DriverCreationError(f"Driver factory returned no session for {instance.name}")
        try:
            logger.info("Browser size is %s", driver.get_window_size())
        except WebDriverException as exc:
            logger.warning("Could not read browser size: %s", exc)
        self._drivers()[instance] = driver
        return driver

    def switch_to_first(self) -> WebDriver:
        return self.switch_driver(Instance.FIRST)

    def switch_to_second(self) -> WebDriver:
        return self.switch_driver(Instance.SECOND)

    def switch_to_third(self) -> WebDriver:
        return self.switch_driver(Instance.THIRD)

    def switch_driver(self, instance: Instance) -> WebDriver:
        driver = self._drivers().get(instance)
        if driver is None:
            driver = self._create_driver(instance)
        session.set_driver(driver)
        return driver

    def instances(self) -> tuple[Instance, ...]:
        return tuple(self._drivers())

    def current_driver(self) -> WebDriver:
        return session.get_driver()

    def current_url(self) -> str:
        return session.get_driver().current_url

    def quit(self) -> None:
        drivers = self._drivers()
        for instance, driver in list(drivers.items()):
            try:
                driver.quit()
            except Exception as exc:  # best effort per session
                logger.warning("Failed to quit %s driver: %s", instance.name, exc)
        if session.active_driver() in drivers.values():
            session.clear()
        drivers.clear()
