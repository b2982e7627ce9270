# harness/driver.py

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol
from urllib.parse import urlparse

from selenium import webdriver
from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.chrome.service import Service as ChromeService
from selenium.webdriver.firefox.options import Options as FirefoxOptions
from selenium.webdriver.firefox.service import Service as FirefoxService
from selenium.webdriver.remote.file_detector import LocalFileDetector
from selenium.webdriver.remote.webdriver import WebDriver
from webdriver_manager.chrome import ChromeDriverManager
from webdriver_manager.firefox import GeckoDriverManager

from harness import session
from harness.capabilities import build_options, load_driver_options, platform_name
from harness.config import Settings
from harness.errors import UnsupportedBrowserError

logger = logging.getLogger(__name__)

PAGE_LOAD_STRATEGY = "normal"
REMOTE_VENDOR_OPTIONS = "selenoid:options"


class Browser(str, Enum):
    CHROME = "chrome"
    FIREFOX = "firefox"

    @classmethod
    def from_name(cls, name: str) -> "Browser":
        try:
            return cls((name or "").strip().lower())
        except ValueError:
            raise UnsupportedBrowserError(name) from None


class SupportsGetDriver(Protocol):
    def get_driver(self) -> WebDriver | None: ...


def is_valid_remote_url(url: str) -> bool:
    url = (url or "").strip()
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc) and " " not in url


def _local_service(browser: Browser) -> ChromeService | FirefoxService:
    if browser is Browser.CHROME:
        return ChromeService(ChromeDriverManager().install())
    return FirefoxService(GeckoDriverManager().install())


class DriverFactory:
    """
    Create one ready-to-use WebDriver per call, local or remote depending on
    settings. Browser options come from the driver options JSON file.
    """

    def __init__(self, settings: Settings, *, platform: str | None = None) -> None:
        self.settings = settings
        self._platform = platform

    def get_driver(self) -> WebDriver | None:
        browser = Browser.from_name(self.settings.browser)
        if self.settings.remote:
            driver = self._remote_driver(browser)
        else:
            driver = self._local_driver(browser)

        session.configure(timeout=self.settings.element_timeout, page_load_strategy=PAGE_LOAD_STRATEGY)
        return driver

    def options(self, browser: Browser) -> ChromeOptions | FirefoxOptions:
        document = load_driver_options(self.settings.driver_options_path)
        opts = build_options(browser.value, document, platform_name(self._platform))
        opts.page_load_strategy = session.config().page_load_strategy
        return opts

    def _local_driver(self, browser: Browser) -> WebDriver:
        opts = self.options(browser)
        service = _local_service(browser)
        logger.info("Starting local %s", browser.value)
        if browser is Browser.CHROME:
            return webdriver.Chrome(service=service, options=opts)
        return webdriver.Firefox(service=service, options=opts)

    def _remote_driver(self, browser: Browser) -> WebDriver | None:
        opts = self.options(browser)
        opts.set_capability(REMOTE_VENDOR_OPTIONS, {"enableVNC": True})

        url = self.settings.remote_url
        if not is_valid_remote_url(url):
            logger.critical("Unable to create Remote WebDriver: malformed URL %r", url)
            return None

        logger.info("Starting remote %s at %s", browser.value, url)
        driver = webdriver.Remote(command_executor=url, options=opts)
        driver.file_detector = LocalFileDetector()
        return driver
