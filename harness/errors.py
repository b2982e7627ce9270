from __future__ import annotations


class HarnessError(Exception):
    """Base class for everything the harness raises on its own."""


class ConfigurationError(HarnessError, ValueError):
    pass


class UnsupportedBrowserError(ConfigurationError):
    def __init__(self, browser: str) -> None:
        super().__init__(f"Browser {browser} is not supported")
        self.browser = browser


class UnsupportedPlatformError(ConfigurationError):
    def __init__(self, platform: str) -> None:
        super().__init__(f"Platform {platform} is not supported")
        self.platform = platform


class CapabilityConfigError(ConfigurationError):
    pass


class DriverCreationError(HarnessError):
    pass


class NoActiveDriverError(HarnessError, RuntimeError):
    pass
