"""
pytest plugin wiring the driver container into the test lifecycle.

Enabled from the repository conftest.py; a suite can override the
``driver_factory`` or ``drivers`` fixtures to supply its own sessions.
"""

from __future__ import annotations

import datetime
import logging

import pytest

from harness.config import get_settings
from harness.container import DriverContainer
from harness.driver import DriverFactory, SupportsGetDriver
from harness.localization import Locale, Localization
from harness.logger import configure_logging
from harness.reporting import TestRunReporter
from harness.session import active_driver

logger = logging.getLogger("harness.tests")


def pytest_configure(config):
    configure_logging(get_settings().log_level)
    # One reporter per run collects results, screenshots and page sources.
    config._harness_reporter = TestRunReporter()


@pytest.fixture(scope="session", autouse=True)
def suite_locale():
    localization = Localization.instance()
    localization.set_locale(Locale.from_code(get_settings().locale))
    return localization


@pytest.fixture(scope="session")
def driver_factory() -> SupportsGetDriver:
    return DriverFactory(get_settings())


@pytest.fixture(scope="session")
def drivers(driver_factory: SupportsGetDriver) -> DriverContainer:
    return DriverContainer(driver_factory)


@pytest.fixture
def driver(request, drivers: DriverContainer, suite_locale: Localization):
    name = request.node.name
    try:
        drivers.set_drivers()
        print(suite_locale.get("run.started_at", date=datetime.datetime.now()))
        logger.info("Test '%s' started", name)
        yield drivers.current_driver()
    finally:
        drivers.quit()
        print(suite_locale.get("run.finished_at", date=datetime.datetime.now()))
        logger.info("Test '%s' finished", name)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    rep = outcome.get_result()
    reporter: TestRunReporter | None = getattr(item.config, "_harness_reporter", None)
    if reporter is None:
        return

    if rep.when == "call" or (rep.when == "setup" and rep.outcome in {"failed", "skipped"}) or (rep.when == "teardown" and rep.outcome == "failed"):
        reporter.record(item, rep, active_driver(), stage=rep.when)


def pytest_sessionfinish(session, exitstatus):
    reporter: TestRunReporter | None = getattr(session.config, "_harness_reporter", None)
    if reporter:
        reporter.finalize()


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    reporter: TestRunReporter | None = getattr(config, "_harness_reporter", None)
    if reporter and reporter.report_path:
        terminalreporter.write_sep("-", f"HTML report: {reporter.report_path}")
