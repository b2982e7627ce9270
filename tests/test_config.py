from __future__ import annotations

import pytest

from harness.config import (
    DEFAULT_PROPERTIES,
    Properties,
    load_settings,
    read_properties,
    resource_path,
)
from harness.errors import ConfigurationError

PROPERTIES = """\
# comment
! another comment

browser = Firefox
timeout.element.wait=4000
remote.wd: true
browser.remote_wd.url=http://grid.local:4444/wd/hub
browser.driver_options.file=driverOptions.json
locale=EN
"""


@pytest.fixture
def properties_file(tmp_path):
    path = tmp_path / "config.properties"
    path.write_text(PROPERTIES, encoding="utf-8")
    return path


def test_read_properties_skips_comments_and_trims(properties_file):
    props = read_properties(properties_file)

    assert props["browser"] == "Firefox"
    assert props["remote.wd"] == "true"
    assert props["browser.remote_wd.url"] == "http://grid.local:4444/wd/hub"
    assert len(props) == 6


def test_read_properties_rejects_lines_without_separator(tmp_path):
    path = tmp_path / "bad.properties"
    path.write_text("browser chrome\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="bad.properties:1"):
        read_properties(path)


def test_load_settings_converts_values(properties_file):
    settings = load_settings(properties_file, environ={})

    assert settings.browser == "firefox"
    assert settings.element_timeout == 4.0
    assert settings.remote is True
    assert settings.locale == "en"
    assert settings.log_level == "INFO"
    assert settings.driver_options_path == properties_file.parent / "driverOptions.json"


def test_environment_overrides_properties(properties_file):
    env = {"HARNESS_BROWSER": "chrome", "HARNESS_REMOTE_WD": "no", "HARNESS_BROWSER_REMOTE_WD_URL": "https://other:4444"}

    settings = load_settings(properties_file, environ=env)

    assert settings.browser == "chrome"
    assert settings.remote is False
    assert settings.remote_url == "https://other:4444"


def test_properties_location_from_environment(properties_file):
    settings = load_settings(environ={"HARNESS_PROPERTIES": str(properties_file)})

    assert settings.browser == "firefox"


def test_remote_mode_requires_url(properties_file):
    env = {"HARNESS_BROWSER_REMOTE_WD_URL": ""}
    values = read_properties(properties_file)
    values.pop("browser.remote_wd.url")
    properties_file.write_text("\n".join(f"{k}={v}" for k, v in values.items()), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="browser.remote_wd.url"):
        load_settings(properties_file, environ=env)


@pytest.mark.parametrize("raw", ["soon", "1.5", "-10"])
def test_invalid_timeout(raw):
    props = Properties({"timeout.element.wait": raw}, environ={})

    with pytest.raises(ConfigurationError, match="timeout.element.wait"):
        props.get_timeout("timeout.element.wait")


def test_invalid_boolean():
    props = Properties({"remote.wd": "maybe"}, environ={})

    with pytest.raises(ConfigurationError):
        props.get_bool("remote.wd")


def test_missing_properties_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_settings(tmp_path / "missing.properties", environ={})


def test_resource_path_keeps_absolute_paths(tmp_path):
    assert resource_path(tmp_path / "x.json", tmp_path / "other") == tmp_path / "x.json"
    assert resource_path("x.json", tmp_path) == (tmp_path / "x.json").resolve()


def test_shipped_properties_load():
    settings = load_settings(DEFAULT_PROPERTIES, environ={})

    assert settings.browser in {"chrome", "firefox"}
    assert settings.driver_options_path.exists()


def test_unprefixed_environment_is_ignored(properties_file):
    env = {"BROWSER": "/usr/bin/firefox", "REMOTE_WD": "no"}

    settings = load_settings(properties_file, environ=env)

    assert settings.browser == "firefox"
    assert settings.remote is True
