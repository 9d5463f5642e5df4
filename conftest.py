"""Global test configuration and shared fixtures."""

from __future__ import annotations

import logging
import typing as t

import pytest

from flexmox.controller import FlexMox

pytest_plugins = ("flexmox.pytest_plugin",)


@pytest.fixture
def mox() -> t.Generator[FlexMox, None, None]:
    """Provide a container that is closed, but not verified, after the test."""
    container = FlexMox(verify_on_exit=False)
    yield container
    container.close()


@pytest.fixture(autouse=True)
def flexmox_debug_logging(caplog: pytest.LogCaptureFixture) -> None:
    """Capture routing and verification debug logs for failure reports."""
    caplog.set_level(logging.DEBUG, logger="flexmox")
