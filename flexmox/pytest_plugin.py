"""Pytest plugin providing the ``flexmox`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .config import MoxConfig
from .controller import FlexMox, Phase

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("flexmox")
    group.addoption(
        "--flexmox-auto-verify",
        action="store_true",
        dest="flexmox_auto_verify",
        default=None,
        help=(
            "Verify the flexmox fixture during teardown when the test passed. "
            "Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--no-flexmox-auto-verify",
        action="store_false",
        dest="flexmox_auto_verify",
        default=None,
        help=(
            "Only close the flexmox fixture during teardown, never verify it. "
            "Overrides the pytest.ini setting."
        ),
    )
    parser.addini(
        "flexmox_auto_verify",
        "Verify the flexmox fixture during teardown when the test passed.",
        type="bool",
        default=True,
    )
    parser.addini(
        "flexmox_partials_are_based",
        "Base partial doubles on the attributes of the object they wrap.",
        type="bool",
        default=False,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "flexmox(auto_verify: bool = True): override automatic verify() "
            "behaviour for a single test."
        ),
    )


class _FlexMoxItem(t.Protocol):
    """pytest item carrying flexmox teardown metadata."""

    _flexmox_instance: FlexMox | None
    _flexmox_auto_verify: bool


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach the report of each stage to the test item.

    The fixture teardown inspects ``rep_call`` to skip verification of tests
    that already failed.
    """
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


def _auto_verify_enabled(request: pytest.FixtureRequest) -> bool:
    """Return whether the fixture should verify during teardown."""
    # Priority order: marker > fixture param > CLI option > INI setting

    marker_value = _get_marker_auto_verify(request)
    if marker_value is not None:
        return marker_value

    param_value = _get_param_auto_verify(request)
    if param_value is not None:
        return param_value

    config = request.config
    cli_value = config.getoption("flexmox_auto_verify")
    if cli_value is not None:
        return bool(cli_value)

    return bool(config.getini("flexmox_auto_verify"))


def _get_marker_auto_verify(request: pytest.FixtureRequest) -> bool | None:
    """Return marker override for auto verify if present."""
    marker = request.node.get_closest_marker("flexmox")
    if marker is None or "auto_verify" not in marker.kwargs:
        return None
    return bool(marker.kwargs["auto_verify"])


def _get_param_auto_verify(request: pytest.FixtureRequest) -> bool | None:
    """Return fixture parameter override for auto verify if present."""
    param = getattr(request, "param", None)
    if param is None:
        return None
    if isinstance(param, dict):
        if "auto_verify" in param:
            return bool(param["auto_verify"])
        keys = list(param.keys())
        msg = f"flexmox fixture param dict must contain 'auto_verify' key, got keys: {keys}"
        raise TypeError(msg)
    if isinstance(param, bool):
        return param
    msg = (
        "flexmox fixture param must be a bool or dict with 'auto_verify' key, "
        f"got {type(param).__name__}"
    )
    raise TypeError(msg)


@pytest.fixture
def flexmox(request: pytest.FixtureRequest) -> t.Generator[FlexMox, None, None]:
    """Provide a :class:`FlexMox` verified and closed after the test."""
    auto_verify = _auto_verify_enabled(request)
    config = MoxConfig(
        partials_are_based=bool(request.config.getini("flexmox_partials_are_based")),
        auto_verify=auto_verify,
    )
    mox = FlexMox(config, verify_on_exit=False)
    try:
        _attach_node_state(request.node, mox, auto_verify=auto_verify)
        yield mox
    except Exception:
        logger.exception("Error during flexmox fixture setup or test execution")
        raise
    finally:
        _teardown_flexmox(request.node, mox)


def _attach_node_state(item: pytest.Item, mox: FlexMox, *, auto_verify: bool) -> None:
    """Expose ``mox`` on the test item for later teardown hooks."""
    typed_item = t.cast("_FlexMoxItem", item)
    typed_item._flexmox_instance = mox
    typed_item._flexmox_auto_verify = auto_verify


def _teardown_flexmox(item: pytest.Item, mox: FlexMox) -> None:
    """Verify unless the test failed, then close and clear per-item state."""
    typed_item = t.cast("_FlexMoxItem", item)
    auto_verify = getattr(typed_item, "_flexmox_auto_verify", True)
    verify_error: Exception | None = None
    if _call_stage_failed(item):
        logger.debug("Skipping flexmox verification for failed test %s", item.nodeid)
    elif auto_verify and mox.phase is Phase.OPEN:
        try:
            mox.verify()
        except Exception as err:
            logger.exception("Error during flexmox verification")
            verify_error = err
    try:
        mox.close()
    except Exception:
        logger.exception("Error during flexmox fixture cleanup")
        pytest.fail("flexmox fixture cleanup failed")
    finally:
        _detach_node_state(item, mox)
    if verify_error is not None:
        pytest.fail(f"{type(verify_error).__name__}: {verify_error}")


def _detach_node_state(item: pytest.Item, mox: FlexMox) -> None:
    """Remove per-item hooks referencing ``mox``."""
    typed_item = t.cast("_FlexMoxItem", item)
    if getattr(typed_item, "_flexmox_instance", None) is mox:
        delattr(typed_item, "_flexmox_instance")
    if hasattr(typed_item, "_flexmox_auto_verify"):
        delattr(typed_item, "_flexmox_auto_verify")


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)
