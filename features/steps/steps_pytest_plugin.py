"""Steps for testing the pytest plugin."""

from __future__ import annotations

import shutil
import subprocess
import sys
import tempfile
import typing as t
from pathlib import Path

from behave import given, then, when  # type: ignore[attr-defined]


class BehaveContext(t.Protocol):
    """Behave step context for plugin tests."""

    test_file: Path
    tmpdir: Path
    result: subprocess.CompletedProcess[str]


_PASSING_TEST = """
pytest_plugins = ("flexmox.pytest_plugin",)

def test_example(flexmox):
    db = flexmox.mock("db")
    db.should_receive("query").with_args("select 1").and_return([1]).once()
    assert db.query("select 1") == [1]
"""

_UNMET_TEST = """
pytest_plugins = ("flexmox.pytest_plugin",)

def test_example(flexmox):
    flexmox.mock("db").should_receive("query").once()
"""


def _write_test_file(context: BehaveContext, code: str) -> None:
    tmpdir = Path(tempfile.mkdtemp())
    context.test_file = tmpdir / "test_example.py"
    context.tmpdir = tmpdir
    context.test_file.write_text(code)


@given("a temporary test file using the flexmox fixture")
def step_create_test_file(context: BehaveContext) -> None:
    """Write a pytest file whose expectations are met."""
    _write_test_file(context, _PASSING_TEST)


@given("a temporary test file with an unmet expectation")
def step_create_unmet_test_file(context: BehaveContext) -> None:
    """Write a pytest file whose expectation is never called."""
    _write_test_file(context, _UNMET_TEST)


@when("I run pytest on the file")
def step_run_pytest(context: BehaveContext) -> None:
    """Execute pytest on the generated file."""
    result = subprocess.run(  # noqa: S603
        [sys.executable, "-m", "pytest", "-p", "no:cacheprovider", str(context.test_file)],
        capture_output=True,
        text=True,
    )
    context.result = result
    shutil.rmtree(context.tmpdir)


@then("the run should pass")
def step_check_pass(context: BehaveContext) -> None:
    """Assert that pytest exited successfully."""
    assert context.result.returncode == 0  # noqa: S101


@then('the run should fail mentioning "{text}"')
def step_check_fail(context: BehaveContext, text: str) -> None:
    """Assert that pytest failed and reported *text*."""
    assert context.result.returncode != 0  # noqa: S101
    assert text in context.result.stdout  # noqa: S101
