"""Behavioural tests for doubles using pytest-bdd."""

from __future__ import annotations

from pathlib import Path

from pytest_bdd import scenario

from tests.steps.doubles import *  # noqa: F403

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"


@scenario(
    str(FEATURES_DIR / "double.feature"),
    "unconstrained queries and a single expected update",
)
def test_unconstrained_queries_and_expected_update() -> None:
    """Counts hold and unmatched arguments are rejected."""


@scenario(
    str(FEATURES_DIR / "double.feature"),
    "successive return values repeat the last one",
)
def test_successive_return_values() -> None:
    """Return sequences stick on their last value."""


@scenario(
    str(FEATURES_DIR / "double.feature"),
    "undefined results propagate",
)
def test_undefined_results_propagate() -> None:
    """The undefined sentinel absorbs further calls."""


@scenario(
    str(FEATURES_DIR / "double.feature"),
    "ignored missing methods are inert",
)
def test_ignored_missing_methods() -> None:
    """Ignored calls neither raise nor affect verification."""


@scenario(
    str(FEATURES_DIR / "double.feature"),
    "unmet counts are reported at verification",
)
def test_unmet_counts_reported() -> None:
    """Verification names the unmet expectation."""
