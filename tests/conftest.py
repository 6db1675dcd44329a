"""Pytest configuration and shared fixtures for sheetnest tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from sheetnest.domain import NestingCalculator, SheetSpec

FIXTURES_PATH = Path(__file__).parent / "fixtures" / "configs"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: tests that take a long time to run")


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def standard_sheet() -> SheetSpec:
    """Standard 4'x8' sheet at $50."""
    return SheetSpec(width=48.0, height=96.0, cost=50.0)


@pytest.fixture
def calculator(standard_sheet: SheetSpec) -> NestingCalculator:
    """Calculator on a 4'x8' $50 sheet with no policy configured."""
    return NestingCalculator.from_sheet(standard_sheet)


@pytest.fixture
def fixtures_path() -> Path:
    """Directory holding JSON configuration fixtures."""
    return FIXTURES_PATH
