"""Root test configuration for timebound tests."""

from __future__ import annotations

import time
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load test environment (TZ=UTC) before any test module imports, so local-time
# boundary arithmetic is deterministic regardless of the host zone.
load_dotenv(dotenv_path=Path(__file__).parent.parent / '.env.test', override=True)
if hasattr(time, 'tzset'):
    time.tzset()


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line('markers', 'unit: Unit tests (no real clocks or threads)')
    config.addinivalue_line('markers', 'slow: Tests that wait on real timers')
