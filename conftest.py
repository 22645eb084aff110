"""
Root conftest.py for pytest configuration

This file handles:
1. Test environment variables, set before any application module is imported
2. Automatic marker inheritance based on test location
"""
import os
from pathlib import Path

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

DOMAIN_MARKERS = {"core", "d1_extraction", "d2_formulas", "d3_scoring"}


def pytest_collection_modifyitems(config, items):
    """Mark tests by suite (unit/integration) and domain from their path"""
    for item in items:
        parts = Path(str(item.fspath)).parts
        if "unit" in parts and not item.get_closest_marker("integration"):
            item.add_marker(pytest.mark.unit)
        if "integration" in parts:
            item.add_marker(pytest.mark.integration)
        for domain in DOMAIN_MARKERS.intersection(parts):
            item.add_marker(getattr(pytest.mark, domain))
