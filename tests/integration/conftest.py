"""Integration test fixtures: these tests call the public GitHub API."""

import pytest

from tagscribe.config import settings


@pytest.fixture(autouse=True)
def _integration_settings(monkeypatch):
    """Skip non-SemVer tags regardless of a developer's .env file.

    The ``settings`` singleton is built at import time, so the attribute is
    patched directly; setting the environment variable here would be too late.
    """
    monkeypatch.setattr(settings, "skip_invalid_tags", True)
