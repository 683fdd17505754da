from pathlib import Path

import pytest


@pytest.fixture
def changelog_path(tmp_path: Path) -> Path:
    """Path for a changelog inside a not-yet-existing directory."""
    return tmp_path / "build" / "CHANGELOG.md"
