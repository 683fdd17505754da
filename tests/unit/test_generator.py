"""Tests for tagscribe.core.generator: end-to-end changelog generation."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from tagscribe.config import settings
from tagscribe.core.errors import FormatError, PaginationProtocolError
from tagscribe.core.generator import generate_changelog, resolve_versions, version_entries
from tagscribe.core.semver import SemanticVersion
from tagscribe.models.schemas import Tag

URL = "git@github.com:owner/name.git"


def _tag(name: str) -> Tag:
    return Tag(
        name=name,
        commit={"sha": "a" * 40, "url": "https://api.github.com/repos/owner/name/commits/" + "a" * 40},
        zipball_url=f"https://api.github.com/repos/owner/name/zipball/refs/tags/{name}",
        tarball_url=f"https://api.github.com/repos/owner/name/tarball/refs/tags/{name}",
        node_id=f"REF_{name}",
    )


def _patch_tags(*names: str):  # type: ignore[no-untyped-def]
    return patch(
        "tagscribe.core.github.list_repository_tags",
        new_callable=AsyncMock,
        return_value=[_tag(name) for name in names],
    )


class TestGenerateChangelog:
    async def test_creates_missing_file(self, tmp_path: Path) -> None:
        destination = tmp_path / "docs" / "CHANGELOG.md"

        with _patch_tags("v0.1.0", "v0.2.0") as mock_list:
            result = await generate_changelog(URL, destination, "v")

        mock_list.assert_awaited_once()
        assert destination.exists()
        text = destination.read_text()
        assert text.startswith("# Changelog of owner/name\n\n## Unreleased\n")
        assert text.index("[v0.2.0]") < text.index("[v0.1.0]")
        assert result.created is True
        assert result.repository == "owner/name"
        assert result.tags_fetched == 2
        assert result.added_versions == ["v0.2.0", "v0.1.0"]
        assert result.documented_versions == []

    async def test_updates_existing_file(self, tmp_path: Path) -> None:
        destination = tmp_path / "CHANGELOG.md"
        destination.write_text(
            "# Changelog of owner/name\n\n## [v0.1.0](https://github.com/owner/name/releases/tag/v0.1.0) (2023-01-01)"
            "\n\nFirst!\n"
        )

        with _patch_tags("v0.1.0", "v0.2.0", "v0.2.0+rebuild"):
            result = await generate_changelog(URL, destination, "v")

        text = destination.read_text()
        assert "First!" in text
        assert text.count("[v0.2.0]") == 1
        assert result.created is False
        assert result.added_versions == ["v0.2.0"]
        assert result.documented_versions == ["v0.1.0"]

    async def test_second_run_adds_nothing(self, tmp_path: Path) -> None:
        destination = tmp_path / "CHANGELOG.md"

        with _patch_tags("v1.0.0"):
            await generate_changelog(URL, destination, "v")
            first = destination.read_text()
            result = await generate_changelog(URL, destination, "v")

        assert destination.read_text() == first
        assert result.added_versions == []

    async def test_invalid_url_touches_nothing(self, tmp_path: Path) -> None:
        destination = tmp_path / "CHANGELOG.md"

        with _patch_tags("v1.0.0") as mock_list, pytest.raises(FormatError):
            await generate_changelog("http://github.com/owner/name.git", destination)

        mock_list.assert_not_awaited()
        assert not destination.exists()

    async def test_fetch_failure_keeps_previous_document(self, tmp_path: Path) -> None:
        destination = tmp_path / "CHANGELOG.md"
        destination.write_text("# Changelog of owner/name\n\nhand-written\n")

        with (
            patch(
                "tagscribe.core.github.list_repository_tags",
                new_callable=AsyncMock,
                side_effect=PaginationProtocolError("Could not find last page number"),
            ),
            pytest.raises(PaginationProtocolError),
        ):
            await generate_changelog(URL, destination)

        assert destination.read_text() == "# Changelog of owner/name\n\nhand-written\n"

    async def test_transport_failure_propagates(self, tmp_path: Path) -> None:
        destination = tmp_path / "CHANGELOG.md"

        with (
            patch(
                "tagscribe.core.github.list_repository_tags",
                new_callable=AsyncMock,
                side_effect=httpx.ConnectError("unreachable"),
            ),
            pytest.raises(httpx.ConnectError),
        ):
            await generate_changelog(URL, destination)

        assert not destination.exists()

    async def test_invalid_tag_fails_before_writing(self, tmp_path: Path) -> None:
        destination = tmp_path / "CHANGELOG.md"

        with _patch_tags("v1.0.0", "vNext"), pytest.raises(FormatError):
            await generate_changelog(URL, destination, "v")

        assert not destination.exists()

    async def test_skip_invalid_tags_setting(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "skip_invalid_tags", True)
        destination = tmp_path / "CHANGELOG.md"

        with _patch_tags("v1.0.0", "vNext"):
            result = await generate_changelog(URL, destination, "v")

        assert result.added_versions == ["v1.0.0"]

    async def test_no_temp_file_left_behind(self, tmp_path: Path) -> None:
        destination = tmp_path / "CHANGELOG.md"

        with _patch_tags("v1.0.0"):
            await generate_changelog(URL, destination, "v")

        assert [p.name for p in tmp_path.iterdir()] == ["CHANGELOG.md"]

    async def test_interrupted_write_keeps_previous_document(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        destination = tmp_path / "CHANGELOG.md"
        destination.write_text("# Changelog of owner/name\n\nhand-written\n")

        def _fail_replace(self: Path, target: Path) -> Path:
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", _fail_replace)

        with _patch_tags("v1.0.0"), pytest.raises(OSError, match="disk full"):
            await generate_changelog(URL, destination, "v")

        assert destination.read_text() == "# Changelog of owner/name\n\nhand-written\n"
        assert [p.name for p in tmp_path.iterdir()] == ["CHANGELOG.md"]


class TestResolveVersions:
    async def test_returns_mapping_newest_first(self) -> None:
        with _patch_tags("v1.0.0", "v2.0.0", "v1.5.0-rc.1"):
            resolved = await resolve_versions(URL, "v")

        assert list(resolved) == [SemanticVersion.parse(v) for v in ("2.0.0", "1.5.0-rc.1", "1.0.0")]

    async def test_version_entries(self) -> None:
        with _patch_tags("v1.0.0"):
            resolved = await resolve_versions(URL, "v")

        entries = version_entries(resolved, "v")
        assert len(entries) == 1
        assert entries[0].version == "v1.0.0"
        assert entries[0].tag == "v1.0.0"
        assert entries[0].commit_sha == "a" * 40

    async def test_skip_invalid_tags_setting(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "skip_invalid_tags", True)

        with _patch_tags("v1.0.0", "vNext"):
            resolved = await resolve_versions(URL, "v")

        assert list(resolved) == [SemanticVersion.parse("1.0.0")]

    async def test_invalid_tag_rejected_like_generate(self) -> None:
        with _patch_tags("v1.0.0", "vNext"), pytest.raises(FormatError):
            await resolve_versions(URL, "v")
