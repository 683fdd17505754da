"""End-to-end changelog generation: tags in, markdown file out."""

from __future__ import annotations

import logging
from pathlib import Path

from tagscribe.config import settings
from tagscribe.core import github
from tagscribe.core.changelog import ChangelogDocument
from tagscribe.core.repository import RepositoryIdentifier
from tagscribe.core.semver import SemanticVersion
from tagscribe.models.schemas import GenerationResult, Tag, VersionEntry

logger = logging.getLogger(__name__)


async def _fetch_versions(
    repository: RepositoryIdentifier, tag_prefix: str
) -> tuple[list[Tag], dict[SemanticVersion, Tag]]:
    tags = await github.list_repository_tags(repository)
    return tags, github.changelog_versions(tags, tag_prefix, skip_invalid=settings.skip_invalid_tags)


async def resolve_versions(repository_url: str, tag_prefix: str = "") -> dict[SemanticVersion, Tag]:
    """Fetch the repository's tags and map them to changelog versions, newest first."""
    _, versions = await _fetch_versions(RepositoryIdentifier.parse(repository_url), tag_prefix)
    return versions


def version_entries(versions: dict[SemanticVersion, Tag], tag_prefix: str = "") -> list[VersionEntry]:
    return [
        VersionEntry(version=version.to_version_string(tag_prefix), tag=tag.name, commit_sha=tag.commit_sha)
        for version, tag in versions.items()
    ]


def _write_atomically(path: Path, text: str) -> None:
    """Write *text* to a sibling temp file, then rename it over *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


async def generate_changelog(
    repository_url: str,
    destination: str | Path,
    tag_prefix: str = "",
) -> GenerationResult:
    """Merge the repository's release tags into the changelog at *destination*.

    The file is only written once every tag page has been fetched and the
    existing document parsed, and is replaced by rename, so a failed run
    leaves it as it was.
    """
    repository = RepositoryIdentifier.parse(repository_url)
    tags, versions = await _fetch_versions(repository, tag_prefix)

    path = Path(destination)
    created = not path.exists()
    if created:
        document = ChangelogDocument.new(repository)
    else:
        document = ChangelogDocument.parse(path.read_text(encoding="utf-8"), tag_prefix)

    added = document.new_versions(versions)
    text = document.merge(added, repository, tag_prefix).render()

    _write_atomically(path, text)
    logger.info("Wrote %s with %d new version(s)", path, len(added))

    return GenerationResult(
        repository=repository.slug,
        destination=str(path),
        created=created,
        tags_fetched=len(tags),
        added_versions=[version.to_version_string(tag_prefix) for version in added],
        documented_versions=[version.to_version_string(tag_prefix) for version in document.documented_versions],
    )
