"""GitHub tag retrieval and the tag -> changelog version mapping."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

import httpx
from pydantic import TypeAdapter

from tagscribe.config import settings
from tagscribe.core.errors import FormatError
from tagscribe.core.pagination import fetch_all_pages
from tagscribe.core.repository import RepositoryIdentifier
from tagscribe.core.semver import SemanticVersion
from tagscribe.models.schemas import Tag

logger = logging.getLogger(__name__)

GITHUB_API_ACCEPT_HEADER = "application/vnd.github+json"

_TAGS_ADAPTER = TypeAdapter(list[Tag])


def _request_headers() -> dict[str, str]:
    headers = {
        "Accept": GITHUB_API_ACCEPT_HEADER,
        "X-GitHub-Api-Version": settings.github_api_version,
    }
    if settings.github_token:
        headers["Authorization"] = f"Bearer {settings.github_token}"
    return headers


async def list_repository_tags(repository: RepositoryIdentifier) -> list[Tag]:
    """Fetch every tag of *repository*, in the order the API lists them.

    Pages beyond the first are requested concurrently.  Any HTTP failure
    raises ``httpx.HTTPError`` and aborts the whole listing.
    """
    url = f"{settings.github_api_url.rstrip('/')}/repos/{repository.owner}/{repository.name}/tags"
    headers = _request_headers()

    async with httpx.AsyncClient(follow_redirects=True, timeout=settings.request_timeout) as client:

        async def _get_page(page: int) -> tuple[Sequence[Tag], Mapping[str, str]]:
            response = await client.get(
                url,
                headers=headers,
                params={"per_page": settings.page_size, "page": page},
            )
            response.raise_for_status()
            return _TAGS_ADAPTER.validate_python(response.json()), response.headers

        tags = await fetch_all_pages(_get_page, max_concurrency=settings.max_concurrent_requests)

    logger.debug("Fetched %d tag(s) for %s", len(tags), repository.slug)
    return tags


def tag_version(tag: Tag, prefix: str = "") -> SemanticVersion:
    """Parse the version a tag names, after removing *prefix*."""
    name = tag.name.removeprefix(prefix) if prefix else tag.name
    return SemanticVersion.parse(name)


def changelog_versions(
    tags: Iterable[Tag],
    prefix: str = "",
    skip_invalid: bool = False,
) -> dict[SemanticVersion, Tag]:
    """Map tags to versions, newest first, one entry per version core.

    Tags without *prefix* are ignored.  Equal-precedence tags keep their
    retrieval order, so the first one listed wins the core.
    """
    entries: list[tuple[SemanticVersion, Tag]] = []
    for tag in tags:
        if not tag.name.startswith(prefix):
            continue
        try:
            version = tag_version(tag, prefix)
        except FormatError:
            if not skip_invalid:
                raise
            logger.warning("Skipping tag %r: not a semantic version", tag.name)
            continue
        entries.append((version, tag))

    # Stable even with reverse=True: ties stay in retrieval order.
    entries.sort(key=lambda entry: entry[0], reverse=True)

    result: dict[SemanticVersion, Tag] = {}
    seen_cores: set[SemanticVersion] = set()
    for version, tag in entries:
        if version.core in seen_cores:
            continue
        seen_cores.add(version.core)
        result[version] = tag
    return result
