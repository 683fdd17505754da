"""Changelog document scanning, merging, and rendering.

A changelog is a markdown file shaped like::

    # Changelog of owner/name            <- header (free-form)

    ## Unreleased                        <- regenerated on every run

    Content

    ## [v1.1.0](https://host/owner/name/releases/tag/v1.1.0) (date)

    Hand-written notes, kept verbatim.

The scanner walks the lines once with three states (header, unreleased
block, release block).  Release blocks are carried through untouched;
only the Unreleased block is dropped and re-synthesized, and headings for
newly discovered versions are inserted above the existing ones.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from enum import Enum, auto

from pydantic import BaseModel, ConfigDict, Field

from tagscribe.core.errors import FormatError
from tagscribe.core.repository import RepositoryIdentifier
from tagscribe.core.semver import SemanticVersion

logger = logging.getLogger(__name__)

HEADING_MARKER = "## "
UNRELEASED_HEADING = f"{HEADING_MARKER}Unreleased"
PLACEHOLDER_BODY = "Content"
PLACEHOLDER_DATE = "date"

# Format: ## [0.0.0](url) (YYYY-MM-DD)
_RELEASE_HEADING_RE = re.compile(rf"{re.escape(HEADING_MARKER)}\[(?P<version>[^\]]*)\]\(")


class _State(Enum):
    IN_HEADER = auto()
    IN_UNRELEASED_BLOCK = auto()
    IN_RELEASE_BLOCK = auto()


def is_heading(line: str) -> bool:
    return line.startswith(HEADING_MARKER)


def title_line(repository: RepositoryIdentifier) -> str:
    return f"# Changelog of {repository.owner}/{repository.name}"


class ReleaseBlock(BaseModel):
    """A heading line and the body lines that follow it, up to the next heading.

    ``version`` is None for headings that do not name a release (opaque
    hand-written sections); those are preserved but never deduplicated.
    """

    model_config = ConfigDict(frozen=True)

    version: SemanticVersion | None = None
    lines: tuple[str, ...]


def _heading_version(line: str, line_number: int, prefix: str) -> SemanticVersion | None:
    if not line.startswith(f"{HEADING_MARKER}["):
        return None

    match = _RELEASE_HEADING_RE.match(line)
    if match is None:
        raise FormatError(f"Malformed release heading on line {line_number}", line)

    text = match["version"]
    if prefix and text.startswith(prefix):
        text = text.removeprefix(prefix)
    try:
        return SemanticVersion.parse(text)
    except FormatError as exc:
        raise FormatError(f"Invalid version in release heading on line {line_number}", match["version"]) from exc


def _strip_blank_edges(lines: list[str]) -> list[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


class ChangelogDocument(BaseModel):
    """A parsed changelog: header lines, whether an Unreleased block was seen, release blocks."""

    header: tuple[str, ...] = ()
    had_unreleased: bool = False
    blocks: tuple[ReleaseBlock, ...] = Field(default_factory=tuple)

    @classmethod
    def new(cls, repository: RepositoryIdentifier) -> ChangelogDocument:
        return cls(header=(title_line(repository),))

    @classmethod
    def parse(cls, text: str, prefix: str = "") -> ChangelogDocument:
        """Scan *text* into header, Unreleased, and release blocks.

        Raises FormatError for a ``## [`` heading whose version is unreadable.
        """
        state = _State.IN_HEADER
        header: list[str] = []
        had_unreleased = False
        blocks: list[ReleaseBlock] = []
        current: list[str] = []
        current_version: SemanticVersion | None = None

        def _close_block() -> None:
            if state is _State.IN_RELEASE_BLOCK:
                blocks.append(ReleaseBlock(version=current_version, lines=tuple(current)))

        for line_number, line in enumerate(text.splitlines(), start=1):
            if not is_heading(line):
                if state is _State.IN_HEADER:
                    header.append(line)
                elif state is _State.IN_RELEASE_BLOCK:
                    current.append(line)
                # Lines inside the Unreleased block are discarded.
                continue

            _close_block()
            if line.rstrip() == UNRELEASED_HEADING:
                state = _State.IN_UNRELEASED_BLOCK
                had_unreleased = True
                current = []
                current_version = None
            else:
                state = _State.IN_RELEASE_BLOCK
                current = [line]
                current_version = _heading_version(line, line_number, prefix)

        _close_block()
        return cls(header=tuple(header), had_unreleased=had_unreleased, blocks=tuple(blocks))

    @property
    def documented_versions(self) -> list[SemanticVersion]:
        return [block.version for block in self.blocks if block.version is not None]

    @property
    def documented_cores(self) -> set[SemanticVersion]:
        return {version.core for version in self.documented_versions}

    def new_versions(self, versions: Iterable[SemanticVersion]) -> list[SemanticVersion]:
        """Versions whose core no existing release heading already covers, order kept."""
        cores = self.documented_cores
        return [version for version in versions if version.core not in cores]

    def merge(
        self,
        versions: Iterable[SemanticVersion],
        repository: RepositoryIdentifier,
        prefix: str = "",
    ) -> ChangelogDocument:
        """Return a document with release blocks for the undocumented *versions* added.

        *versions* is expected newest first; new blocks go above the existing
        ones in that order.  Existing blocks are kept as they are.
        """
        added = [
            ReleaseBlock(version=version, lines=release_block_lines(version, repository, prefix))
            for version in self.new_versions(versions)
        ]
        logger.debug("Adding %d release block(s)", len(added))
        return ChangelogDocument(header=self.header, had_unreleased=self.had_unreleased, blocks=(*added, *self.blocks))

    def render(self) -> str:
        """Render header, a fresh Unreleased block, and every release block."""
        sections: list[str] = []

        header = _strip_blank_edges(list(self.header))
        if header:
            sections.append("\n".join(header))

        sections.append("\n".join(unreleased_block_lines()))

        for block in self.blocks:
            lines = _strip_blank_edges(list(block.lines))
            if lines:
                sections.append("\n".join(lines))

        return "\n\n".join(sections).rstrip() + "\n"


def unreleased_block_lines() -> tuple[str, ...]:
    return (UNRELEASED_HEADING, "", PLACEHOLDER_BODY)


def release_heading(version: SemanticVersion, repository: RepositoryIdentifier, prefix: str = "") -> str:
    version_string = version.to_version_string(prefix)
    link = f"[{version_string}]({repository.url}/releases/tag/{version_string})"
    return f"{HEADING_MARKER}{link} ({PLACEHOLDER_DATE})"


def release_block_lines(
    version: SemanticVersion,
    repository: RepositoryIdentifier,
    prefix: str = "",
) -> tuple[str, ...]:
    return (release_heading(version, repository, prefix), "", PLACEHOLDER_BODY)


def merge_changelog(
    existing: str | None,
    versions: Iterable[SemanticVersion],
    repository: RepositoryIdentifier,
    prefix: str = "",
) -> str:
    """Merge *versions* (newest first) into *existing* changelog text.

    ``None`` means there is no changelog yet; one is started with a title line.
    """
    if existing is None:
        document = ChangelogDocument.new(repository)
    else:
        document = ChangelogDocument.parse(existing, prefix)
    return document.merge(versions, repository, prefix).render()
