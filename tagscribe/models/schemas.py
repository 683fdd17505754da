"""Pydantic models shared by the tagscribe core and its interfaces."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Tag API payloads ---


class Commit(BaseModel):
    sha: str
    url: str


class Tag(BaseModel):
    """One entry of ``GET /repos/{owner}/{name}/tags``."""

    name: str
    commit: Commit
    zipball_url: str
    tarball_url: str
    node_id: str

    @property
    def commit_sha(self) -> str:
        return self.commit.sha


# --- Run results ---


class VersionEntry(BaseModel):
    version: str
    tag: str
    commit_sha: str


class GenerationResult(BaseModel):
    repository: str
    destination: str
    created: bool = Field(description="True when the changelog did not exist before this run")
    tags_fetched: int
    added_versions: list[str] = Field(default_factory=list)
    documented_versions: list[str] = Field(default_factory=list)
