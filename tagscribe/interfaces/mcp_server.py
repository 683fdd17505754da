"""MCP server for tagscribe: exposes changelog tools via FastMCP."""

from typing import Any

from fastmcp import FastMCP

mcp = FastMCP("tagscribe")


@mcp.tool()
async def generate_changelog(
    repository_url: str,
    destination: str = "CHANGELOG.md",
    tag_prefix: str = "",
) -> dict[str, Any]:
    """Merge a repository's release tags into the changelog file at destination."""
    from tagscribe.core import generator

    result = await generator.generate_changelog(repository_url, destination, tag_prefix)
    return result.model_dump()


@mcp.tool()
async def list_versions(repository_url: str, tag_prefix: str = "") -> list[dict[str, Any]]:
    """List the versions (newest first) that a changelog for the repository would contain."""
    from tagscribe.core import generator

    resolved = await generator.resolve_versions(repository_url, tag_prefix)
    return [entry.model_dump() for entry in generator.version_entries(resolved, tag_prefix)]
