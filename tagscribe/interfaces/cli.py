"""CLI interface for tagscribe: entry point for the tagscribe command."""

import asyncio
import logging
import subprocess
from pathlib import Path

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from tagscribe.config import settings
from tagscribe.core.errors import TagscribeError
from tagscribe.core.generator import generate_changelog, resolve_versions, version_entries
from tagscribe.core.report import render_result, render_versions

app = typer.Typer(name="tagscribe", help="Keep a changelog in sync with a repository's release tags")
console = Console()


_ENV_TEMPLATE = """\
# tagscribe configuration
# Every setting can also be passed on the command line.

# Repository clone URL (default: git remote origin of the current directory)
# TAGSCRIBE_REPOSITORY_URL=https://github.com/owner/name.git

# Prefix stripped from tag names before parsing, e.g. "v"
# TAGSCRIBE_TAG_PREFIX=v

# Changelog path (default: CHANGELOG.md)
# TAGSCRIBE_DESTINATION=CHANGELOG.md

# GitHub token, raises the API rate limit and allows private repositories
# TAGSCRIBE_GITHUB_TOKEN=github_pat_your-token-here

# Skip tags that are not semantic versions instead of failing
# TAGSCRIBE_SKIP_INVALID_TAGS=false
"""


def _git_origin_url() -> str:
    """Return the current directory's ``remote.origin.url``, or "" outside a repository."""
    try:
        completed = subprocess.run(
            ["git", "config", "--get", "remote.origin.url"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return ""
    return completed.stdout.strip()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_url(url: str | None) -> str:
    resolved = url or settings.repository_url or _git_origin_url()
    if not resolved:
        console.print(
            "[red]Error: no repository URL (pass --url, set TAGSCRIBE_REPOSITORY_URL, or run inside a git clone)[/red]"
        )
        raise typer.Exit(code=1)
    return resolved


@app.command()
def generate(
    url: str | None = typer.Option(None, "--url", "-u", help="Repository clone URL (SSH or HTTPS)"),
    prefix: str | None = typer.Option(None, "--prefix", "-p", help="Tag name prefix, e.g. 'v'"),
    output: str | None = typer.Option(None, "--output", "-o", help="Changelog file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Merge release tags into the changelog file."""
    _configure_logging(verbose)
    repository_url = _resolve_url(url)
    tag_prefix = prefix if prefix is not None else settings.tag_prefix
    destination = output or settings.destination

    try:
        result = asyncio.run(generate_changelog(repository_url, destination, tag_prefix))
    except (TagscribeError, httpx.HTTPError) as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    render_result(result, console=console)


@app.command()
def versions(
    url: str | None = typer.Option(None, "--url", "-u", help="Repository clone URL (SSH or HTTPS)"),
    prefix: str | None = typer.Option(None, "--prefix", "-p", help="Tag name prefix, e.g. 'v'"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """List the versions a changelog would contain, without writing anything."""
    _configure_logging(verbose)
    repository_url = _resolve_url(url)
    tag_prefix = prefix if prefix is not None else settings.tag_prefix

    try:
        resolved = asyncio.run(resolve_versions(repository_url, tag_prefix))
    except (TagscribeError, httpx.HTTPError) as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    render_versions(version_entries(resolved, tag_prefix), console=console)


@app.command()
def init() -> None:
    """Create a .env template file with tagscribe configuration."""
    env_path = Path(".env")
    if env_path.exists():
        console.print("[yellow].env file already exists, not overwriting[/yellow]")
        return

    env_path.write_text(_ENV_TEMPLATE)
    console.print("[green]Created .env template; edit it with your settings[/green]")


@app.command()
def serve() -> None:
    """Start the MCP server."""
    from tagscribe.interfaces.mcp_server import mcp

    mcp.run()
