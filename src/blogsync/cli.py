"""CLI interface for blogsync."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from blogsync.config import BlogSyncConfig, build_orchestrator, load_config, merge_cli_overrides
from blogsync.content.models import CollectionKind, ContentRecord, IndexEntry
from blogsync.content.storage import LocalStorage
from blogsync.editor import HtmlDocument, file_to_data_url, gather_record
from blogsync.integrations.github import DEFAULT_BRANCH, GitHubConfig, GitHubContentClient
from blogsync.settings import SettingsStore
from blogsync.shared.errors import (
    BlogSyncError,
    ContentValidationError,
    PartialSyncError,
    TransportError,
)
from blogsync.sync.orchestrator import RemoteStatus, SyncOrchestrator

app = typer.Typer(
    name="blogsync",
    help="Write blog drafts and posts to local storage or a GitHub repository.",
)
settings_app = typer.Typer(help="Manage the stored GitHub settings.")
draft_app = typer.Typer(help="Save, list and delete drafts.")
app.add_typer(settings_app, name="settings")
app.add_typer(draft_app, name="draft")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from blogsync import __version__

        console.print(f"blogsync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .blogsync.toml file."),
    ] = None,
    storage_path: Annotated[
        Optional[Path],
        typer.Option("--storage", help="Local storage file (overrides config)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log progress to stderr."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """blogsync - local and GitHub-backed blog storage."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    config = load_config(config_path)
    ctx.obj = merge_cli_overrides(config, storage_path=storage_path)


def _config(ctx: typer.Context) -> BlogSyncConfig:
    return ctx.obj if isinstance(ctx.obj, BlogSyncConfig) else load_config()


def _orchestrator(ctx: typer.Context) -> SyncOrchestrator:
    return build_orchestrator(_config(ctx))


def _settings(ctx: typer.Context) -> SettingsStore:
    return SettingsStore(LocalStorage(_config(ctx).storage_path()))


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def _format_ms(value: int | None) -> str:
    if not value:
        return "-"
    return datetime.fromtimestamp(value / 1000).strftime("%Y-%m-%d %H:%M")


def _print_entries(title: str, entries: list[IndexEntry]) -> None:
    if not entries:
        console.print(f"[yellow]No {title.lower()} found.[/yellow]")
        return
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Updated")
    for entry in entries:
        table.add_row(entry.id, escape(entry.title or "Untitled"), _format_ms(entry.updated_at))
    console.print(table)


def _build_record(title: str, body: Path, cover: Path | None, record_id: str | None) -> ContentRecord:
    try:
        document = HtmlDocument(body.read_text(encoding="utf-8"))
        cover_url = file_to_data_url(cover) if cover else ""
    except OSError as exc:
        _fail(f"Could not read input file: {exc}")
    return gather_record(document, title, cover=cover_url, current_id=record_id)


# ── settings ─────────────────────────────────────────────────────────────


@settings_app.command("save")
def settings_save(
    ctx: typer.Context,
    owner: Annotated[str, typer.Option(help="Repository owner.")],
    repo: Annotated[str, typer.Option(help="Repository name.")],
    token: Annotated[str, typer.Option(help="Personal access token.")],
    branch: Annotated[str, typer.Option(help="Target branch.")] = DEFAULT_BRANCH,
) -> None:
    """Save GitHub settings to local storage."""
    saved = _settings(ctx).save(GitHubConfig(owner=owner, repo=repo, branch=branch, token=token))
    console.print("[green]GitHub settings saved locally.[/green]")
    if not saved.is_configured:
        console.print("[yellow]Settings are incomplete; local storage mode stays active.[/yellow]")


@settings_app.command("clear")
def settings_clear(ctx: typer.Context) -> None:
    """Clear the stored GitHub settings."""
    _settings(ctx).clear()
    console.print("GitHub settings cleared.")


@settings_app.command("show")
def settings_show(ctx: typer.Context) -> None:
    """Show the stored settings and the active mode."""
    stored = _settings(ctx).load()
    if stored is None:
        console.print("No GitHub settings stored.")
    else:
        masked = "set" if stored.token else "missing"
        console.print(f"owner={stored.owner} repo={stored.repo} branch={stored.branch} token={masked}")
    console.print(f"Mode: {_orchestrator(ctx).mode_label}")


@settings_app.command("test")
def settings_test(ctx: typer.Context) -> None:
    """Check that the stored settings can reach the repository."""
    stored = _settings(ctx).load()
    if stored is None or not stored.is_configured:
        _fail("Please fill all settings including token.")
    try:
        GitHubContentClient(stored, timeout=_config(ctx).http.timeout).check_access()
    except TransportError:
        _fail("GitHub access failed. Check token, repo, branch.")
    console.print("[green]GitHub access OK.[/green]")


# ── drafts ───────────────────────────────────────────────────────────────


@draft_app.command("save")
def draft_save(
    ctx: typer.Context,
    body: Annotated[Path, typer.Argument(help="HTML file with the draft body.")],
    title: Annotated[str, typer.Option("--title", "-t", help="Draft title.")] = "",
    cover: Annotated[Optional[Path], typer.Option(help="Cover image file.")] = None,
    record_id: Annotated[Optional[str], typer.Option("--id", help="Existing draft id.")] = None,
) -> None:
    """Save a draft to the active backend."""
    orchestrator = _orchestrator(ctx)
    record = _build_record(title, body, cover, record_id)
    try:
        orchestrator.save(CollectionKind.DRAFTS, record)
    except PartialSyncError as exc:
        _fail(f"{exc}. Retry to update the index.")
    except BlogSyncError as exc:
        _fail(f"Failed saving draft: {exc}")
    where = "to GitHub" if orchestrator.is_remote else "locally"
    console.print(f"[green]Draft saved {where}:[/green] {record.id}")


@draft_app.command("list")
def draft_list(ctx: typer.Context) -> None:
    """List drafts, newest first."""
    _print_entries("Drafts", _orchestrator(ctx).list_entries(CollectionKind.DRAFTS))


@draft_app.command("delete")
def draft_delete(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="Draft id.")],
) -> None:
    """Delete a draft."""
    try:
        _orchestrator(ctx).delete(CollectionKind.DRAFTS, record_id)
    except BlogSyncError as exc:
        _fail(f"Failed deleting draft: {exc}")
    console.print(f"Deleted draft {record_id}")


# ── posts ────────────────────────────────────────────────────────────────


@app.command()
def publish(
    ctx: typer.Context,
    body: Annotated[Path, typer.Argument(help="HTML file with the post body.")],
    title: Annotated[str, typer.Option("--title", "-t", help="Post title.")] = "",
    cover: Annotated[Optional[Path], typer.Option(help="Cover image file.")] = None,
    record_id: Annotated[Optional[str], typer.Option("--id", help="Draft id being published.")] = None,
) -> None:
    """Publish a post and remove its local draft."""
    orchestrator = _orchestrator(ctx)
    record = _build_record(title, body, cover, record_id)
    try:
        orchestrator.publish(record)
    except ContentValidationError:
        _fail("Please add a title and some content.")
    except PartialSyncError as exc:
        _fail(f"{exc}. Retry to update the index.")
    except BlogSyncError as exc:
        _fail(f"Failed publishing: {exc}")
    console.print(f"[green]Published:[/green] {record.id}")


@app.command()
def show(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="Post id.")],
) -> None:
    """Print a published post."""
    resolution = _orchestrator(ctx).resolve_detailed(record_id)
    if resolution.record is None:
        console.print(f"[yellow]Post not found:[/yellow] {record_id}")
        if resolution.remote_status == RemoteStatus.UNAVAILABLE:
            console.print("[yellow]The remote repository could not be reached.[/yellow]")
        raise typer.Exit(1)
    post = resolution.record
    console.print(f"[bold]{escape(post.title)}[/bold]")
    console.print(_format_ms(post.created_at or post.updated_at))
    console.print(post.content, markup=False, highlight=False)


@app.command()
def posts(ctx: typer.Context) -> None:
    """List published posts, newest first."""
    _print_entries("Posts", _orchestrator(ctx).list_entries(CollectionKind.POSTS))
