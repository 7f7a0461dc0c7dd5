"""
Note Commands.

List, create, edit, favorite, improve and delete study notes. Notes are
addressed by id or by a unique id prefix.
"""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from lingo.ai.writing import ImproveInstruction
from lingo.cli.session import CliSession
from lingo.core.exceptions import ApplicationError, NotFoundError
from lingo.schemas.note import EditableField, Note
from lingo.services.note import NoteSyncService, SaveStatus
from lingo.services.note_query import all_tags, filter_notes

app = typer.Typer(help="Study note commands")
console = Console()


def resolve_note(notes: NoteSyncService, ref: str) -> Note:
    """
    Find a loaded note by id or unique id prefix.

    Raises:
        NotFoundError: If nothing or more than one note matches
    """
    exact = notes.notes.get(ref)
    if exact is not None:
        return exact
    candidates = [note for note in notes.notes if note.id.startswith(ref)]
    if len(candidates) != 1:
        raise NotFoundError(f"No unique note matches '{ref}'")
    return candidates[0]


async def _load(cli: CliSession) -> str:
    user = cli.session.require_user()
    await cli.notes.list_notes(user.id)
    return user.id


def _fail(e: ApplicationError) -> None:
    console.print(f"[red]Error: {e.message}[/red]")
    raise typer.Exit(1)


def _print_save_status(status: SaveStatus) -> None:
    if status is SaveStatus.ERROR:
        console.print("[red]Save failed[/red]")
        raise typer.Exit(1)
    console.print("[green]Saved[/green]")


@app.command("list")
def list_notes(
    search: str = typer.Option("", "--search", "-s", help="Match title, content or tags"),
    tag: str | None = typer.Option(None, "--tag", "-t", help="Only notes with this tag"),
) -> None:
    """
    List notes, favorites first.

    Examples:
        compliance-lingo notes list
        compliance-lingo notes list -s gdpr -t AML
    """
    asyncio.run(_list(search, tag))


async def _list(search: str, tag: str | None) -> None:
    async with CliSession() as cli:
        try:
            await _load(cli)
        except ApplicationError as e:
            _fail(e)
        notes = list(cli.notes.notes)

    shown = filter_notes(notes, search, tag)
    if not shown:
        console.print("[dim]No notes found.[/dim]")
        return

    table = Table(title="My Notes", show_header=True)
    table.add_column("Id", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Tags")
    table.add_column("Modified")
    for note in shown:
        star = "[yellow]*[/yellow] " if note.is_favorite else ""
        table.add_row(
            note.id[:8],
            f"{star}{note.title or 'Untitled Note'}",
            ", ".join(note.tags) or "-",
            note.last_modified.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)
    console.print(f"[dim]Tags: {', '.join(all_tags(notes)) or 'none'}[/dim]")


@app.command()
def show(ref: str = typer.Argument(..., help="Note id or id prefix")) -> None:
    """Print a note with its word count."""
    asyncio.run(_show(ref))


async def _show(ref: str) -> None:
    async with CliSession() as cli:
        try:
            await _load(cli)
            note = resolve_note(cli.notes, ref)
            buffer = cli.notes.open_for_edit(note.id)
        except ApplicationError as e:
            _fail(e)
        word_count = buffer.word_count
        cli.notes.close_edit()

    console.print(Panel(
        note.content or "[dim]Empty[/dim]",
        title=note.title or "Untitled Note",
        subtitle=f"{word_count} words | {', '.join(note.tags) or 'no tags'}",
    ))


@app.command()
def new(
    title: str = typer.Option("", "--title", help="Initial title"),
    content: str = typer.Option("", "--content", help="Initial content"),
) -> None:
    """
    Create a note.

    Examples:
        compliance-lingo notes new --title "KYC" --content "Know your customer"
    """
    asyncio.run(_new(title, content))


async def _new(title: str, content: str) -> None:
    async with CliSession() as cli:
        try:
            owner_id = cli.session.require_user().id
            note = await cli.notes.create_note(owner_id)
        except ApplicationError as e:
            _fail(e)

        if title:
            cli.notes.edit_field(EditableField.TITLE, title)
        if content:
            cli.notes.edit_field(EditableField.CONTENT, content)
        cli.notes.save_now()
        await cli.notes.drain()
        status = cli.notes.save_status

    console.print(f"Created note [cyan]{note.id}[/cyan]")
    if title or content:
        _print_save_status(status)


@app.command()
def edit(
    ref: str = typer.Argument(..., help="Note id or id prefix"),
    title: str | None = typer.Option(None, "--title", help="New title"),
    content: str | None = typer.Option(None, "--content", help="New content"),
    add_tag: list[str] = typer.Option([], "--add-tag", help="Tag to add (repeatable)"),
    remove_tag: list[str] = typer.Option([], "--remove-tag", help="Tag to remove (repeatable)"),
) -> None:
    """
    Edit a note's title, content or tags.

    Examples:
        compliance-lingo notes edit 3f2a --title "Due diligence"
        compliance-lingo notes edit 3f2a --add-tag AML --remove-tag draft
    """
    asyncio.run(_edit(ref, title, content, add_tag, remove_tag))


async def _edit(
    ref: str,
    title: str | None,
    content: str | None,
    add_tags: list[str],
    remove_tags: list[str],
) -> None:
    async with CliSession() as cli:
        try:
            await _load(cli)
            note = resolve_note(cli.notes, ref)
        except ApplicationError as e:
            _fail(e)

        cli.notes.open_for_edit(note.id)
        changes = [
            *([(EditableField.TITLE, title)] if title is not None else []),
            *([(EditableField.CONTENT, content)] if content is not None else []),
            *((EditableField.ADD_TAG, tag) for tag in add_tags),
            *((EditableField.REMOVE_TAG, tag) for tag in remove_tags),
        ]
        changed = [cli.notes.edit_field(field, value) for field, value in changes]
        if not any(changed):
            console.print("[dim]Nothing to change.[/dim]")
            return

        cli.notes.save_now()
        await cli.notes.drain()
        status = cli.notes.save_status

    _print_save_status(status)


@app.command()
def favorite(ref: str = typer.Argument(..., help="Note id or id prefix")) -> None:
    """Toggle a note's favorite flag."""
    asyncio.run(_favorite(ref))


async def _favorite(ref: str) -> None:
    async with CliSession() as cli:
        try:
            await _load(cli)
            note = resolve_note(cli.notes, ref)
        except ApplicationError as e:
            _fail(e)

        if not await cli.notes.toggle_favorite(note.id):
            console.print("[red]Could not update favorite[/red]")
            raise typer.Exit(1)
        updated = cli.notes.notes.get(note.id)

    state = "added to" if updated and updated.is_favorite else "removed from"
    console.print(f"[green]Note {state} favorites[/green]")


@app.command()
def improve(
    ref: str = typer.Argument(..., help="Note id or id prefix"),
    mode: ImproveInstruction = typer.Option(
        ImproveInstruction.FIX_GRAMMAR, "--mode", "-m", help="How to rewrite the content",
    ),
) -> None:
    """
    Rewrite a note's content with the AI writing assistant.

    Examples:
        compliance-lingo notes improve 3f2a --mode simplify
    """
    asyncio.run(_improve(ref, mode))


async def _improve(ref: str, mode: ImproveInstruction) -> None:
    async with CliSession() as cli:
        try:
            await _load(cli)
            note = resolve_note(cli.notes, ref)
            cli.notes.open_for_edit(note.id)
            with console.status("Improving..."):
                improved = await cli.notes.improve_content(mode)
        except ApplicationError as e:
            _fail(e)

        cli.notes.save_now()
        await cli.notes.drain()
        status = cli.notes.save_status

    console.print(Panel(improved or "[dim]Empty[/dim]", title=note.title or "Untitled Note"))
    if improved != note.content:
        _print_save_status(status)


@app.command()
def delete(
    ref: str = typer.Argument(..., help="Note id or id prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a note permanently."""
    asyncio.run(_delete(ref, yes))


async def _delete(ref: str, yes: bool) -> None:
    async with CliSession() as cli:
        try:
            await _load(cli)
            note = resolve_note(cli.notes, ref)
        except ApplicationError as e:
            _fail(e)

        if not yes and not typer.confirm(f"Delete '{note.title or 'Untitled Note'}'?"):
            raise typer.Abort()
        try:
            await cli.notes.delete_note(note.id)
        except ApplicationError as e:
            _fail(e)

    console.print("[green]Note deleted[/green]")
