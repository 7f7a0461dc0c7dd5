"""
Account Commands.

Sign in, sign up, sign out and show the current user.
"""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel

from lingo.cli.session import CliSession
from lingo.core.exceptions import ApplicationError

app = typer.Typer(help="Account commands")
console = Console()


@app.command()
def login(
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account email"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
) -> None:
    """
    Sign in with email and password.

    Examples:
        compliance-lingo auth login -e me@example.com
    """
    asyncio.run(_login(email, password))


async def _login(email: str, password: str) -> None:
    async with CliSession() as cli:
        try:
            session = await cli.session.sign_in(email, password)
        except ApplicationError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            raise typer.Exit(1)
    console.print(f"[green]Signed in as {session.user.name}[/green]")


@app.command()
def signup(
    name: str = typer.Option(..., "--name", "-n", prompt="Full name", help="Display name"),
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account email"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True,
    ),
) -> None:
    """
    Create an account.

    When the project requires email confirmation you are asked to
    confirm before signing in.

    Examples:
        compliance-lingo auth signup -n "Ana Souza" -e ana@example.com
    """
    asyncio.run(_signup(name, email, password))


async def _signup(name: str, email: str, password: str) -> None:
    async with CliSession() as cli:
        try:
            result = await cli.session.sign_up(email, password, name)
        except ApplicationError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            raise typer.Exit(1)

    if result.confirmation_required:
        console.print("[yellow]Check your email to confirm your account, then sign in.[/yellow]")
    else:
        console.print(f"[green]Welcome, {name}! You are signed in.[/green]")


@app.command()
def logout() -> None:
    """Sign out and forget the stored session."""
    asyncio.run(_logout())


async def _logout() -> None:
    async with CliSession() as cli:
        await cli.session.sign_out()
    console.print("Signed out.")


@app.command()
def whoami() -> None:
    """Show the signed-in user."""
    asyncio.run(_whoami())


async def _whoami() -> None:
    async with CliSession() as cli:
        user = cli.session.user
    if user is None:
        console.print("[yellow]Not signed in. Run: compliance-lingo auth login[/yellow]")
        raise typer.Exit(1)
    console.print(Panel(f"[bold]{user.name}[/bold]\n{user.email}\n[dim]{user.id}[/dim]", title="Account"))
