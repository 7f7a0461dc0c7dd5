"""
Compliance Lingo CLI.

Usage:
    compliance-lingo --help

    # Account
    compliance-lingo auth login -e me@example.com
    compliance-lingo auth signup -n "Ana Souza" -e me@example.com
    compliance-lingo auth whoami
    compliance-lingo auth logout

    # Notes
    compliance-lingo notes list --search gdpr --tag AML
    compliance-lingo notes new --title "KYC" --content "Know your customer"
    compliance-lingo notes edit 3f2a --add-tag AML
    compliance-lingo notes favorite 3f2a
    compliance-lingo notes improve 3f2a --mode simplify
    compliance-lingo notes delete 3f2a

    # Study
    compliance-lingo study translate "due diligence" --speak
    compliance-lingo study quiz --difficulty Hard
    compliance-lingo study news

Options:
    --verbose, -v     Enable verbose output
    --debug, -d       Enable debug mode (detailed logging)
"""

import typer
from rich.console import Console

from lingo.cli.commands import auth_app, notes_app, study_app
from lingo.core.config import find_project_root
from lingo.core.logging import setup_logging

app = typer.Typer(
    name="compliance-lingo",
    help="Compliance Lingo - notes, glossary, quizzes and news for compliance English.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

app.add_typer(auth_app, name="auth")
app.add_typer(notes_app, name="notes")
app.add_typer(study_app, name="study")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Compliance Lingo.

    Study notes with autosave, an AI glossary translator, quizzes generated
    from your notes and a weekly compliance news briefing.
    """
    try:
        find_project_root()
    except RuntimeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if debug:
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="INFO", format_type="console")
    else:
        setup_logging(level="WARNING", format_type="console")


if __name__ == "__main__":
    app()
