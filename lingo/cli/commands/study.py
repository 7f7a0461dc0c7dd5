"""
Study Commands.

Glossary translation, quizzes generated from your notes and the
compliance news briefing.
"""

import asyncio

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from lingo.ai.news import NO_NEWS, fetch_news
from lingo.ai.quiz import generate_quiz
from lingo.ai.translator import translate_term
from lingo.cli.session import CliSession
from lingo.core.config import get_app_config
from lingo.core.exceptions import ApplicationError
from lingo.schemas.news import Impact, NewsBriefing
from lingo.schemas.quiz import Difficulty, QuizSession
from lingo.services.speech import Speaker

app = typer.Typer(help="Translator, quiz and news commands")
console = Console()

_IMPACT_COLORS = {Impact.HIGH: "red", Impact.MEDIUM: "yellow", Impact.LOW: "blue"}


@app.command()
def translate(
    term: str = typer.Argument(..., help="Term or expression to look up"),
    speak: bool = typer.Option(False, "--speak", help="Read the term aloud"),
) -> None:
    """
    Translate a compliance term with definition and examples.

    Examples:
        compliance-lingo study translate "due diligence" --speak
    """
    asyncio.run(_translate(term, speak))


async def _translate(term: str, speak: bool) -> None:
    try:
        with console.status("Translating..."):
            result = await translate_term(term)
    except ApplicationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    examples = "\n".join(f"- {example}" for example in result.examples)
    console.print(Panel(
        f"[bold]{result.translation}[/bold]\n\n{result.definition}\n\n{examples}",
        title=result.term,
    ))

    if speak:
        speaker = Speaker(language=get_app_config().ai.speech_language)
        speaker.speak(result.term)
        await speaker.wait()


@app.command()
def quiz(
    difficulty: Difficulty = typer.Option(
        Difficulty.MEDIUM, "--difficulty", "-l", help="Question difficulty",
    ),
) -> None:
    """
    Take a quiz generated from your notes.

    Examples:
        compliance-lingo study quiz --difficulty Hard
    """
    asyncio.run(_quiz(difficulty))


async def _quiz(difficulty: Difficulty) -> None:
    async with CliSession() as cli:
        try:
            user = cli.session.require_user()
            notes = await cli.notes.list_notes(user.id)
            with console.status("Generating quiz..."):
                questions = await generate_quiz(notes, difficulty)
        except ApplicationError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            raise typer.Exit(1)

    if not questions:
        console.print("[yellow]Write some notes first; the quiz is built from them.[/yellow]")
        return

    session = QuizSession(difficulty=difficulty)
    session.start(questions)
    while (question := session.current_question) is not None:
        number = session.current_index + 1
        options = "\n".join(f"  {i + 1}. {option}" for i, option in enumerate(question.options))
        console.print(f"\n[bold]{number}/{len(questions)}. {question.question}[/bold]\n{options}")

        choice = typer.prompt("Answer", type=typer.IntRange(1, len(question.options)))
        session.answer(choice - 1)
        if choice - 1 == question.correct_answer_index:
            console.print("[green]Correct[/green]")
        else:
            correct = question.options[question.correct_answer_index]
            console.print(f"[red]Incorrect[/red], the answer is: {correct}")
        console.print(f"[dim]{question.explanation}[/dim]")
        session.next_question()

    color = "green" if session.passed else "yellow"
    console.print(Panel(
        f"[{color}]{session.summary}[/{color}]",
        title="Quiz Complete",
    ))


@app.command()
def news() -> None:
    """Show this week's compliance news with its sources."""
    asyncio.run(_news())


async def _news() -> None:
    try:
        with console.status("Searching..."):
            briefing = await fetch_news()
    except ApplicationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    _display_briefing(briefing)


def _display_briefing(briefing: NewsBriefing) -> None:
    if briefing.content == NO_NEWS:
        console.print(f"[dim]{NO_NEWS}[/dim]")
    elif not briefing.items:
        console.print(Panel(Markdown(briefing.content), title="Compliance News"))
    else:
        table = Table(title="Compliance News", show_header=True, show_lines=True)
        table.add_column("Impact")
        table.add_column("Category", style="cyan")
        table.add_column("Story")
        table.add_column("When", style="dim")
        for item in briefing.items:
            color = _IMPACT_COLORS[item.impact]
            table.add_row(
                f"[{color}]{item.impact.value}[/{color}]",
                item.category,
                f"[bold]{item.headline}[/bold]\n{item.summary}",
                item.date,
            )
        console.print(table)

    if briefing.sources:
        console.print("\n[bold]Sources[/bold]")
        for source in briefing.sources:
            console.print(f"- {source.title}: [link={source.uri}]{source.uri}[/link]")
