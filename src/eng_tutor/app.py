"""Interactive CLI application."""
import logging
import os
import time
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt, IntPrompt
from rich.table import Table

from eng_tutor.db import init_db, DEFAULT_DB_PATH
from eng_tutor.errors import EmptyBankError, EngineError
from eng_tutor.seed import seed_all, is_seeded
from eng_tutor.question_bank import load_question_bank
from eng_tutor.placement import (
    create_session, get_next_question, submit_answer, get_result, get_progress,
    get_current_accuracy,
)
from eng_tutor.profile import (
    get_current_level, get_daily_goal, set_daily_goal, save_level_test_result,
)
from eng_tutor.words import get_due_words, record_review, get_today_review_progress
from eng_tutor.dashboard import get_review_stats, get_level_label, get_accuracy_color
from eng_tutor.importer import import_word_list
from eng_tutor.levels import SKILLS
from eng_tutor.sm2 import RATINGS

console = Console()
logger = logging.getLogger("eng_tutor")

EXIT_WORDS = ("q", "menu")

SKILL_NAMES = {"vocabulary": "어휘", "grammar": "문법", "listening": "듣기", "reading": "읽기"}


class SessionExitRequested(Exception):
    """Raised when the user leaves a running session with 'q' or 'menu'."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = session_prompt(prompt, choices=[*choices, *EXIT_WORDS], show_choices=False)
    return int(answer)


def setup_logging() -> None:
    level = logging.DEBUG if os.environ.get("ENG_TUTOR_DEBUG") == "1" else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def show_welcome(db_path: str):
    level = get_current_level(db_path)
    console.print(Panel(
        "[bold]English Tutor[/bold]\n[dim]적응형 레벨 테스트 · 단어 복습[/dim]\n"
        f"Current level: [cyan]{get_level_label(level)}[/cyan]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("test", "Adaptive placement test (15-30 questions)"),
        ("review", "Review due words"),
        ("stats", "Review statistics"),
        ("goal", "Set daily review goal"),
        ("import", "Add a word list"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<10}[/cyan] {desc}")


def run_placement_test(bank, initial_level: str | None = None, rng=None):
    """Run a placement test in the terminal. Returns the result, or None if it could not finish."""
    state = create_session(bank, initial_level=initial_level)
    console.print("\n[bold]Placement Test[/bold] [dim](type q to quit)[/dim]\n")
    while True:
        try:
            question = get_next_question(state, rng=rng)
        except EmptyBankError:
            console.print("[yellow]The question bank ran out before the test could finish.[/yellow]")
            return None
        progress = get_progress(state)
        body = question.question
        if question.context:
            body = f"[dim]{question.context}[/dim]\n\n{body}"
        console.print(Panel(
            body,
            title=f"Q{progress['current'] + 1} · {question.level} · {SKILL_NAMES[question.type]}",
            border_style="cyan",
        ))
        for i, option in enumerate(question.options, 1):
            console.print(f"  [cyan]{i})[/cyan] {option}")
        started = time.monotonic()
        choice = session_int_prompt(
            "\nYour answer", choices=[str(i) for i in range(1, len(question.options) + 1)],
        )
        state, outcome = submit_answer(state, question, choice - 1, time.monotonic() - started)
        if outcome.correct:
            console.print("[green]Correct![/green]")
        else:
            answer = question.options[question.correct_answer]
            console.print(f"[red]Incorrect.[/red] Answer: [green]{answer}[/green]")
        if question.explanation:
            console.print(f"[dim]{question.explanation}[/dim]")
        console.print(f"[dim]Accuracy so far: {get_current_accuracy(state)}%[/dim]\n")
        if not outcome.should_continue:
            return get_result(state)


def show_level_result(result) -> None:
    console.print(Panel(
        f"Level: [bold]{get_level_label(result.final_level)}[/bold]\n"
        f"Confidence: {result.confidence}%  ·  {result.duration}s\n"
        f"Suggested start: week {result.suggested_start_week}",
        title="Placement Result", border_style="green",
    ))
    table = Table(title="Skill Breakdown")
    table.add_column("Skill", style="cyan")
    table.add_column("Accuracy", justify="right")
    table.add_column("Level")
    for skill in SKILLS:
        r = result.skill_breakdown[skill]
        color = get_accuracy_color(r.accuracy)
        table.add_row(
            SKILL_NAMES[skill],
            f"[{color}]{r.accuracy}%[/{color}]" if r.questions_attempted else "[dim]-[/dim]",
            r.estimated_level,
        )
    console.print(table)
    for rec in result.recommendations:
        console.print(f"  [yellow]•[/yellow] {rec}")


def run_review_session(db_path: str, words: list) -> int:
    if not words:
        console.print("[yellow]No words due right now![/yellow]")
        return 0
    console.print(f"\n[bold]Review Session[/bold] · {len(words)} words [dim](type q to quit)[/dim]\n")
    reviewed = 0
    for i, word in enumerate(words, 1):
        console.print(Panel(word.word, title=f"Word {i}/{len(words)}", border_style="cyan"))
        session_prompt("[dim]Press Enter to reveal meaning[/dim]", default="", show_default=False)
        back = word.meaning
        if word.example:
            back += f"\n[dim]{word.example}[/dim]"
        console.print(Panel(back, border_style="green"))
        rating = session_int_prompt("Rate yourself (1=again, 2=hard, 3=good, 4=easy)", choices=["1", "2", "3", "4"])
        record = record_review(db_path, word.word_id, RATINGS[rating - 1])
        console.print(f"[dim]Next review in {record.interval} day(s)[/dim]\n")
        reviewed += 1
    return reviewed


def cmd_test(db_path: str):
    bank = load_question_bank()
    result = run_placement_test(bank)
    if result is None:
        return
    save_level_test_result(db_path, result)
    show_level_result(result)


def cmd_review(db_path: str):
    goal = get_daily_goal(db_path)
    progress = get_today_review_progress(db_path, goal)
    remaining = max(goal - progress["done"], 0)
    if remaining == 0:
        console.print(f"[green]Daily goal reached ({progress['done']}/{goal})![/green]")
        remaining = goal
    run_review_session(db_path, get_due_words(db_path, limit=remaining))


def cmd_stats(db_path: str):
    stats = get_review_stats(db_path)
    goal = get_daily_goal(db_path)
    today = get_today_review_progress(db_path, goal)
    console.print(Panel(
        f"[bold]{get_level_label(get_current_level(db_path))}[/bold]",
        title="Learner Dashboard", border_style="blue",
    ))
    table = Table(title="Review Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    color = get_accuracy_color(stats["retention"])
    table.add_row("Today", f"{today['done']}/{today['goal']}")
    table.add_row("Words", str(stats["word_count"]))
    table.add_row("Due now", str(stats["due_now"]))
    table.add_row("Mastered (21+ days)", str(stats["mastered_words"]))
    table.add_row("Total reviews", str(stats["total_reviews"]))
    table.add_row("Retention", f"[{color}]{stats['retention']}%[/{color}]")
    table.add_row("Average ease", f"{stats['average_ease_factor']:.2f}")
    table.add_row("Longest interval", f"{stats['longest_interval']} days")
    console.print(table)


def cmd_goal(db_path: str):
    goal = IntPrompt.ask("Daily review goal", default=get_daily_goal(db_path))
    stored = set_daily_goal(db_path, goal)
    console.print(f"[green]Daily goal set to {stored} words.[/green]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_word_list(db_path, file_path)
    console.print(f"[green]Imported {result['filename']}: {result['added']} new of {result['read']} words[/green]")


def main():
    setup_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")

    show_welcome(db_path)
    commands = {
        "test": cmd_test,
        "review": cmd_review,
        "stats": cmd_stats,
        "goal": cmd_goal,
        "import": cmd_import,
    }

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]See you tomorrow![/dim]")
            break
        command = commands.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(db_path)
        except SessionExitRequested:
            console.print("[dim]Back to menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except EngineError as e:
            console.print(f"[red]Error: {e}[/red]")
        except Exception:
            logger.exception("Command %s failed", choice)


if __name__ == "__main__":
    main()
