"""Interactive CLI application."""
import logging
from datetime import date

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from study_planner.catalog import (
    add_topics, archive_subject, create_subject, delete_subject, list_subjects,
    update_topic_notes,
)
from study_planner.classifier import classify_topic
from study_planner.db import resolve_db_path
from study_planner.errors import PlannerError
from study_planner.history import get_plan_history, get_topic_reviews
from study_planner.models import DailyPlan, TopicStatus
from study_planner.planner import complete_topic_review, generate_daily_plan, uncomplete_topic
from study_planner.scheduler import (
    get_days_until_review, get_performance_color, get_performance_label,
)
from study_planner.settings import get_settings, resolve_log_level, resolve_user_id, update_settings
from study_planner.sqlite_store import SQLiteStore
from study_planner.store import StudyStore

console = Console()
logger = logging.getLogger(__name__)

STATUS_STYLES = {
    TopicStatus.MANDATORY: "[red]review due[/red]",
    TopicStatus.NEW: "[cyan]new[/cyan]",
    TopicStatus.EARLY: "[yellow]early[/yellow]",
    TopicStatus.FUTURE: "[dim]unscheduled[/dim]",
}


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]Study Planner[/bold]\n[dim]Spaced-repetition daily plans[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("today", "Today's plan"),
        ("complete", "Finish a topic review"),
        ("undo", "Un-complete a topic"),
        ("subjects", "Manage subjects and topics"),
        ("notes", "Edit topic notes"),
        ("history", "Past plans"),
        ("settings", "Cards per day"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def _plan_rows(store: StudyStore, user_id: str, plan: DailyPlan, today: date) -> list[dict]:
    topics = {t.id: t for t in store.list_topics(user_id)}
    subjects = {s.id: s for s in store.list_subjects(user_id, include_archived=True)}
    rows = []
    for topic_id in plan.topic_ids_selected:
        topic = topics.get(topic_id)
        if topic is None:
            continue
        subject = subjects.get(topic.subject_id)
        rows.append({
            "topic": topic,
            "subject_name": subject.name if subject else "",
            "status": classify_topic(topic, plan.plan_date),
            "done": topic_id in plan.topic_ids_completed,
            "days": get_days_until_review(topic.next_review_at, today),
        })
    return rows


def show_plan(store: StudyStore, user_id: str, plan: DailyPlan, today: date) -> list[dict]:
    rows = _plan_rows(store, user_id, plan, today)
    table = Table(title=f"Plan for {plan.plan_date.isoformat()}")
    table.add_column("#", justify="right")
    table.add_column("Topic", style="cyan")
    table.add_column("Subject")
    table.add_column("Status")
    table.add_column("Reviews", justify="right")
    table.add_column("Done")
    for i, row in enumerate(rows, 1):
        table.add_row(
            str(i),
            row["topic"].title,
            row["subject_name"],
            STATUS_STYLES[row["status"]],
            str(row["topic"].total_reviews),
            "[green]✓[/green]" if row["done"] else "",
        )
    console.print(table)
    console.print(f"  Completed: [bold]{len(plan.topic_ids_completed)}/{len(plan.topic_ids_selected)}[/bold]")
    return rows


def _pick_row(rows: list[dict], prompt: str):
    if not rows:
        console.print("[yellow]No topics in today's plan.[/yellow]")
        return None
    choice = IntPrompt.ask(prompt, choices=[str(i) for i in range(1, len(rows) + 1)])
    return rows[choice - 1]


def cmd_today(store: StudyStore, user_id: str, today: date):
    existing = store.get_plan(user_id, today)
    if existing is not None:
        console.print("[dim]Today's plan was already generated.[/dim]")
        show_plan(store, user_id, existing, today)
        return
    settings = get_settings(store, user_id)
    if not store.list_active_subjects(user_id):
        console.print("[yellow]No subjects yet. Use 'subjects' to add one with its topics.[/yellow]")
        return
    result = generate_daily_plan(store, user_id, today, settings.cards_per_day)
    stats = result.stats
    if result.is_new:
        console.print(f"[green]Plan generated![/green] {stats.mandatory} review(s), "
                      f"{stats.new} new, {stats.early} early")
    else:
        console.print("[dim]Today's plan was already generated.[/dim]")
    show_plan(store, user_id, result.plan, today)


def cmd_complete(store: StudyStore, user_id: str, today: date):
    plan = store.get_plan(user_id, today)
    if plan is None:
        console.print("[yellow]Generate today's plan first ('today').[/yellow]")
        return
    rows = [r for r in _plan_rows(store, user_id, plan, today) if not r["done"]]
    for i, row in enumerate(rows, 1):
        console.print(f"  [cyan]{i}[/cyan]) {row['topic'].title} [dim]({row['subject_name']})[/dim]")
    row = _pick_row(rows, "Topic")
    if row is None:
        return
    correct = IntPrompt.ask("Correct answers out of 10", choices=[str(i) for i in range(11)])
    note = Prompt.ask("Note", default="")
    outcome = complete_topic_review(store, user_id, today, row["topic"].id, correct, note)
    color = get_performance_color(correct)
    console.print(
        f"[{color}]{get_performance_label(correct)}[/{color}] "
        f"Next review in {outcome.schedule.days_until_review} days "
        f"({outcome.schedule.next_review_at.isoformat()})."
    )


def cmd_undo(store: StudyStore, user_id: str, today: date):
    plan = store.get_plan(user_id, today)
    if plan is None:
        console.print("[yellow]No plan for today.[/yellow]")
        return
    rows = [r for r in _plan_rows(store, user_id, plan, today) if r["done"]]
    for i, row in enumerate(rows, 1):
        console.print(f"  [cyan]{i}[/cyan]) {row['topic'].title}")
    row = _pick_row(rows, "Topic")
    if row is None:
        return
    uncomplete_topic(store, user_id, today, row["topic"].id)
    console.print("[dim]Marked as not done. Its next review date is unchanged.[/dim]")


def cmd_subjects(store: StudyStore, user_id: str):
    entries = list_subjects(store, user_id, include_archived=True)
    table = Table(title="Subjects")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Topics", justify="right")
    table.add_column("Status")
    for i, entry in enumerate(entries, 1):
        subject = entry["subject"]
        table.add_row(str(i), subject.name, str(entry["topic_count"]),
                      "active" if subject.is_active else "[dim]archived[/dim]")
    console.print(table)

    action = Prompt.ask("Action", choices=["add", "topics", "archive", "delete", "back"], default="back")
    if action == "back":
        return
    if action == "add":
        name = Prompt.ask("Subject name")
        console.print("[dim]Enter topics one per line, empty line to finish.[/dim]")
        lines = []
        while True:
            line = Prompt.ask("", default="")
            if not line:
                break
            lines.append(line)
        subject, topics = create_subject(store, user_id, name, "\n".join(lines))
        console.print(f"[green]Added {subject.name} with {len(topics)} topics.[/green]")
        return
    if not entries:
        console.print("[yellow]No subjects yet.[/yellow]")
        return
    choice = IntPrompt.ask("Subject", choices=[str(i) for i in range(1, len(entries) + 1)])
    subject = entries[choice - 1]["subject"]
    if action == "topics":
        title = Prompt.ask("Topic title")
        add_topics(store, user_id, subject.id, title)
        console.print("[green]Topic added.[/green]")
    elif action == "archive":
        archive_subject(store, user_id, subject.id)
        console.print(f"[dim]{subject.name} archived; its history is kept.[/dim]")
    elif action == "delete":
        if Confirm.ask(f"Permanently delete {subject.name}, its topics and review history?", default=False):
            delete_subject(store, user_id, subject.id, keep_history=False)
            console.print(f"[red]{subject.name} deleted.[/red]")


def cmd_notes(store: StudyStore, user_id: str, today: date):
    plan = store.get_plan(user_id, today)
    if plan is None:
        console.print("[yellow]Generate today's plan first ('today').[/yellow]")
        return
    rows = _plan_rows(store, user_id, plan, today)
    for i, row in enumerate(rows, 1):
        console.print(f"  [cyan]{i}[/cyan]) {row['topic'].title}")
    row = _pick_row(rows, "Topic")
    if row is None:
        return
    topic = row["topic"]
    if topic.notes:
        console.print(Panel(topic.notes, title="Current notes"))
    for log in get_topic_reviews(store, topic.id)[:5]:
        console.print(f"  [dim]{log.reviewed_at.isoformat()}[/dim] {log.score_percent}% {log.review_note}")
    notes = Prompt.ask("New notes", default=topic.notes)
    update_topic_notes(store, user_id, topic.id, notes)
    console.print("[green]Notes saved.[/green]")


def cmd_history(store: StudyStore, user_id: str):
    history = get_plan_history(store, user_id)
    if not history:
        console.print("[yellow]No plans yet.[/yellow]")
        return
    table = Table(title="Plan History")
    table.add_column("Date")
    table.add_column("Done", justify="right")
    table.add_column("Topics")
    for entry in history:
        titles = ", ".join(
            f"[green]{t['title']}[/green]" if t["completed"] else t["title"] for t in entry["topics"]
        )
        table.add_row(
            entry["plan_date"].isoformat(),
            f"{entry['completed']}/{entry['total']} ({entry['completion_rate']}%)",
            titles,
        )
    console.print(table)


def cmd_settings(store: StudyStore, user_id: str):
    settings = get_settings(store, user_id)
    console.print(f"Cards per day: [bold]{settings.cards_per_day}[/bold]")
    cards = IntPrompt.ask("New cards per day", default=settings.cards_per_day)
    settings = update_settings(store, user_id, cards)
    console.print(f"[green]Saved: {settings.cards_per_day} cards per day.[/green]")


def main():
    configure_logging(resolve_log_level())
    store = SQLiteStore(resolve_db_path())
    user_id = resolve_user_id()

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        # Read the clock once per command.
        today = date.today()
        try:
            if choice == "today":
                cmd_today(store, user_id, today)
            elif choice == "complete":
                cmd_complete(store, user_id, today)
            elif choice == "undo":
                cmd_undo(store, user_id, today)
            elif choice == "subjects":
                cmd_subjects(store, user_id)
            elif choice == "notes":
                cmd_notes(store, user_id, today)
            elif choice == "history":
                cmd_history(store, user_id)
            elif choice == "settings":
                cmd_settings(store, user_id)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Happy studying![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except PlannerError as e:
            console.print(f"[red]{e}[/red]")
        except Exception as e:
            logger.exception("Command %s failed", choice)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
