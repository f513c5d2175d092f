"""Interactive CLI application."""
import logging
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt, IntPrompt
from rich.table import Table

from exam_planner.config import DEFAULT_DB_PATH, DIFFICULTY_LEVELS, LOG_LEVEL, resolve_log_level
from exam_planner.dashboard import (
    get_score_color, get_score_label, get_timeline_stats, score_percentage,
)
from exam_planner.db import init_db
from exam_planner.generator import QuestionGenerator
from exam_planner.importer import import_note
from exam_planner.ledger import DedupLedger
from exam_planner.models import FREE_TEXT, CourseNote, DailyQuiz, ExamTimeline
from exam_planner.progression import QuizState, quiz_states, sorted_quizzes
from exam_planner.quiz import (
    answer_text, complete_quiz, fill_quiz, fill_quizzes_by_topic, reset_quiz, submit_answer,
    todays_quizzes,
)
from exam_planner.reinforce import LocalReinforcement, build_practice_quiz
from exam_planner.review import (
    build_rotation, build_snapshot, collect_mistakes, current_mistake, rank_mistakes,
    rotating_indices_text, wide_selection,
)
from exam_planner.store import (
    create_timeline, get_difficulty, get_widget_timeline, list_timelines, save_quiz,
    save_timeline, set_difficulty, set_timeline_active, set_widget_timeline,
)

console = Console()
logger = logging.getLogger(__name__)

# One ledger per CLI session; every generation call shares it.
ledger = DedupLedger()

EXIT_WORDS = {"q", "menu"}


class SessionExitRequested(Exception):
    """Raised when the learner leaves a quiz before finishing it."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = session_prompt(prompt, choices=choices + sorted(EXIT_WORDS), show_choices=False)
    return int(answer)


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=resolve_log_level(level),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]Exam Planner[/bold]\n[dim]Daily quizzes from your exam brief and notes[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("create", "Create an exam timeline"),
        ("timelines", "List timelines"),
        ("today", "Today's quizzes"),
        ("quiz", "Take the next available quiz"),
        ("review", "Review a completed quiz"),
        ("mistakes", "Review your mistakes"),
        ("widget", "Preview the rotating mistake display"),
        ("practice", "Practice around a missed question"),
        ("import", "Add a note from a file"),
        ("settings", "Set question difficulty"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def make_generator(db_path: str) -> QuestionGenerator:
    return QuestionGenerator(ledger=ledger, difficulty=get_difficulty(db_path))


def select_timeline(db_path: str) -> ExamTimeline | None:
    timelines = list_timelines(db_path, active_only=True)
    if not timelines:
        console.print("[yellow]No active timelines. Use 'create' first.[/yellow]")
        return None
    if len(timelines) == 1:
        return timelines[0]
    for i, t in enumerate(timelines, 1):
        console.print(f"  [cyan]{i}[/cyan]) {t.exam_name} ({t.exam_date.isoformat()})")
    choice = IntPrompt.ask("Select timeline", choices=[str(i) for i in range(1, len(timelines) + 1)])
    return timelines[choice - 1]


def run_quiz_session(db_path: str, quiz: DailyQuiz, persist: bool = True) -> tuple[int, int]:
    if not quiz.questions:
        console.print("[yellow]This quiz has no questions yet.[/yellow]")
        return 0, 0
    console.print(f"\n[bold]{quiz.topic}[/bold] — {len(quiz.questions)} questions\n")
    for i, q in enumerate(quiz.questions, 1):
        if q.is_answered:
            continue
        console.print(f"[bold]Q{i}.[/bold] {q.question}\n")
        if q.type == FREE_TEXT:
            is_correct = submit_answer(q, text_answer=session_prompt("Your answer"))
        else:
            for n, option in enumerate(q.options, 1):
                console.print(f"  [cyan]{n})[/cyan] {option}")
            choices = [str(n) for n in range(1, len(q.options) + 1)]
            is_correct = submit_answer(q, selected_index=session_int_prompt("\nYour answer", choices) - 1)
        if persist:
            save_quiz(db_path, quiz)
        if is_correct:
            console.print("[green]Correct![/green]\n")
        else:
            console.print(f"[red]Incorrect.[/red] Answer: [green]{q.correct_answer}[/green]\n")
    complete_quiz(quiz)
    if persist:
        save_quiz(db_path, quiz)
    pct = score_percentage(quiz)
    color = get_score_color(pct)
    console.print(f"[bold]Score: {quiz.correct_answer_count}/{len(quiz.questions)} "
                  f"([{color}]{pct}%[/{color}])[/bold] {get_score_label(pct)}\n")
    return quiz.correct_answer_count, len(quiz.questions)


def cmd_create(db_path: str):
    name = Prompt.ask("Exam name")
    brief = Prompt.ask("Exam brief (topics, format, anything you know)")
    exam_date = date.fromisoformat(Prompt.ask("Exam date (YYYY-MM-DD)"))
    notes = []
    while Prompt.ask("Add a note?", choices=["y", "n"], default="n") == "y":
        notes.append(CourseNote(title=Prompt.ask("Note title"), content=Prompt.ask("Note content")))
    timeline = create_timeline(db_path, name, brief, exam_date, notes=notes)
    console.print(f"[green]Created '{timeline.exam_name}' with {timeline.total_quiz_count} quizzes "
                  f"over {timeline.days_until_exam()} days.[/green]")
    with console.status("Generating today's quizzes..."):
        for quiz in fill_quizzes_by_topic(timeline, make_generator(db_path)):
            save_quiz(db_path, quiz)
    console.print("[green]Today's quizzes are ready![/green]")


def cmd_timelines(db_path: str):
    timelines = list_timelines(db_path)
    if not timelines:
        console.print("[yellow]No timelines yet.[/yellow]")
        return
    table = Table(title="Exam Timelines")
    table.add_column("Exam", style="cyan")
    table.add_column("Date")
    table.add_column("Days Left", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Avg Score", justify="right")
    table.add_column("Status")
    for t in timelines:
        stats = get_timeline_stats(t)
        table.add_row(
            t.exam_name, t.exam_date.isoformat(), str(stats["days_until_exam"]),
            f"{stats['quizzes_completed']}/{stats['quizzes_total']} ({stats['progress']}%)",
            f"{stats['avg_score']}%",
            "[green]Active[/green]" if t.is_active else "[dim]Archived[/dim]",
        )
    console.print(table)
    if Prompt.ask("Archive or restore a timeline?", choices=["y", "n"], default="n") == "y":
        for i, t in enumerate(timelines, 1):
            console.print(f"  [cyan]{i}[/cyan]) {t.exam_name}")
        choice = IntPrompt.ask("Select timeline", choices=[str(i) for i in range(1, len(timelines) + 1)])
        target = timelines[choice - 1]
        set_timeline_active(db_path, target.id, not target.is_active)


def cmd_today(db_path: str):
    timeline = select_timeline(db_path)
    if not timeline:
        return
    states = quiz_states(timeline.daily_quizzes)
    table = Table(title=f"{timeline.exam_name} — Day plan")
    table.add_column("Day", justify="right")
    table.add_column("Topic")
    table.add_column("Questions", justify="right")
    table.add_column("Status")
    styles = {
        QuizState.COMPLETED: "[green]Done[/green]",
        QuizState.AVAILABLE: "[cyan]Available[/cyan]",
        QuizState.LOCKED: "[dim]Locked[/dim]",
    }
    for quiz in todays_quizzes(timeline):
        table.add_row(str(quiz.day_number), quiz.topic, str(len(quiz.questions)), styles[states[quiz.id]])
    console.print(table)


def cmd_quiz(db_path: str):
    timeline = select_timeline(db_path)
    if not timeline:
        return
    states = quiz_states(timeline.daily_quizzes)
    available = [q for q in sorted_quizzes(timeline.daily_quizzes) if states[q.id] is QuizState.AVAILABLE]
    if not available:
        console.print("[green]No quizzes available right now. Come back tomorrow![/green]")
        return
    quiz = available[0]
    if not quiz.questions:
        with console.status("Generating questions..."):
            fill_quiz(timeline, quiz, make_generator(db_path))
            save_quiz(db_path, quiz)
    try:
        run_quiz_session(db_path, quiz)
    except SessionExitRequested:
        console.print("[dim]Progress saved. Resume with 'quiz'.[/dim]")


def show_quiz_review(quiz: DailyQuiz):
    pct = score_percentage(quiz)
    color = get_score_color(pct)
    table = Table(title=f"Day {quiz.day_number} — {quiz.topic} ([{color}]{pct}%[/{color}])")
    table.add_column("#", justify="right")
    table.add_column("Question")
    table.add_column("Your answer")
    table.add_column("Correct answer", style="green")
    table.add_column("", justify="center")
    for i, q in enumerate(quiz.questions, 1):
        mark = "[green]✓[/green]" if q.is_answered_correctly else "[red]✗[/red]"
        table.add_row(str(i), q.question, answer_text(q), q.correct_answer, mark)
    console.print(table)


def cmd_review(db_path: str):
    timeline = select_timeline(db_path)
    if not timeline:
        return
    completed = [q for q in sorted_quizzes(timeline.daily_quizzes) if q.is_completed]
    if not completed:
        console.print("[yellow]No completed quizzes to review yet.[/yellow]")
        return
    for i, q in enumerate(completed, 1):
        console.print(f"  [cyan]{i}[/cyan]) Day {q.day_number} — {q.topic}")
    choice = IntPrompt.ask("Select quiz", choices=[str(i) for i in range(1, len(completed) + 1)])
    show_quiz_review(completed[choice - 1])


def cmd_mistakes(db_path: str):
    timeline = select_timeline(db_path)
    if not timeline:
        return
    mistakes = rank_mistakes(collect_mistakes(timeline.daily_quizzes))
    if not mistakes:
        console.print(f"[green]No mistakes in '{timeline.exam_name}'! Great job.[/green]")
        return
    table = Table(title="Mistakes")
    table.add_column("#", justify="right")
    table.add_column("Question")
    table.add_column("Answer", style="green")
    table.add_column("Missed", justify="right")
    for i, m in enumerate(mistakes, 1):
        table.add_row(str(i), m.question, m.correct_answer, str(m.times_incorrect))
    console.print(table)
    if Prompt.ask("Retake a completed quiz?", choices=["y", "n"], default="n") == "y":
        completed = [q for q in sorted_quizzes(timeline.daily_quizzes) if q.is_completed]
        for i, q in enumerate(completed, 1):
            console.print(f"  [cyan]{i}[/cyan]) Day {q.day_number} — {q.topic}")
        choice = IntPrompt.ask("Select quiz", choices=[str(i) for i in range(1, len(completed) + 1)])
        quiz = completed[choice - 1]
        reset_quiz(quiz)
        save_quiz(db_path, quiz)
        console.print(f"[green]Day {quiz.day_number} — {quiz.topic} reset. Use 'quiz' to retake it.[/green]")


def choose_widget_timeline(db_path: str, timelines: list[ExamTimeline]) -> str | None:
    """Ask which timeline the widget follows when there is more than one."""
    current = get_widget_timeline(db_path)
    if len(timelines) < 2:
        return current
    console.print("  [cyan]0[/cyan]) Soonest exam")
    for i, t in enumerate(timelines, 1):
        console.print(f"  [cyan]{i}[/cyan]) {t.exam_name} ({t.exam_date.isoformat()})")
    ids = [t.id for t in timelines]
    default = ids.index(current) + 1 if current in ids else 0
    choice = IntPrompt.ask(
        "Widget follows", choices=[str(i) for i in range(len(timelines) + 1)], default=default,
    )
    timeline_id = ids[choice - 1] if choice else None
    set_widget_timeline(db_path, timeline_id)
    return timeline_id


def cmd_widget(db_path: str):
    timelines = list_timelines(db_path, active_only=True)
    base = build_snapshot(timelines, timeline_id=choose_widget_timeline(db_path, timelines))
    rotation = build_rotation(base)
    if base.primary_timeline:
        t = base.primary_timeline
        console.print(Panel(
            f"[bold]{t.days_until_exam}[/bold] days until [cyan]{t.exam_name}[/cyan]\n"
            f"{base.pending_quiz_count} quizzes available today  |  "
            f"{t.completed_quizzes}/{t.total_quizzes} done",
            title="Widget", border_style="blue",
        ))
    else:
        console.print(Panel("No active timelines", title="Widget", border_style="blue"))
    mistakes = base.top_mistakes
    for entry in rotation.entries:
        idx = entry.mistake_rotation_index
        console.print(f"\n[dim]{entry.date:%H:%M:%S}[/dim]")
        single = current_mistake(mistakes, idx)
        if single is None:
            console.print("  [green]All caught up![/green]")
            continue
        console.print(f"  Review this: {single.question} [green]A: {single.correct_answer}[/green]")
        shown = rotating_indices_text(len(mistakes), idx)
        console.print(f"  Showing {shown} of {len(mistakes)}:")
        for m in wide_selection(mistakes, idx):
            console.print(f"    [red]x{m.times_incorrect}[/red] {m.question}")
    console.print(f"\n[dim]Next refresh at {rotation.next_refresh:%H:%M:%S}[/dim]")


def cmd_practice(db_path: str):
    timeline = select_timeline(db_path)
    if not timeline:
        return
    mistakes = rank_mistakes(collect_mistakes(timeline.daily_quizzes))
    if not mistakes:
        console.print("[green]Nothing to practice — no mistakes yet.[/green]")
        return
    by_id = {q.id: q for q in timeline.all_questions}
    for i, m in enumerate(mistakes, 1):
        console.print(f"  [cyan]{i}[/cyan]) {m.question}")
    choice = IntPrompt.ask("Select question", choices=[str(i) for i in range(1, len(mistakes) + 1)])
    missed = by_id[mistakes[choice - 1].id]
    with console.status("Generating practice questions..."):
        questions = LocalReinforcement(make_generator(db_path)).similar_questions(missed)
    if not questions:
        console.print("[yellow]Unable to generate practice questions. Please try again.[/yellow]")
        return
    practice = build_practice_quiz(questions)
    try:
        # Practice quizzes live outside the timeline; answers are not kept.
        run_quiz_session(db_path, practice, persist=False)
    except SessionExitRequested:
        console.print("[dim]Practice ended.[/dim]")


def cmd_import(db_path: str):
    timeline = select_timeline(db_path)
    if not timeline:
        return
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    note = import_note(file_path)
    timeline.notes.append(note)
    save_timeline(db_path, timeline)
    console.print(f"[green]Imported '{note.title}' ({len(note.content)} chars) → {timeline.exam_name}[/green]")


def cmd_settings(db_path: str):
    current = get_difficulty(db_path)
    level = Prompt.ask("Question difficulty", choices=list(DIFFICULTY_LEVELS), default=current)
    set_difficulty(db_path, level)
    console.print(f"[green]Difficulty set to {level}.[/green]")


COMMANDS = {
    "create": cmd_create,
    "timelines": cmd_timelines,
    "today": cmd_today,
    "quiz": cmd_quiz,
    "review": cmd_review,
    "mistakes": cmd_mistakes,
    "widget": cmd_widget,
    "practice": cmd_practice,
    "import": cmd_import,
    "settings": cmd_settings,
}


def main():
    configure_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck on your exam![/dim]")
                break
            command = COMMANDS.get(choice)
            if command is None:
                console.print("[red]Unknown command. Try again.[/red]")
                continue
            command(db_path)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
