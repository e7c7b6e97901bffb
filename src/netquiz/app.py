"""Interactive CLI application."""
import logging
import os
import sqlite3
from datetime import datetime
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from netquiz.bank import draw_questions, load_bank
from netquiz.config import settings
from netquiz.dashboard import get_history_stats, is_passing, performance_band
from netquiz.errors import EmptyQuestionSet, InvalidSessionData, QuizError
from netquiz.history import HistoryLog, round_percent
from netquiz.models import CATEGORIES, DIFFICULTIES, EXAM, MIXED, STUDY, Question, SessionResult, SessionState
from netquiz.session import SessionEngine
from netquiz.store import KeyValueStore, MemoryStore, SQLiteStore
from netquiz.timer import WallClockTicker

console = Console()
logger = logging.getLogger("netquiz")

QUIZ_COMMANDS = ["n", "p", "r", "x", "q"]


def setup_logging(log_dir: str = settings.LOG_DIR, log_file: str = settings.LOG_FILE) -> None:
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, log_file)
    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)


def open_store(db_path: str = settings.DB_PATH) -> KeyValueStore:
    try:
        return SQLiteStore(db_path)
    except (sqlite3.Error, OSError) as e:
        logger.warning(f"Storage unavailable at {db_path}: {e}")
        console.print(f"[yellow]Storage unavailable ({e}). Progress will not be kept.[/yellow]")
        return MemoryStore()


def format_clock(seconds: int) -> str:
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def format_date(timestamp_ms: int) -> str:
    try:
        return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%d %b %H:%M")
    except (OverflowError, OSError, ValueError):
        return "?"


def ask_yes_no(question: str) -> bool:
    return Prompt.ask(question, choices=["y", "n"], default="n") == "y"


# --- Home ---


def show_welcome():
    console.print(Panel(
        "[bold]IT Support Quiz[/bold]\n[dim]Hardware · Network · Security · Troubleshooting[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_home(store: KeyValueStore, history: HistoryLog) -> bool:
    """Print the saved session and latest results. Returns whether a session is saved."""
    saved = SessionEngine.load_saved(store)
    state = None
    if saved is not None:
        try:
            state = SessionState.from_dict(saved)
        except InvalidSessionData as e:
            logger.warning(f"Discarding unreadable saved session: {e}")
            SessionEngine.clear_saved(store)
            console.print("[red]The saved session could not be restored and was discarded.[/red]")
    if state is not None:
        console.print(Panel(
            f"{state.mode.title()} mode · {state.category_filter} · "
            f"{len(state.answers)}/{len(state.questions)} answered · "
            f"last saved {format_date(state.last_mutated)}",
            title="Session in progress", border_style="yellow",
        ))

    recent = history.records[: settings.RECENT_RESULTS]
    if recent:
        console.print("\n[bold]Latest results:[/bold]")
        for r in recent:
            pct = round_percent(r.ratio)
            color = "green" if is_passing(pct) else "red"
            console.print(
                f"  {format_date(r.timestamp)}  {r.mode:<5} {r.category:<15} "
                f"[{color}]{r.score}/{r.total} ({pct}%)[/{color}]"
            )
    return state is not None


def show_menu(has_saved: bool):
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("study", "Study mode: feedback after each question"),
        ("exam", f"Exam mode: {settings.EXAM_DURATION_SECONDS // 60} minutes, results at the end"),
    ]
    if has_saved:
        commands += [
            ("resume", "Continue the saved session"),
            ("discard", "Abandon the saved session"),
        ]
    commands += [
        ("stats", "Score history and statistics"),
        ("clear", "Erase the score history"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<10}[/cyan] {desc}")


def choose_filters() -> tuple[str, str]:
    difficulty = Prompt.ask("Difficulty", choices=[MIXED, *DIFFICULTIES], default=MIXED)
    category = Prompt.ask("Category", choices=[MIXED, *CATEGORIES], default=MIXED)
    return difficulty, category


# --- Quiz ---


def render_question(engine: SessionEngine):
    q = engine.current_question
    header = f"Question {engine.current_index + 1}/{engine.total}"
    if engine.mode == EXAM:
        header += f"  ·  [bold]{format_clock(engine.remaining_seconds)}[/bold] left"
    console.print(f"\n{header}  ·  [dim]{q.category} / {q.difficulty}[/dim]")
    console.print(Panel(q.text, border_style="cyan"))

    feedback = engine.feedback
    for option in q.options:
        marker = ">" if option.id == engine.selected_option else " "
        line = f" {marker} [cyan]{option.id})[/cyan] {option.text}"
        if feedback:
            if option.id == feedback.correct_option_id:
                line = f"[green]{line}[/green]"
            elif option.id == feedback.selected_option_id:
                line = f"[red]{line}[/red]"
            else:
                line = f"[dim]{line}[/dim]"
        console.print(line)

    if feedback:
        verdict = "[green]Correct![/green]" if feedback.is_correct else "[red]Incorrect.[/red]"
        console.print(f"\n{verdict}")
        if feedback.explanation:
            console.print(f"[dim]{feedback.explanation}[/dim]")


def quiz_prompt(engine: SessionEngine) -> str:
    if engine.mode == STUDY and not engine.is_revealed:
        action = "n=check"
    elif engine.is_last_question:
        action = "n=finish"
    else:
        action = "n=next"
    choices = [o.id for o in engine.current_question.options] + QUIZ_COMMANDS
    return Prompt.ask(
        f"[dim]option, {action}, p=back, r=restart, x=abandon, q=save & quit[/dim]",
        choices=choices, show_choices=False,
    )


def handle_quiz_choice(engine: SessionEngine, choice: str) -> None:
    if choice == "n":
        if engine.mode == STUDY and not engine.is_revealed:
            if engine.check_answer() is None:
                console.print("[yellow]Select an option first.[/yellow]")
        else:
            engine.advance()
    elif choice == "p":
        if not engine.retreat():
            console.print("[dim]Already at the first question.[/dim]")
    elif choice == "r":
        if ask_yes_no("Restart from the first question? Current progress will be lost"):
            engine.restart()
    elif choice == "x":
        if ask_yes_no("Abandon this session without a score?"):
            engine.discard()
            console.print("[dim]Session abandoned.[/dim]")
    elif choice == "q":
        engine.quit()
        console.print("[dim]Progress saved. Use 'resume' to continue later.[/dim]")
    elif not engine.select_option(choice):
        console.print("[dim]Answer already checked.[/dim]")


def run_quiz(engine: SessionEngine) -> SessionResult | None:
    ticker = engine.ticker if isinstance(engine.ticker, WallClockTicker) else None
    try:
        while engine.is_active:
            render_question(engine)
            choice = quiz_prompt(engine)
            if ticker:
                ticker.poll()
            if not engine.is_active:
                console.print("\n[red]Time is up![/red]")
                break
            handle_quiz_choice(engine, choice)
    except KeyboardInterrupt:
        if engine.is_active:
            engine.quit()
        console.print("\n[dim]Progress saved.[/dim]")
        return None

    if engine.save_error is not None:
        console.print(f"[yellow]Warning: progress could not be saved ({engine.save_error}).[/yellow]")
    if engine.result is not None:
        show_result(engine.result, engine.state.questions)
    return engine.result


def show_result(result: SessionResult, questions: tuple[Question, ...]):
    pct = round_percent(result.score / result.total) if result.total else 0
    label, color = performance_band(pct)
    console.print(Panel(
        f"[bold]{result.score}/{result.total}[/bold]  ([{color}]{pct}% · {label}[/{color}])",
        title=f"{result.mode.title()} result", border_style=color,
    ))
    table = Table(title="Review")
    table.add_column("#", justify="right")
    table.add_column("Question")
    table.add_column("Your answer")
    table.add_column("Correct")
    for i, q in enumerate(questions, 1):
        given = result.answers.get(q.id)
        ok = given == q.correct_answer_id
        table.add_row(
            str(i),
            q.text if len(q.text) <= 60 else q.text[:57] + "...",
            f"[{'green' if ok else 'red'}]{given or '-'}[/]",
            q.correct_answer_id,
        )
    console.print(table)


# --- Commands ---


def cmd_start(store: KeyValueStore, history: HistoryLog, bank: list[Question], mode: str):
    difficulty, category = choose_filters()
    try:
        questions = draw_questions(bank, difficulty, category)
    except EmptyQuestionSet:
        console.print("[yellow]No questions available for this combination.[/yellow]")
        return None
    engine = SessionEngine.start_new(
        store, questions, mode, difficulty, category,
        ticker=WallClockTicker(), on_finish=history.record_result,
    )
    return run_quiz(engine)


def cmd_resume(store: KeyValueStore, history: HistoryLog):
    payload = SessionEngine.load_saved(store)
    if payload is None:
        console.print("[yellow]No saved session to resume.[/yellow]")
        return None
    try:
        engine = SessionEngine.resume(
            store, payload, ticker=WallClockTicker(), on_finish=history.record_result,
        )
    except InvalidSessionData as e:
        logger.warning(f"Discarding unreadable saved session: {e}")
        SessionEngine.clear_saved(store)
        console.print("[red]The saved session could not be restored and was discarded.[/red]")
        return None
    return run_quiz(engine)


def cmd_discard(store: KeyValueStore):
    if SessionEngine.load_saved(store) is None:
        console.print("[yellow]No saved session.[/yellow]")
        return
    if ask_yes_no("Abandon the session in progress?"):
        SessionEngine.clear_saved(store)
        logger.info("Saved session discarded from home")
        console.print("[dim]Saved session discarded.[/dim]")


def cmd_stats(history: HistoryLog):
    stats = get_history_stats(history)
    if stats["tests_taken"] == 0:
        console.print("[yellow]No results yet. Finish a quiz to see your statistics.[/yellow]")
        return
    avg, best = stats["average_percent"], stats["best_percent"]
    console.print(Panel(
        f"Tests: [bold]{stats['tests_taken']}[/bold]  |  "
        f"Average: [{performance_band(avg)[1]}]{avg}%[/]  |  "
        f"Best: [{performance_band(best)[1]}]{best}%[/]",
        title="Dashboard", border_style="blue",
    ))

    table = Table(title="By category")
    table.add_column("Category", style="cyan")
    table.add_column("Average", justify="right")
    table.add_column("Tests", justify="right")
    for cs in stats["categories"]:
        _, color = performance_band(cs.average_percent)
        table.add_row(cs.name, f"[{color}]{cs.average_percent}%[/{color}]", str(cs.count))
    console.print(table)

    trend = Table(title="Progress")
    trend.add_column("Date")
    trend.add_column("Mode")
    trend.add_column("Score", justify="right")
    trend.add_column("")
    for point in stats["trend"]:
        _, color = performance_band(point.percent)
        trend.add_row(
            format_date(point.timestamp), point.mode, f"{point.percent}%",
            f"[{color}]{'█' * (point.percent // 5)}[/{color}]",
        )
    console.print(trend)


def cmd_clear(history: HistoryLog):
    if ask_yes_no("Erase the whole score history?"):
        history.clear()
        console.print("[dim]History cleared.[/dim]")


def main():
    setup_logging()
    store = open_store()
    history = HistoryLog(store)
    bank = load_bank()

    show_welcome()

    while True:
        has_saved = show_home(store, history)
        show_menu(has_saved)
        choice = Prompt.ask(
            "\n[bold]>[/bold]", default="resume" if has_saved else "study",
        ).strip().lower()
        try:
            if choice == "study":
                cmd_start(store, history, bank, STUDY)
            elif choice == "exam":
                cmd_start(store, history, bank, EXAM)
            elif choice == "resume":
                cmd_resume(store, history)
            elif choice == "discard":
                cmd_discard(store)
            elif choice == "stats":
                cmd_stats(history)
            elif choice == "clear":
                cmd_clear(history)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except QuizError as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
