"""Interactive CLI application."""
import time
from dataclasses import replace
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from smart_study.alerts import check_and_generate_alerts, get_alerts_by_severity, resolve_alert
from smart_study.auth import current_user, ensure_default_profile, is_logged_in, login, logout, register
from smart_study.config import get_settings
from smart_study.dashboard import (
    get_completion_color, get_dashboard_summary, get_severity_color, get_trend_color,
    get_trend_label,
)
from smart_study.db import Repository, init_db
from smart_study.exceptions import AuthError, ConfigError, SmartStudyError, ValidationError
from smart_study.log import setup_logging
from smart_study.models import DAY_MS, MINUTE_MS, Grade, ScheduleItem, Subject, Topic, new_id, now_ms
from smart_study.performance import compare_with_historical, get_all_subject_performance, get_performance_trend
from smart_study.progress import get_all_subject_progress, get_overall_statistics, identify_weak_areas
from smart_study.review import NEVER_REVIEWED, get_topics_by_difficulty, mark_reviewed, skip_topic, suggest_topics
from smart_study.schedule import (
    DAY_NAMES, analyze_time_patterns, find_conflicts, get_schedule_for_day,
    update_schedule_from_patterns,
)
from smart_study.seed import is_seeded, seed_all
from smart_study.timers import BreakReminder, FocusTimer
from smart_study.tracking import TimeTracker
from smart_study.validation import (
    DEFAULT_COLOR, normalize_color, validate_difficulty, validate_grade_input,
    validate_priority, validate_time,
)

console = Console()


def show_welcome(name: str):
    console.print(Panel(
        f"[bold]Smart Study[/bold]\n[dim]Welcome back, {name}[/dim]",
        title="Smart Study & Academic Progress", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("dashboard", "Overview of your progress"),
        ("subjects", "Manage subjects"),
        ("topics", "Manage topics of a subject"),
        ("review", "Suggested topics to review"),
        ("schedule", "Weekly study schedule"),
        ("generate", "Generate an adaptive schedule"),
        ("track", "Start/stop a study session"),
        ("grades", "Grades and trends"),
        ("alerts", "Performance alerts"),
        ("timer", "Focus timer"),
        ("logout", "Log out"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def subject_names(repo: Repository) -> dict[str, str]:
    return {s.id: s.name for s in repo.get_subjects()}


def pick_subject(repo: Repository) -> Optional[Subject]:
    subjects = repo.get_subjects()
    if not subjects:
        console.print("[yellow]No subjects yet. Add one under 'subjects'.[/yellow]")
        return None
    for i, s in enumerate(subjects, 1):
        console.print(f"  [cyan]{i}[/cyan]) {s.name}")
    index = IntPrompt.ask("Select subject", choices=[str(i) for i in range(1, len(subjects) + 1)])
    return subjects[index - 1]


def pick_from(items: list, prompt: str):
    index = IntPrompt.ask(prompt, choices=[str(i) for i in range(1, len(items) + 1)])
    return items[index - 1]


def cmd_login(repo: Repository) -> bool:
    console.print(Panel("[bold]Sign in[/bold]", border_style="blue"))
    mode = Prompt.ask("Login or register", choices=["login", "register", "quit"], default="login")
    if mode == "quit":
        return False
    try:
        if mode == "register":
            name = Prompt.ask("Name")
            email = Prompt.ask("Email")
            password = Prompt.ask("Password", password=True)
            register(repo, name, email, password)
        else:
            email = Prompt.ask("Email")
            password = Prompt.ask("Password", password=True)
            login(repo, email, password)
    except AuthError as e:
        console.print(f"[red]{e}[/red]")
    return True


def cmd_dashboard(repo: Repository):
    summary = get_dashboard_summary(repo)
    console.print(Panel(
        f"Subjects: [bold]{summary['subjects']}[/bold]  |  "
        f"Topics: [bold]{summary['topics']}[/bold]  |  "
        f"Study time: [bold]{summary['study_minutes'] // 60}h {summary['study_minutes'] % 60}m[/bold]  |  "
        f"Avg grade: [bold]{summary['average_grade']}%[/bold]  |  "
        f"Alerts: [bold]{summary['unresolved_alerts']}[/bold]",
        title="Dashboard", border_style="blue",
    ))

    names = subject_names(repo)
    stats = get_overall_statistics(repo)
    console.print(
        f"  Average goal completion: [bold]{stats.average_completion:.0f}%[/bold]  |  "
        f"Studying more than last week: [bold]{stats.improving_subjects}/{stats.total_subjects}[/bold]"
    )
    weak = identify_weak_areas(repo)
    if weak:
        console.print(f"  [red]Behind on goals: {', '.join(names.get(s, '?') for s in weak)}[/red]")

    table = Table(title="Goal Progress")
    table.add_column("Subject", style="cyan")
    table.add_column("Goal", justify="right")
    table.add_column("This week", justify="right")
    table.add_column("Trend")
    for progress in get_all_subject_progress(repo):
        pct = progress.completion_percentage
        color = get_completion_color(pct)
        filled = int(pct / 10)
        bar = f"[{color}]{'█' * filled}{'░' * (10 - filled)}[/{color}] {pct:.0f}%"
        trend = get_performance_trend(repo, progress.subject_id)
        trend_color = get_trend_color(trend)
        table.add_row(
            names.get(progress.subject_id, "?"),
            bar,
            f"{progress.this_week_minutes} min",
            f"[{trend_color}]{get_trend_label(trend)}[/{trend_color}]",
        )
    console.print(table)

    if summary["next_topic"]:
        console.print(f"\n  [yellow]Next up for review: {summary['next_topic']}[/yellow]")


def cmd_subjects(repo: Repository):
    subjects = repo.get_subjects()
    patterns = analyze_time_patterns(repo.get_study_sessions())
    table = Table(title="Subjects")
    table.add_column("#", justify="right")
    table.add_column("Subject", style="cyan")
    table.add_column("Target h/week", justify="right")
    table.add_column("Usual hours")
    table.add_column("Description")
    for i, s in enumerate(subjects, 1):
        hours = ", ".join(f"{h:02d}:00" for h in patterns.get(s.id, []))
        table.add_row(str(i), f"[{normalize_color(s.color)}]■[/] {s.name}", f"{s.target_hours_per_week:g}", hours, s.description)
    console.print(table)

    action = Prompt.ask("Action", choices=["add", "delete", "back"], default="back")
    if action == "add":
        name = Prompt.ask("Name").strip()
        if not name:
            console.print("[red]Name is required.[/red]")
            return
        hours = Prompt.ask("Target hours per week", default="10")
        try:
            target = max(0.0, float(hours))
        except ValueError:
            target = 10.0
        color = normalize_color(Prompt.ask("Color (hex)", default=DEFAULT_COLOR))
        description = Prompt.ask("Description", default="")
        repo.add_subject(Subject(id=new_id(), name=name, color=color, target_hours_per_week=target, description=description))
        console.print(f"[green]Added {name}.[/green]")
    elif action == "delete" and subjects:
        subject = pick_from(subjects, "Delete subject")
        if Confirm.ask(f"Delete {subject.name} with its topics and schedule?", default=False):
            repo.delete_subject(subject.id)
            console.print(f"[green]Deleted {subject.name}.[/green]")


def cmd_topics(repo: Repository):
    subject = pick_subject(repo)
    if subject is None:
        return
    topics = [t for t in repo.get_topics() if t.subject_id == subject.id]
    table = Table(title=f"Topics - {subject.name}")
    table.add_column("#", justify="right")
    table.add_column("Topic", style="cyan")
    table.add_column("Difficulty", justify="right")
    table.add_column("Reviews", justify="right")
    table.add_column("Last reviewed")
    table.add_column("Priority", justify="right")
    for i, t in enumerate(topics, 1):
        last = datetime.fromtimestamp(t.last_reviewed / 1000).strftime("%Y-%m-%d") if t.last_reviewed else "never"
        priority = f"{t.manual_priority:g}" if t.manual_priority is not None else "auto"
        table.add_row(str(i), t.name, str(t.difficulty), str(t.review_count), last, priority)
    console.print(table)

    action = Prompt.ask("Action", choices=["add", "edit", "delete", "filter", "back"], default="back")
    if action == "filter":
        difficulty = validate_difficulty(Prompt.ask("Difficulty (1-10)"))
        matches = get_topics_by_difficulty(repo, difficulty, subject.id)
        if not matches:
            console.print(f"[dim]No topics with difficulty {difficulty}.[/dim]")
        for t in matches:
            console.print(f"  [cyan]-[/cyan] {t.name} ({t.review_count} reviews)")
    elif action == "add":
        name = Prompt.ask("Topic name").strip()
        if not name:
            console.print("[red]Name is required.[/red]")
            return
        difficulty = validate_difficulty(Prompt.ask("Difficulty (1-10)", default="2"))
        repo.add_topic(Topic(id=new_id(), subject_id=subject.id, name=name, difficulty=difficulty))
        console.print(f"[green]Added {name}.[/green]")
    elif action == "edit" and topics:
        topic = pick_from(topics, "Edit topic")
        current = "" if topic.manual_priority is None else f"{topic.manual_priority:g}"
        topic = replace(
            topic,
            name=Prompt.ask("Name", default=topic.name),
            difficulty=validate_difficulty(Prompt.ask("Difficulty (1-10)", default=str(topic.difficulty))),
            manual_priority=validate_priority(Prompt.ask("Manual priority (0-10, blank for auto)", default=current)),
        )
        repo.update_topic(topic)
        console.print(f"[green]Updated {topic.name}.[/green]")
    elif action == "delete" and topics:
        topic = pick_from(topics, "Delete topic")
        repo.delete_topic(topic.id)
        console.print(f"[green]Deleted {topic.name}.[/green]")


def cmd_review(repo: Repository):
    suggestions = suggest_topics(repo, limit=10)
    if not suggestions:
        console.print("[green]Nothing to review right now![/green]")
        return
    names = subject_names(repo)
    table = Table(title="Suggested Reviews")
    table.add_column("#", justify="right")
    table.add_column("Topic", style="cyan")
    table.add_column("Subject")
    table.add_column("Days since review", justify="right")
    table.add_column("Score", justify="right")
    for i, s in enumerate(suggestions, 1):
        days = "never" if s.days_since_review == NEVER_REVIEWED else str(s.days_since_review)
        table.add_row(str(i), s.topic.name, names.get(s.topic.subject_id, "?"), days, f"{s.priority_score:.1f}")
    console.print(table)

    action = Prompt.ask("Action", choices=["done", "skip", "back"], default="back")
    if action == "back":
        return
    suggestion = pick_from(suggestions, "Topic")
    if action == "done":
        if mark_reviewed(repo, suggestion.topic.id):
            console.print(f"[green]Marked {suggestion.topic.name} as reviewed.[/green]")
    elif skip_topic(repo, suggestion.topic.id):
        console.print(f"[dim]Skipped {suggestion.topic.name} for a week.[/dim]")


def _week_order(item: ScheduleItem):
    # Monday first, Sunday last
    return (item.day_of_week + 6) % 7, item.start_time


def _ask_schedule_details(item: ScheduleItem) -> ScheduleItem:
    for i, name in enumerate(DAY_NAMES):
        console.print(f"  [cyan]{i}[/cyan]) {name}")
    day = IntPrompt.ask("Day", choices=[str(i) for i in range(7)], default=item.day_of_week)
    start = validate_time(Prompt.ask("Start time (HH:mm)", default=item.start_time))
    duration = IntPrompt.ask("Duration (minutes)", default=item.duration_minutes)
    if duration <= 0:
        raise ValidationError("Duration must be positive")
    topic = Prompt.ask("Topic", default=item.topic)
    return replace(item, day_of_week=day, start_time=start, duration_minutes=duration, topic=topic)


def _confirm_no_clash(repo: Repository, item: ScheduleItem) -> bool:
    others = [i for i in repo.get_schedule_items() if i.id != item.id and i.enabled]
    if any(item in pair for pair in find_conflicts(others + [item])):
        return Confirm.ask("[yellow]This overlaps another session. Save anyway?[/yellow]", default=False)
    return True


def cmd_schedule(repo: Repository):
    names = subject_names(repo)
    today = (datetime.now().weekday() + 1) % 7
    todays = get_schedule_for_day(repo, today)
    if todays:
        console.print("\n[bold]Today:[/bold] " + ", ".join(
            f"{i.start_time} {names.get(i.subject_id, '?')}" for i in todays
        ))

    table = Table(title="Weekly Schedule")
    table.add_column("#", justify="right")
    table.add_column("Day", style="cyan")
    table.add_column("Time")
    table.add_column("Subject")
    table.add_column("Topic")
    table.add_column("Status")
    rows = sorted(repo.get_schedule_items(), key=_week_order)
    for i, item in enumerate(rows, 1):
        table.add_row(
            str(i), DAY_NAMES[item.day_of_week], f"{item.start_time} ({item.duration_minutes} min)",
            names.get(item.subject_id, "?"), item.topic,
            "on" if item.enabled else "[dim]off[/dim]",
        )
    console.print(table)

    action = Prompt.ask("Action", choices=["add", "edit", "toggle", "delete", "back"], default="back")
    if action == "add":
        subject = pick_subject(repo)
        if subject is None:
            return
        item = _ask_schedule_details(ScheduleItem(
            id=new_id(), subject_id=subject.id, day_of_week=1, start_time="14:00", duration_minutes=60,
        ))
        if not _confirm_no_clash(repo, item):
            return
        repo.add_schedule_item(item)
        console.print("[green]Session added.[/green]")
    elif action == "edit" and rows:
        item = _ask_schedule_details(pick_from(rows, "Edit session"))
        if not _confirm_no_clash(repo, item):
            return
        repo.update_schedule_item(item)
        console.print("[green]Session updated.[/green]")
    elif action == "toggle" and rows:
        item = pick_from(rows, "Toggle session")
        repo.update_schedule_item(replace(item, enabled=not item.enabled))
        console.print(f"[green]Session turned {'off' if item.enabled else 'on'}.[/green]")
    elif action == "delete" and rows:
        item = pick_from(rows, "Delete session")
        repo.delete_schedule_item(item.id)
        console.print("[green]Session removed.[/green]")


def cmd_generate(repo: Repository):
    if repo.get_schedule_items() and not Confirm.ask(
        "This replaces your current schedule, including manual entries. Continue?", default=True,
    ):
        return
    schedule = update_schedule_from_patterns(repo)
    if not schedule:
        console.print("[yellow]Add subjects first to generate a schedule.[/yellow]")
        return
    console.print(f"[green]Generated {len(schedule)} study sessions.[/green]")
    cmd_schedule(repo)


def cmd_track(repo: Repository, tracker: TimeTracker, reminder: BreakReminder):
    if tracker.active_session is not None:
        session = tracker.end_session()
        reminder.stop()
        if session:
            console.print(f"[green]Session ended: {session.duration_minutes} min recorded.[/green]")
        return
    mode = Prompt.ask("Track mode", choices=["start", "manual", "stats", "delete", "back"], default="start")
    if mode == "back":
        return
    if mode == "stats":
        stats = tracker.get_statistics()
        day = DAY_NAMES[stats.most_active_day] if stats.most_active_day is not None else "-"
        console.print(
            f"  Sessions: [bold]{stats.total_sessions}[/bold]  |  "
            f"Total: [bold]{stats.total_minutes} min[/bold]  |  "
            f"Average: [bold]{stats.average_session_length} min[/bold]  |  "
            f"Most active: [bold]{day}[/bold]"
        )
        week_ago = now_ms() - 7 * DAY_MS
        for subject in repo.get_subjects():
            console.print(
                f"  [cyan]{subject.name:<16}[/cyan] "
                f"{tracker.get_total_study_time(subject.id)} min total, "
                f"{tracker.get_total_study_time(subject.id, start_date=week_ago)} min in the last 7 days"
            )
        return
    if mode == "delete":
        sessions = tracker.get_sessions()[:10]
        if not sessions:
            console.print("[yellow]No sessions recorded yet.[/yellow]")
            return
        names = subject_names(repo)
        for i, s in enumerate(sessions, 1):
            when = datetime.fromtimestamp(s.start_time / 1000).strftime("%Y-%m-%d %H:%M")
            console.print(f"  [cyan]{i}[/cyan]) {when} {names.get(s.subject_id, '?')} {s.duration_minutes} min")
        session = pick_from(sessions, "Delete session")
        if Confirm.ask("Delete this session?", default=False):
            repo.delete_study_session(session.id)
            console.print("[green]Session deleted.[/green]")
        return
    subject = pick_subject(repo)
    if subject is None:
        return
    topic = Prompt.ask("Topic", default="")
    if mode == "manual":
        minutes = IntPrompt.ask("Duration (minutes)", default=60)
        days_ago = IntPrompt.ask("How many days ago", default=0)
        start = now_ms() - days_ago * DAY_MS - minutes * MINUTE_MS
        tracker.add_manual_session(subject.id, start, minutes, topic=topic, notes=Prompt.ask("Notes", default=""))
        console.print("[green]Session recorded.[/green]")
        return
    tracker.start_session(subject.id, topic)
    reminder.start(lambda: console.print(f"\n[yellow]{reminder.message()}[/yellow]"))
    console.print(f"[green]Tracking {subject.name}. Run 'track' again to stop.[/green]")


def cmd_grades(repo: Repository):
    names = subject_names(repo)
    table = Table(title="Grades")
    table.add_column("Subject", style="cyan")
    table.add_column("Average", justify="right")
    table.add_column("Trend")
    table.add_column("30-day change", justify="right")
    table.add_column("Count", justify="right")
    grades = repo.get_grades()
    for performance in get_all_subject_performance(repo):
        avg = performance.average_grade
        color = get_trend_color(performance.status)
        comparison = compare_with_historical(repo, performance.subject_id)
        table.add_row(
            names.get(performance.subject_id, "?"),
            f"{avg:.1f}%" if avg is not None else "-",
            f"[{color}]{get_trend_label(performance.status)}[/{color}]",
            f"{comparison.change:+.1f}" if comparison else "-",
            str(sum(1 for g in grades if g.subject_id == performance.subject_id)),
        )
    console.print(table)

    action = Prompt.ask("Action", choices=["add", "edit", "delete", "back"], default="back")
    if action == "back":
        return
    subject = pick_subject(repo)
    if subject is None:
        return
    if action == "add":
        label = Prompt.ask("Assessment")
        score, max_score = validate_grade_input(Prompt.ask("Score"), Prompt.ask("Max score", default="100"))
        category = Prompt.ask("Category", default="Exam")
        repo.add_grade(Grade(
            id=new_id(), subject_id=subject.id, type=label, score=score,
            max_score=max_score, date=now_ms(), category=category,
        ))
        console.print(f"[green]Recorded {score:g}/{max_score:g} for {names[subject.id]}.[/green]")
        return

    subject_grades = sorted((g for g in grades if g.subject_id == subject.id), key=lambda g: g.date, reverse=True)
    if not subject_grades:
        console.print(f"[yellow]No grades recorded for {subject.name}.[/yellow]")
        return
    for i, g in enumerate(subject_grades, 1):
        when = datetime.fromtimestamp(g.date / 1000).strftime("%Y-%m-%d")
        console.print(f"  [cyan]{i}[/cyan]) {when} {g.type} {g.score:g}/{g.max_score:g}")
    grade = pick_from(subject_grades, "Grade")
    if action == "delete":
        if Confirm.ask(f"Delete {grade.type}?", default=False):
            repo.delete_grade(grade.id)
            console.print(f"[green]Deleted {grade.type}.[/green]")
        return
    label = Prompt.ask("Assessment", default=grade.type)
    score, max_score = validate_grade_input(
        Prompt.ask("Score", default=f"{grade.score:g}"),
        Prompt.ask("Max score", default=f"{grade.max_score:g}"),
    )
    category = Prompt.ask("Category", default=grade.category)
    repo.update_grade(replace(grade, type=label, score=score, max_score=max_score, category=category))
    console.print(f"[green]Updated {label}.[/green]")


def cmd_alerts(repo: Repository):
    created = check_and_generate_alerts(repo)
    if created:
        console.print(f"[yellow]{len(created)} new alert(s).[/yellow]")
    alerts = []
    for severity, heading in ((3, "High priority"), (2, "Medium priority"), (1, "Low priority")):
        group = get_alerts_by_severity(repo, severity)
        if not group:
            continue
        color = get_severity_color(severity)
        console.print(f"\n[bold {color}]{heading}[/]")
        for alert in group:
            alerts.append(alert)
            console.print(f"  [cyan]{len(alerts)}[/cyan]) [{color}]{alert.type.name}[/{color}] {alert.message}")
    if not alerts:
        console.print("[green]No open alerts. Keep up the good work.[/green]")
        return
    if Prompt.ask("Action", choices=["resolve", "back"], default="back") == "resolve":
        alert = pick_from(alerts, "Resolve alert")
        resolve_alert(repo, alert.id)
        console.print("[green]Alert resolved.[/green]")


def cmd_timer():
    work = IntPrompt.ask("Work minutes", default=25)
    rest = IntPrompt.ask("Break minutes", default=5)
    timer = FocusTimer(on_complete=lambda: console.bell())
    timer.start(work_minutes=work, break_minutes=rest)
    console.print("[dim]Ctrl+C to stop.[/dim]")
    try:
        with Live(console=console, refresh_per_second=4) as live:
            while timer.is_running:
                phase = "Focus" if timer.is_work_phase else "Break"
                live.update(Panel(f"[bold]{timer.formatted_time()}[/bold]", title=phase, border_style="cyan"))
                time.sleep(0.25)
    except KeyboardInterrupt:
        timer.stop()
    console.print("[green]Timer finished.[/green]")


def main():
    try:
        settings = get_settings()
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        return
    setup_logging(settings.log_level, settings.log_file)
    repo = init_db(settings.data_dir)
    ensure_default_profile(repo)
    first_run = not is_seeded(repo)
    if first_run and settings.seed_demo_data:
        console.print("[dim]Setting up demo data...[/dim]")
        seed_all(repo)
    if settings.check_alerts_on_start:
        check_and_generate_alerts(repo)

    while not is_logged_in(repo):
        if not cmd_login(repo):
            return

    show_welcome(current_user(repo).name)
    tracker = TimeTracker(repo)
    reminder = BreakReminder()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="dashboard").strip().lower()
        try:
            if choice == "dashboard":
                cmd_dashboard(repo)
            elif choice == "subjects":
                cmd_subjects(repo)
            elif choice == "topics":
                cmd_topics(repo)
            elif choice == "review":
                cmd_review(repo)
            elif choice == "schedule":
                cmd_schedule(repo)
            elif choice == "generate":
                cmd_generate(repo)
            elif choice == "track":
                cmd_track(repo, tracker, reminder)
            elif choice == "grades":
                cmd_grades(repo)
            elif choice == "alerts":
                cmd_alerts(repo)
            elif choice == "timer":
                cmd_timer()
            elif choice == "logout":
                logout(repo)
                console.print("[dim]Logged out.[/dim]")
                break
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Happy studying![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except SmartStudyError as e:
            console.print(f"[red]Error: {e}[/red]")

    if tracker.active_session is not None:
        tracker.end_session()
    reminder.stop()
    repo.save()


if __name__ == "__main__":
    main()
