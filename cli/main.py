#!/usr/bin/env python3
"""
Exam Board CLI - terminal client for the exam dashboard API.
"""

import sys
import threading

from lib import config
from lib.errors import ExamServiceError
from lib.exam_client import ExamService
from lib.exam_lifecycle import ExamKey, ExamRecord, ExamStatus, classify_all
from lib.observability import configure_logging
from lib.presenter import BucketPresenter, ViewState, format_remaining_time

RED = "\033[91m"
BLUE = "\033[94m"
RESET = "\033[0m"

HEADERS = ["Course", "Exam", "Batch", "Date", "Start", "Mins", "End", "Left"]


def print_header(text: str):
    """Print a section header."""
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


def print_table(headers: list, rows: list, widths: list = None):
    """Print a simple table."""
    if not widths:
        widths = [
            max(len(str(row[i])) for row in [headers] + rows)
            for i in range(len(headers))
        ]

    header_str = " │ ".join(str(h).ljust(w) for h, w in zip(headers, widths))
    print(header_str)
    print("─" * len(header_str))

    for row in rows:
        print(" │ ".join(str(c)[:w].ljust(w) for c, w in zip(row, widths)))


def countdown_color(remaining_ms: int) -> str:
    """Red under five minutes, blue otherwise."""
    if remaining_ms < config.URGENT_THRESHOLD_SECONDS * 1000:
        return RED
    return BLUE


def _row(item, left: str) -> list:
    record = item.record.to_dict()
    return [
        record["course_name"],
        record["exam_no"],
        record["batch"],
        record["exam_date"],
        record["start_time"],
        record["duration_minutes"],
        item.finish_time,
        left,
    ]


def _parse_key(args) -> ExamKey:
    return ExamKey(args[0], int(args[1]), int(args[2]))


# ============================================================
# COMMANDS
# ============================================================


def cmd_serve(args):
    """Run the API server."""
    from api.server import main as serve

    port = int(args[0]) if args else None
    serve(port=port)
    return 0


def cmd_time(args):
    """Show the server reference time."""
    print(ExamService().get_time().isoformat())
    return 0


def cmd_list(args):
    """List live exams, optionally only one bucket."""
    wanted = args[0] if args else "all"
    if wanted not in ("all", "ongoing", "upcoming"):
        print("Usage: list [all|ongoing|upcoming]")
        return 2

    service = ExamService()
    records = service.get_all_exams()
    now = service.get_time()

    print_header(f"Exams ({wanted}) at {now.strftime('%Y-%m-%d %H:%M:%S')}")
    rows = []
    for item in classify_all(records, now):
        if item.status == ExamStatus.EXPIRED:
            continue
        if wanted != "all" and item.status.value != wanted:
            continue
        remaining_ms = int((item.countdown_target() - now).total_seconds() * 1000)
        rows.append(_row(item, f"{item.status.value}: {format_remaining_time(remaining_ms)}"))

    if not rows:
        print("No exams.")
        return 0
    print_table(HEADERS, rows)
    return 0


def cmd_add(args):
    """Create an exam."""
    if len(args) < 6:
        print("Usage: add <course> <exam_no> <batch> <YYYY-MM-DD> <HH:MM[:SS]> <minutes>")
        return 2

    record = ExamRecord(
        course_name=args[0],
        exam_no=int(args[1]),
        batch=int(args[2]),
        exam_date=args[3],
        start_time=args[4],
        duration_minutes=int(args[5]),
    )
    ExamService().create_exam(record)
    print(f"✅ Created: {record.key}")
    return 0


def cmd_cancel(args):
    """Cancel an exam by natural key."""
    if len(args) < 3:
        print("Usage: cancel <course> <exam_no> <batch>")
        return 2

    key = _parse_key(args)
    ExamService().cancel_exam(key)
    print(f"❌ Cancelled: {key}")
    return 0


def cmd_reschedule(args):
    """Move an exam to a new date/time."""
    if len(args) < 5:
        print("Usage: reschedule <course> <exam_no> <batch> <YYYY-MM-DD> <HH:MM[:SS]>")
        return 2

    key = _parse_key(args)
    ExamService().reschedule_exam(key, args[3], args[4])
    print(f"✅ Rescheduled: {key} -> {args[3]} {args[4]}")
    return 0


def cmd_duration(args):
    """Change an exam's duration."""
    if len(args) < 4:
        print("Usage: duration <course> <exam_no> <batch> <minutes>")
        return 2

    key = _parse_key(args)
    ExamService().update_duration(key, int(args[3]))
    print(f"✅ Duration updated: {key} -> {args[3]} minutes")
    return 0


def cmd_watch(args):
    """Live dashboard with per-exam countdowns. Ctrl-C to exit."""
    view = ExamStatus(args[0]) if args else ExamStatus.ONGOING
    remaining: dict[ExamKey, int] = {}
    lock = threading.Lock()
    state_holder: list[ViewState] = []

    def on_render(state: ViewState):
        with lock:
            remaining.clear()
            state_holder[:] = [state]

    def on_tick(key: ExamKey, remaining_ms: int, urgent: bool):
        with lock:
            remaining[key] = remaining_ms

    def on_notify(message: str):
        print(f"\a🔔 {message}")

    def on_error(message: str):
        print(f"{RED}{message}{RESET}")

    presenter = BucketPresenter(
        ExamService(),
        on_render=on_render,
        on_tick=on_tick,
        on_notify=on_notify,
        on_error=on_error,
    )
    presenter.switch_view(view)

    stop = threading.Event()
    try:
        while not stop.wait(1.0):
            with lock:
                if not state_holder:
                    continue
                state = state_holder[0]
                print("\033[2J\033[H", end="")
                print_header(f"{state.view.value.title()} exams  (ongoing: "
                             f"{len(state.ongoing)}, upcoming: {len(state.upcoming)})")
                rows = []
                for item in state.visible:
                    ms = remaining.get(item.key)
                    left = "…" if ms is None else f"{countdown_color(ms)}{format_remaining_time(ms)}{RESET}"
                    rows.append(_row(item, left))
                if rows:
                    print_table(HEADERS, rows)
                else:
                    print("No exams.")
    except KeyboardInterrupt:
        pass
    finally:
        presenter.close()
    return 0


def cmd_help(args):
    """Show help."""
    print_header("EXAM BOARD CLI")
    print(f"""
COMMANDS:

  serve [port]                         Run the API server (default {config.PORT})
  time                                 Show server reference time
  list [all|ongoing|upcoming]          List live exams (expired ones are reaped)
  add <course> <no> <batch> <date> <time> <minutes>
                                       Create an exam
  cancel <course> <no> <batch>         Cancel an exam
  reschedule <course> <no> <batch> <date> <time>
                                       Move an exam
  duration <course> <no> <batch> <minutes>
                                       Change an exam's duration
  watch [ongoing|upcoming]             Live dashboard with countdowns
  help                                 Show this help

API: {config.API_BASE_URL}  (override with EXAM_BOARD_API_URL)
""")
    return 0


COMMANDS = {
    "serve": cmd_serve,
    "time": cmd_time,
    "list": cmd_list,
    "ls": cmd_list,
    "add": cmd_add,
    "cancel": cmd_cancel,
    "reschedule": cmd_reschedule,
    "duration": cmd_duration,
    "watch": cmd_watch,
    "w": cmd_watch,
    "help": cmd_help,
    "h": cmd_help,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        return cmd_help([])

    cmd, args = argv[0], argv[1:]
    if cmd not in COMMANDS:
        print(f"Unknown command: {cmd}")
        print("Run 'help' for available commands.")
        return 2

    configure_logging(config.LOG_LEVEL if cmd == "serve" else "WARNING")
    try:
        return COMMANDS[cmd](args)
    except ExamServiceError as e:
        print(f"{RED}Error: {e}{RESET}")
        return 1
    except ValueError as e:
        print(f"Invalid argument: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
