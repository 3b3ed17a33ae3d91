"""CLI entrypoint for replaying a saved conversation history."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from textwrap import shorten

from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.traceback import install as install_rich_traceback

from tripstage.budget import DEFAULT_PRICE_BOOK, calculate_budget
from tripstage.config import get_config
from tripstage.messages import messages_from_records
from tripstage.schemas import BudgetBreakdown, StageState, TripConfig
from tripstage.state import replay


def _save_json(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False, default=str), encoding="utf-8")


def _load_history(path: Path) -> list:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = raw.get("messages", [])
    if not isinstance(raw, list):
        raise ValueError("history must be a list of messages or an object with a 'messages' list")
    return raw


def _won(amount: int) -> str:
    return f"{amount:,}원"


def _render_header(console: Console, history_path: Path, thread_id: str | None, message_count: int) -> None:
    header = Table.grid(padding=(0, 2))
    header.add_column(style="bold")
    header.add_column()
    header.add_row("History", str(history_path))
    header.add_row("Thread", thread_id or "-")
    header.add_row("Messages", str(message_count))
    console.print(Panel(header, title="Stage Replay", box=box.ROUNDED))


def _render_state(console: Console, state: StageState, completions: int) -> None:
    summary = Table(box=box.SIMPLE, show_header=False)
    summary.add_column(style="bold")
    summary.add_column()
    summary.add_row("Current stage", str(state.current_stage))
    summary.add_row("Travel plan link", state.travel_plan_link or "-")
    summary.add_row("Plan-completed signals", str(completions))
    console.print(Panel(summary, title="State Summary"))

    if state.stage1:
        table = Table(
            title=f"Stage 1: {state.stage1.total_count} places "
            f"({state.stage1.recommended_count} recommended)",
            box=box.SIMPLE,
        )
        table.add_column("Category", style="bold")
        table.add_column("Places", justify="right")
        table.add_column("Sample")
        for category in state.stage1.categories:
            names = ", ".join(place.name for place in category.places)
            table.add_row(category.name, str(len(category.places)), shorten(names, width=60, placeholder="..."))
        console.print(table)

    if state.stage2:
        table = Table(
            title=f"Stage 2: {state.stage2.selected_count} places over {state.stage2.total_days} days",
            box=box.SIMPLE,
        )
        table.add_column("Day", style="bold", justify="right")
        table.add_column("Places", justify="right")
        table.add_column("Names")
        for day in state.stage2.days:
            names = ", ".join(place.name for place in day.places)
            table.add_row(str(day.day), str(day.place_count), shorten(names, width=60, placeholder="..."))
        console.print(table)

    if state.stage3:
        stage3 = state.stage3
        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Days", str(stage3.total_days))
        table.add_row("Destination", stage3.destination or "-")
        table.add_row("Distance", "-" if stage3.total_distance is None else f"{stage3.total_distance:g}")
        table.add_row("Time", "-" if stage3.total_time is None else f"{stage3.total_time:g}")
        console.print(Panel(table, title="Stage 3"))


def _render_budget(console: Console, config: TripConfig, budget: BudgetBreakdown) -> None:
    table = Table(
        title=f"Budget ({config.days} days, {config.travelers} travelers, {config.budget} tier)",
        box=box.SIMPLE,
    )
    table.add_column("Item", style="bold")
    table.add_column("Amount", justify="right")
    table.add_row("Accommodation", _won(budget.accommodation))
    table.add_row("Food", _won(budget.food))
    table.add_row("Transportation", _won(budget.transportation))
    table.add_row("Activities", _won(budget.activities))
    table.add_row("Total", _won(budget.total), style="bold")
    console.print(table)


def _run(args: argparse.Namespace) -> int:
    console = Console()
    if args.debug:
        install_rich_traceback(show_locals=True)
        logging.basicConfig(level=logging.DEBUG)

    try:
        records = _load_history(args.history)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not read history {args.history}: {e}[/red]")
        return 1

    messages = messages_from_records(records, args.thread_id)
    _render_header(console, args.history, args.thread_id, len(messages))

    config = get_config()
    steps = replay(messages, args.thread_id, config)
    state = steps[-1].state if steps else StageState()
    completions = sum(1 for step in steps if step.plan_completed is not None)
    _render_state(console, state, completions)

    output: dict = {"state": state.model_dump()}
    if state.stage3 is not None:
        try:
            trip_config = TripConfig(
                days=args.days if args.days is not None else state.stage3.total_days,
                travelers=args.travelers,
                accommodation=args.accommodation,
                transportation=args.transportation,
                budget=args.budget,
            )
        except ValidationError as e:
            console.print(f"[red]Invalid trip configuration: {e}[/red]")
            return 1
        budget = calculate_budget(
            state.stage3.itinerary, trip_config, DEFAULT_PRICE_BOOK.for_tier(trip_config.budget)
        )
        _render_budget(console, trip_config, budget)
        output["budget"] = budget.model_dump()

    if args.output:
        _save_json(args.output, output)
        console.print(Panel(f"Saved replay results to {args.output}", title="Outputs", box=box.ROUNDED))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rebuild planning stages from a saved message history."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_parser = subparsers.add_parser("replay", help="Replay a message history file")
    replay_parser.add_argument("history", type=Path, help="JSON file with the thread's messages")
    replay_parser.add_argument("--thread-id", help="Thread identifier used for the travel plan link")
    replay_parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Trip length for the budget (default: Stage 3 total days)",
    )
    replay_parser.add_argument("--travelers", type=int, default=1, help="Number of travelers (default: 1)")
    replay_parser.add_argument(
        "--accommodation", default="guesthouse", help="Accommodation tier or form label (default: guesthouse)"
    )
    replay_parser.add_argument(
        "--transportation", default="public", help="Transport mode or form label (default: public)"
    )
    replay_parser.add_argument("--budget", default="standard", help="Budget tier or form label (default: standard)")
    replay_parser.add_argument("--output", type=Path, help="Write the rebuilt state and budget as JSON")
    replay_parser.add_argument(
        "--debug",
        action="store_true",
        help="Show detailed debug information",
    )
    return parser


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    raise SystemExit(_run(args))


if __name__ == "__main__":
    main()
