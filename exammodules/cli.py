"""
CLI (Command Line Interface).

This module provides quick terminal commands for power users and for testing, e.g.:

    exammodules list --search "BE-1" --program "Programming Backend"
    exammodules programs
    exammodules toggle <class_id> <module_id> exam
    exammodules interactive

Note:
- The interactive UI lives in exammodules/interactive.py
- Every command fetches fresh data; nothing is cached locally
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Optional

from rich.console import Console
from rich.markup import escape

from exammodules.api import StudioApiClient
from exammodules.columns import shows_control
from exammodules.config import PAGE_SIZE, Settings, load_settings
from exammodules.model import ModuleRow
from exammodules.notify import ConsoleNotifier
from exammodules.sync import EXAM, FIELDS, SURVEY
from exammodules.view import ExamModuleView


console = Console()

SORT_FIELDS = {"start": "start_date", "end": "end_date"}


def _bool_arg(text: str) -> bool:
    return text == "true"


def _build_view(settings: Settings) -> ExamModuleView:
    client = StudioApiClient(base_url=settings.base_url, timeout=settings.timeout)
    return ExamModuleView(client, ConsoleNotifier(console), cutoff=settings.cutoff)


async def _load(view: ExamModuleView) -> bool:
    ok = await view.load()
    if not ok:
        console.print(escape(f"Error: {view.error}"))
    return ok


def _find_displayable(view: ExamModuleView, class_id: str, module_id: str) -> Optional[ModuleRow]:
    """
    Find a row in the date filtered set by ids given as text.
    """
    for row in view.filtered_rows:
        if str(row.class_id) == class_id and str(row.module_id) == module_id:
            return row
    return None


async def _cmd_list(args: argparse.Namespace, view: ExamModuleView) -> int:
    """
    Print one page of the table with the given search/filter/sort options.
    """
    from exammodules.interactive import render_table

    if not await _load(view):
        return 1

    if args.search:
        view.search_confirm(args.search)
    try:
        if args.program:
            view.set_program_filter(args.program)
        if args.survey is not None:
            view.set_survey_filter(None if args.survey == "all" else _bool_arg(args.survey))
        if args.exam:
            view.set_exam_filter(_bool_arg(x) for x in args.exam)
    except ValueError as e:
        console.print(escape(str(e)))
        return 1

    rows = view.displayed_rows(sort_by=SORT_FIELDS.get(args.sort), descending=args.desc)
    if not rows:
        console.print("No data.")
        return 0

    if args.page < 1:
        console.print("Page must be >= 1.")
        return 1

    pages = max(1, -(-len(rows) // PAGE_SIZE))
    page = min(args.page, pages)
    start = (page - 1) * PAGE_SIZE
    title = f"Page {page}/{pages} ({len(rows)} rows)"
    console.print(render_table(rows[start : start + PAGE_SIZE], view.columns(), title=title, offset=start))
    return 0


async def _cmd_programs(args: argparse.Namespace, view: ExamModuleView) -> int:
    """
    Print the program names offered by the program filter.
    """
    if not await _load(view):
        return 1

    names = view.filter_options("program_name")
    if not names:
        console.print("No programs.")
        return 0
    for name in names:
        console.print(escape(name))
    return 0


async def _cmd_toggle(args: argparse.Namespace, view: ExamModuleView) -> int:
    """
    Toggle one flag of one row and wait for the remote write.
    """
    if not await _load(view):
        return 1

    class_id = (args.class_id or "").strip()
    module_id = (args.module_id or "").strip()
    row = _find_displayable(view, class_id, module_id)
    if row is None:
        console.print(escape(f"No module {module_id} in class {class_id} (or it ended before the cutoff)."))
        return 1

    if not shows_control(row, args.field):
        console.print(escape(f"No {args.field} checkbox for program {row.program_name!r}."))
        return 1

    task = view.toggle(row, args.field)
    state = "checked" if getattr(row, args.field) else "unchecked"
    console.print(escape(f"{row.class_name} / {row.module_name}: {args.field} {state}"))

    ok = await task
    return 0 if ok else 1


async def _dispatch(args: argparse.Namespace, view: ExamModuleView) -> int:
    try:
        if args.command == "list":
            return await _cmd_list(args, view)
        if args.command == "programs":
            return await _cmd_programs(args, view)
        if args.command == "toggle":
            return await _cmd_toggle(args, view)
        if args.command == "interactive":
            from exammodules.interactive import run_interactive

            await run_interactive(view)
            return 0
        return 2
    finally:
        await view.close()


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="exammodules", description="Exam / survey module sheets")
    parser.add_argument("--base-url", type=str, default=None, help="API base URL")
    parser.add_argument("--cutoff", type=str, default=None, help="Hide modules ending on/before this date (YYYY-MM-DD)")
    parser.add_argument("--timeout", type=str, default=None, help="Request timeout in seconds (default: none)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="Show the module table")
    p_list.add_argument("--search", type=str, default="", help="Group name contains text")
    p_list.add_argument("--program", action="append", default=[], help="Program name (repeatable)")
    p_list.add_argument(
        "--survey", choices=["true", "false", "all"], default=None, help="Survey flag filter (default: false)"
    )
    p_list.add_argument("--exam", action="append", choices=["true", "false"], default=[], help="Exam flag filter")
    p_list.add_argument("--sort", choices=sorted(SORT_FIELDS), default=None, help="Sort by date column")
    p_list.add_argument("--desc", action="store_true", help="Sort descending")
    p_list.add_argument("--page", type=int, default=1, help="Page number (10 rows per page)")

    sub.add_parser("programs", help="List program names")

    p_toggle = sub.add_parser("toggle", help="Toggle the exam or survey flag of one module")
    p_toggle.add_argument("class_id", type=str, help="Class ID")
    p_toggle.add_argument("module_id", type=str, help="Module ID")
    p_toggle.add_argument("field", choices=list(FIELDS), help=f"{SURVEY} or {EXAM}")

    sub.add_parser("interactive", help="Interactive table mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(base_url=args.base_url, cutoff=args.cutoff, timeout=args.timeout)
    except ValueError as e:
        parser.error(str(e))

    view = _build_view(settings)
    raise SystemExit(asyncio.run(_dispatch(args, view)))
