from __future__ import annotations

import asyncio
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from exammodules.columns import ColumnSpec, shows_control
from exammodules.config import PAGE_SIZE
from exammodules.model import ModuleRow
from exammodules.sync import EXAM, SURVEY
from exammodules.view import ExamModuleView


console = Console()


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(escape(msg))


async def _ask(msg: str) -> str:
    # input() blocks, so run it off the loop to let pending writes finish
    return await asyncio.to_thread(_prompt, msg)


def render_table(
    rows: list[ModuleRow], columns: list[ColumnSpec], title: str = "", offset: int = 0
) -> Table:
    """
    Build a rich table for one page of rows. Row numbers start at offset + 1.
    """
    table = Table(title=title or None, box=box.SIMPLE)
    table.add_column("#", justify="right")
    for col in columns:
        justify = "center" if col.field in (SURVEY, EXAM) else "left"
        # widths are pixel values in the web table, roughly /10 for a terminal
        width = col.width // 10 if col.width else None
        table.add_column(col.title, justify=justify, min_width=width)

    for i, row in enumerate(rows, start=offset + 1):
        table.add_row(str(i), *[Text(col.cell(row)) for col in columns])
    return table


class TableSession:
    """
    Paging and sorting state of one interactive session.
    """

    def __init__(self, view: ExamModuleView, page_size: int = PAGE_SIZE) -> None:
        self.view = view
        self.page_size = page_size
        self.page = 0
        self.sort_by: Optional[str] = None
        self.descending = False

    def rows(self) -> list[ModuleRow]:
        return self.view.displayed_rows(sort_by=self.sort_by, descending=self.descending)

    def page_count(self, total: int) -> int:
        return max(1, -(-total // self.page_size))

    def page_rows(self) -> tuple[list[ModuleRow], int, int]:
        """
        Returns (rows on the current page, total rows, page count).
        """
        rows = self.rows()
        pages = self.page_count(len(rows))
        self.page = min(self.page, pages - 1)
        start = self.page * self.page_size
        return rows[start : start + self.page_size], len(rows), pages

    def row_by_number(self, number: int) -> Optional[ModuleRow]:
        rows = self.rows()
        if 1 <= number <= len(rows):
            return rows[number - 1]
        return None


async def run_interactive(view: ExamModuleView) -> None:
    """
    Fetch once, then run the menu loop until the user exits.
    """
    _println("Loading...")
    await view.load()
    if view.error is not None:
        _println(f"[bold red]Error: {escape(view.error)}[/]")
        return

    session = TableSession(view)

    while True:
        _print_page(session)

        choice = (
            await _ask(
                "\n[1] Search group name\n"
                "[2] Reset search\n"
                "[3] Filter program\n"
                "[4] Filter survey\n"
                "[5] Filter exam\n"
                "[6] Toggle survey\n"
                "[7] Toggle exam\n"
                "[8] Sort by date\n"
                "[n] Next page  [p] Previous page\n"
                "[0] Exit\n"
                "Select: "
            )
        ).strip().lower()

        if choice == "0":
            if view.synchronizer.pending:
                _println("Waiting for pending writes...")
            await view.close()
            _println("Bye.")
            return

        if choice == "1":
            await _flow_search(view)
            session.page = 0
        elif choice == "2":
            view.search_reset()
            session.page = 0
        elif choice == "3":
            await _flow_program_filter(view)
            session.page = 0
        elif choice == "4":
            await _flow_survey_filter(view)
            session.page = 0
        elif choice == "5":
            await _flow_exam_filter(view)
            session.page = 0
        elif choice == "6":
            await _flow_toggle(session, SURVEY)
        elif choice == "7":
            await _flow_toggle(session, EXAM)
        elif choice == "8":
            await _flow_sort(session)
        elif choice == "n":
            session.page += 1
        elif choice == "p":
            session.page = max(0, session.page - 1)
        else:
            _println("Invalid choice.")


def _print_page(session: TableSession) -> None:
    view = session.view
    rows, total, pages = session.page_rows()

    f = view.filters
    bits = []
    if f.search_text:
        bits.append(f"search={f.search_text!r}")
    if f.programs:
        bits.append("program=" + ", ".join(sorted(f.programs)))
    if f.survey is not None:
        bits.append(f"survey={f.survey}")
    if f.exam:
        bits.append("exam=" + ", ".join(str(v) for v in sorted(f.exam)))

    _println("\n=== Exam modules ===")
    _println(escape(f"Filters: {' | '.join(bits) if bits else '(none)'}"))

    if not rows:
        _println("No data.")
        return

    title = f"Page {session.page + 1}/{pages} ({total} rows)"
    console.print(render_table(rows, view.columns(), title=title, offset=session.page * session.page_size))


async def _flow_search(view: ExamModuleView) -> None:
    text = (await _ask("Search by name [blank = back]: ")).strip()
    if not text:
        return
    view.search_confirm(text)


def _parse_bool(text: str) -> Optional[bool]:
    t = text.strip().lower()
    if t in ("t", "true", "y", "yes", "1"):
        return True
    if t in ("f", "false", "n", "no", "0"):
        return False
    return None


async def _flow_program_filter(view: ExamModuleView) -> None:
    options = view.filter_options("program_name")
    if not options:
        _println("No programs.")
        return

    for i, name in enumerate(options, start=1):
        mark = "x" if name in view.filters.programs else " "
        _println(escape(f"[{mark}] {i}) {name}"))

    pick = (await _ask("Numbers separated by commas [blank = clear]: ")).strip()
    if not pick:
        view.set_program_filter([])
        return

    names: list[str] = []
    for part in pick.split(","):
        part = part.strip()
        if not part.isdigit() or not (1 <= int(part) <= len(options)):
            _println(escape(f"Ignoring invalid choice: {part!r}"))
            continue
        names.append(options[int(part) - 1])
    view.set_program_filter(names)


async def _flow_survey_filter(view: ExamModuleView) -> None:
    pick = await _ask("Survey: [t]rue / [f]alse / blank = all: ")
    if not pick.strip():
        view.set_survey_filter(None)
        return
    value = _parse_bool(pick)
    if value is None:
        _println("Invalid choice.")
        return
    view.set_survey_filter(value)


async def _flow_exam_filter(view: ExamModuleView) -> None:
    pick = (await _ask("Exam: [t]rue / [f]alse / both (t,f) / blank = all: ")).strip()
    if not pick:
        view.set_exam_filter([])
        return

    values: set[bool] = set()
    for part in pick.split(","):
        value = _parse_bool(part)
        if value is None:
            _println(escape(f"Ignoring invalid choice: {part.strip()!r}"))
            continue
        values.add(value)
    view.set_exam_filter(values)


async def _flow_sort(session: TableSession) -> None:
    pick = (await _ask("Sort by [s]tart / [e]nd date, blank = none: ")).strip().lower()
    if not pick:
        session.sort_by = None
        return
    if pick.startswith("s"):
        session.sort_by = "start_date"
    elif pick.startswith("e"):
        session.sort_by = "end_date"
    else:
        _println("Invalid choice.")
        return
    order = (await _ask("Descending? [y/N]: ")).strip().lower()
    session.descending = order == "y"


async def _flow_toggle(session: TableSession, field: str) -> None:
    pick = (await _ask(f"Row number to toggle {field} [blank = back]: ")).strip()
    if not pick:
        return
    if not pick.isdigit():
        _println("Not a number.")
        return

    row = session.row_by_number(int(pick))
    if row is None:
        _println("Out of range.")
        return
    if not shows_control(row, field):
        _println(escape(f"No {field} checkbox for program {row.program_name!r}."))
        return

    session.view.toggle(row, field)
    state = "checked" if getattr(row, field) else "unchecked"
    _println(escape(f"{row.class_name} / {row.module_name}: {field} {state}"))
