"""
Payload flattening (nested JSON -> table rows).

- Turns the GetAllExamModule payload (classes, each with a module list)
  into one ModuleRow per class/module pair
- Filters rows by end date
- Collapses rows with the same display identity for rendering

Important rules (DO NOT CHANGE):
- 1 class/module pair = 1 row, payload order preserved
- Deduplication is display-only and never feeds the write path
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from exammodules.model import ModuleRow


_FRACTION = re.compile(r"(?<=:\d\d)\.(\d+)")


class PayloadError(ValueError):
    """
    Raised when the remote payload does not have the expected shape.
    """


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO date or date-time string into a naive datetime.

    Offset-aware values are converted to UTC first.
    Returns None for missing or malformed values.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    # fromisoformat only understands a trailing 'Z' on newer interpreters
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # older fromisoformat wants exactly 3 or 6 fraction digits (.NET sends 7)
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def format_date(value: Any) -> str:
    """
    Render a timestamp string as a local date (DD.MM.YYYY).
    """
    dt = parse_timestamp(value)
    if dt is None:
        return "Invalid Date"
    return dt.strftime("%d.%m.%Y")


# ---------------------------------------------------------------------------
# Flattening
# ---------------------------------------------------------------------------


def _flag(value: Any) -> bool:
    # null / missing upstream means "not enabled"
    return bool(value) if value is not None else False


def flatten_modules(payload: Any) -> list[ModuleRow]:
    """
    Convert the class -> modules payload into a flat row list.

    Raises PayloadError if the payload or one of its classes is malformed.
    """
    if not isinstance(payload, list):
        raise PayloadError("Expected a list of classes")

    rows: list[ModuleRow] = []
    for class_data in payload:
        if not isinstance(class_data, dict):
            raise PayloadError(f"Expected a class object, got {type(class_data).__name__}")

        modules = class_data.get("modules")
        if not isinstance(modules, list):
            raise PayloadError(f"Class {class_data.get('classId')!r} has no modules list")

        for module in modules:
            if not isinstance(module, dict):
                raise PayloadError(f"Class {class_data.get('classId')!r} has an invalid module entry")
            rows.append(
                ModuleRow(
                    class_id=class_data.get("classId"),
                    module_id=module.get("moduleId"),
                    class_name=str(class_data.get("className") or ""),
                    program_name=str(class_data.get("programName") or ""),
                    # upstream field is spelled "modulName"
                    module_name=str(module.get("modulName") or ""),
                    start_date=module.get("startDate"),
                    end_date=module.get("endDate"),
                    survey=_flag(module.get("isSurvey")),
                    exam=_flag(module.get("isExam")),
                )
            )
    return rows


def filter_by_end_date(rows: Iterable[ModuleRow], cutoff: datetime) -> list[ModuleRow]:
    """
    Keep rows whose end date is strictly after the cutoff.
    Rows with a missing or unparseable end date are dropped.
    """
    out: list[ModuleRow] = []
    for row in rows:
        end = parse_timestamp(row.end_date)
        if end is not None and end > cutoff:
            out.append(row)
    return out


def unique_by_display_identity(rows: Iterable[ModuleRow]) -> list[ModuleRow]:
    """
    Keep the first row per (class_name, program_name, module_name).
    """
    seen: set[tuple[str, str, str]] = set()
    out: list[ModuleRow] = []
    for row in rows:
        key = row.display_identity
        if key in seen:
            continue
        seen.add(key)
        out.append(row)
    return out


def program_names(rows: Iterable[ModuleRow]) -> list[str]:
    """
    Distinct program names in first-seen order.
    """
    return list(dict.fromkeys(row.program_name for row in rows))
