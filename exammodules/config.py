"""
Runtime configuration.

Defaults live here as module-level constants. Each one can be overridden
by an environment variable or by an explicit argument (CLI flag):

    explicit argument  >  environment variable  >  default
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from exammodules.flatten import parse_timestamp


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

API_BASE_URL = "https://dev-studioapi.code.az/api"

# Modules ending on or before this moment are hidden from the table
END_DATE_CUTOFF = datetime(2024, 10, 1)

# None = wait for the server indefinitely
REQUEST_TIMEOUT: Optional[float] = None

PAGE_SIZE = 10

ENV_API_URL = "EXAMMODULES_API_URL"
ENV_CUTOFF = "EXAMMODULES_CUTOFF"
ENV_TIMEOUT = "EXAMMODULES_TIMEOUT"


@dataclass(frozen=True)
class Settings:
    base_url: str
    cutoff: datetime
    timeout: Optional[float]
    page_size: int = PAGE_SIZE


def parse_cutoff(value: str) -> datetime:
    """
    Parse an ISO date ('2024-10-01') or date-time into a naive datetime.
    Offset-aware values are converted to UTC.
    Raises ValueError for anything else.
    """
    dt = parse_timestamp(value)
    if dt is None:
        raise ValueError(f"Invalid cutoff date: {value!r}")
    return dt


def parse_timeout(value: str) -> Optional[float]:
    """
    Parse a timeout in seconds. '', 'none' and '0' mean no timeout.
    """
    text = value.strip().lower()
    if text in ("", "none", "0"):
        return None
    seconds = float(text)
    if seconds < 0:
        raise ValueError(f"Invalid timeout: {value!r}")
    return seconds


def load_settings(
    base_url: Optional[str] = None,
    cutoff: Optional[str] = None,
    timeout: Optional[str] = None,
) -> Settings:
    """
    Resolve settings from explicit values, the environment and the defaults.
    """
    url = base_url or os.environ.get(ENV_API_URL) or API_BASE_URL

    cutoff_raw = cutoff if cutoff is not None else os.environ.get(ENV_CUTOFF)
    cutoff_dt = parse_cutoff(cutoff_raw) if cutoff_raw is not None else END_DATE_CUTOFF

    timeout_raw = timeout if timeout is not None else os.environ.get(ENV_TIMEOUT)
    timeout_s = parse_timeout(timeout_raw) if timeout_raw is not None else REQUEST_TIMEOUT

    return Settings(base_url=url.rstrip("/"), cutoff=cutoff_dt, timeout=timeout_s)
