"""Output helpers for the job end-time report."""

from __future__ import annotations

import csv
import io
import json
from typing import Iterable, List, Optional, Tuple

from .models import JobResult


TABLE_HEADER = "JobID         TaskID   Owner           Max End Time           Requested Run Time"
TABLE_RULE = "============  =======  ==============  =====================  =============================="
ROW_FORMAT = "%-13s %-8s %-15s %-22s %s"

DELIMITED_FIELDS = ["job_id", "task_id", "owner", "max_end_time", "requested_run_time"]

NO_LIMIT = "No limit"


def decompose_seconds(seconds: int) -> Tuple[int, int, int, int]:
    """Split seconds into (days, hours, minutes, seconds), largest unit first."""
    if seconds < 0:
        raise ValueError(f"seconds must be non-negative, got {seconds}")
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    return days, hours, minutes, secs


def seconds_to_units(seconds: int) -> str:
    """Render seconds as e.g. '1 Days 2 Hours 3 Mins 4 Secs'."""
    return "%d Days %d Hours %d Mins %d Secs" % decompose_seconds(seconds)


def requested_runtime_display(max_runtime_seconds: Optional[int]) -> str:
    if max_runtime_seconds is None:
        return NO_LIMIT
    return seconds_to_units(max_runtime_seconds)


def invalid_notice(job_id: str) -> str:
    return f"{job_id} is either invalid or not running"


def _rows(results: Iterable[JobResult]) -> List[List[str]]:
    rows = []
    for result in results:
        if not result.valid:
            continue
        runtime = requested_runtime_display(result.max_runtime_seconds)
        for task in result.tasks:
            rows.append([result.job_id, str(task.task_id), result.owner or "", task.end_time_display, runtime])
    return rows


def render_table(results: List[JobResult]) -> List[str]:
    """Render results as fixed-width report lines.

    Invalid job ids become a one-line notice. Failed lookups are left to the
    caller, which reports them on stderr.
    """
    lines = [TABLE_HEADER, TABLE_RULE]
    for result in results:
        if result.valid:
            lines.extend(ROW_FORMAT % tuple(row) for row in _rows([result]))
        elif result.error is None:
            lines.append(invalid_notice(result.job_id))
    return lines


def render_delimited(results: List[JobResult], sep: str) -> str:
    """Render valid task rows as CSV (sep=',') or tab separated text."""
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=sep, lineterminator="\n")
    writer.writerow(DELIMITED_FIELDS)
    writer.writerows(_rows(results))
    return buf.getvalue()


def render_json(results: List[JobResult]) -> str:
    return json.dumps([r.to_dict() for r in results], indent=2)
