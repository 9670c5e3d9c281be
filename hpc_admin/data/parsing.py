"""Parsers for Grid Engine `qstat` output.

Three shapes are handled:

1. `qstat -j JOB -xml` → JobMetadata (owner, hard runtime request)
2. `qstat -u USER -s r` → TaskRecord list (whitespace-delimited lines)
3. `qstat -u USER -s r -xml` → job number list

The XML documents are read with BeautifulSoup's html.parser, which lowercases
tag names (``JB_owner`` is looked up as ``jb_owner``). ``find_all`` always
returns a list, so a job list holding one record and a job list holding many
come out the same way.
"""

from __future__ import annotations

import re
import warnings
from datetime import datetime
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from .models import JobMetadata, TaskRecord


DEFAULT_RUNTIME_RESOURCE = "h_rt"

START_TIME_FORMAT = "%m/%d/%Y %H:%M:%S"

# Columns of `qstat -s r`; ja-task-ID is only printed for array jobs.
RUNNING_TASK_FIELDS = (
    "job_id",
    "priority",
    "name",
    "user",
    "state",
    "start_date",
    "start_time",
    "queue",
    "slots",
    "task_id",
)
MIN_TASK_FIELDS = len(RUNNING_TASK_FIELDS) - 1

WarningHandler = Optional[Callable[[str], None]]


class ParseError(ValueError):
    """Raised when scheduler output lacks required elements."""


class MalformedTaskLine(ParseError):
    """A running-task line that does not match the column schema."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"{reason}: {line.strip()!r}")


def _warn(handler: WarningHandler, message: str) -> None:
    if handler is not None:
        handler(message)


def _soup(xml: str) -> BeautifulSoup:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        return BeautifulSoup(xml, "html.parser")


def _text(node) -> str:
    return node.get_text(strip=True) if node is not None else ""


# =============================================================================
# Job metadata (qstat -j JOB -xml)
# =============================================================================


def parse_job_metadata(
    job_id: str,
    xml: str,
    runtime_resource: str = DEFAULT_RUNTIME_RESOURCE,
    on_warning: WarningHandler = None,
) -> JobMetadata:
    """Parse `qstat -j JOB -xml` output.

    Args:
        job_id: The job identifier that was queried.
        xml: Raw XML text.
        runtime_resource: Resource name holding the hard runtime (h_rt).
        on_warning: Called with a message for recoverable oddities.

    Returns:
        JobMetadata, flagged invalid when the job is unknown. When the job
        requests no runtime limit, max_runtime_seconds is None.

    Raises:
        ParseError: If the document has neither an unknown_jobs marker nor
            a job owner.
    """
    soup = _soup(xml)
    if soup.find("unknown_jobs") is not None:
        return JobMetadata.unknown(job_id)

    job = soup.find("djob_info") or soup
    owner = _text(job.find("jb_owner"))
    if not owner:
        raise ParseError(f"No JB_owner in metadata for job {job_id}")

    max_runtime: Optional[int] = None
    hard_list = job.find("jb_hard_resource_list")
    if hard_list is not None:
        for request in hard_list.find_all("qstat_l_requests"):
            if _text(request.find("ce_name")) != runtime_resource:
                continue
            raw = _text(request.find("ce_stringval"))
            max_runtime = parse_runtime(raw, on_warning=on_warning, context=f"job {job_id}")

    return JobMetadata(job_id=job_id, owner=owner, max_runtime_seconds=max_runtime)


def parse_walltime(value: str) -> Optional[int]:
    """Parse HH:MM:SS or D:HH:MM:SS to seconds; None if any part is not a plain number."""
    parts = value.split(":")
    if not all(re.fullmatch(r"[0-9]+", p) for p in parts):
        return None
    parts = [int(p) for p in parts]
    if len(parts) == 3:
        h, m, s = parts
        return h * 3600 + m * 60 + s
    if len(parts) == 4:
        d, h, m, s = parts
        return d * 86400 + h * 3600 + m * 60 + s
    return None


def parse_runtime(value: str, on_warning: WarningHandler = None, context: str = "") -> int:
    """Convert a runtime request value to seconds.

    Plain integers and HH:MM:SS values convert exactly. Anything else is
    coerced to its leading digits, or 0 if there are none, and reported
    through on_warning.
    """
    text = (value or "").strip()
    if re.fullmatch(r"[0-9]+", text):
        return int(text)

    if ":" in text:
        seconds = parse_walltime(text)
        if seconds is not None:
            return seconds

    match = re.match(r"[0-9]+", text)
    coerced = int(match.group()) if match else 0
    where = f" for {context}" if context else ""
    _warn(on_warning, f"Malformed runtime value {text!r}{where}, using {coerced} seconds")
    return coerced


# =============================================================================
# Running tasks (qstat -u OWNER -s r)
# =============================================================================


def parse_task_line(line: str) -> TaskRecord:
    """Parse one line of `qstat -s r` output against RUNNING_TASK_FIELDS.

    A line with MIN_TASK_FIELDS columns belongs to a non-array job and gets
    task_id 0.

    Raises:
        MalformedTaskLine: On a wrong column count, a non-integer task id or
            an unparseable start date/time.
    """
    parts = line.split()
    if len(parts) not in (MIN_TASK_FIELDS, len(RUNNING_TASK_FIELDS)):
        raise MalformedTaskLine(
            line, f"Expected {MIN_TASK_FIELDS} or {len(RUNNING_TASK_FIELDS)} fields, got {len(parts)}"
        )

    fields = dict(zip(RUNNING_TASK_FIELDS, parts))
    try:
        task_id = int(fields.get("task_id", 0))
    except ValueError:
        raise MalformedTaskLine(line, f"Invalid task id {fields['task_id']!r}")

    # Date and time are separate columns but only parse as a pair.
    stamp = f"{fields['start_date']} {fields['start_time']}"
    try:
        start_time = datetime.strptime(stamp, START_TIME_FORMAT)
    except ValueError:
        raise MalformedTaskLine(line, f"Invalid start time {stamp!r}")

    return TaskRecord(
        job_id=fields["job_id"],
        task_id=task_id,
        start_time=start_time,
        queue=fields["queue"],
        slots=fields["slots"],
        priority=fields["priority"],
        name=fields["name"],
        user=fields["user"],
        state=fields["state"],
    )


def parse_running_tasks(job_id: str, output: str, on_warning: WarningHandler = None) -> List[TaskRecord]:
    """Parse the running tasks of one job from `qstat -u OWNER -s r`.

    Lines for other jobs, headers and separators are ignored. Malformed
    lines and repeated task ids are reported and skipped.
    """
    tasks: List[TaskRecord] = []
    seen = set()

    for line in output.splitlines():
        parts = line.split()
        if not parts or parts[0] != str(job_id):
            continue

        try:
            task = parse_task_line(line)
        except MalformedTaskLine as e:
            _warn(on_warning, f"Skipping line for job {job_id}: {e}")
            continue

        if task.task_id in seen:
            _warn(on_warning, f"Skipping duplicate task {task.task_id} for job {job_id}")
            continue
        seen.add(task.task_id)
        tasks.append(task)

    return tasks


# =============================================================================
# User job list (qstat -u USER -s r -xml)
# =============================================================================


def parse_user_jobs(xml: str) -> List[str]:
    """Return the job numbers in a user's job listing, in document order.

    Array jobs appear once per running task, so the result may contain
    repeats; callers deduplicate.
    """
    soup = _soup(xml)
    job_ids = []
    for job in soup.find_all("job_list"):
        number = _text(job.find("jb_job_number"))
        if number:
            job_ids.append(number)
    return job_ids
