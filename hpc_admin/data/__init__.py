"""Data layer - models, qstat parsers and report formatting."""

from .models import JobMetadata, JobResult, JobStatus, TaskRecord
from .parsing import (
    MalformedTaskLine,
    ParseError,
    parse_job_metadata,
    parse_running_tasks,
    parse_task_line,
    parse_user_jobs,
)
from .formatting import render_delimited, render_json, render_table, seconds_to_units

__all__ = [
    "JobMetadata",
    "JobResult",
    "JobStatus",
    "TaskRecord",
    "MalformedTaskLine",
    "ParseError",
    "parse_job_metadata",
    "parse_running_tasks",
    "parse_task_line",
    "parse_user_jobs",
    "render_delimited",
    "render_json",
    "render_table",
    "seconds_to_units",
]
