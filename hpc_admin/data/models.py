"""Data models for Grid Engine job end-time reporting.

Units:
- Time spans are whole seconds (integers).
- Points in time are naive datetimes in the scheduler host's local time,
  the same clock qstat prints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional


END_TIME_FORMAT = "%Y/%m/%d %H:%M:%S"


class JobStatus(str, Enum):
    """Outcome of resolving one job identifier."""

    RESOLVED = "RESOLVED"  # Metadata found; tasks may still be empty
    INVALID = "INVALID"  # Scheduler reports the id as unknown
    FAILED = "FAILED"  # A scheduler query failed for this id


@dataclass
class JobMetadata:
    """Job-level information from `qstat -j`.

    An invalid job carries only its id.
    """

    job_id: str
    owner: Optional[str] = None
    max_runtime_seconds: Optional[int] = None  # Unit: seconds, None = no h_rt
    valid: bool = True

    @classmethod
    def unknown(cls, job_id: str) -> "JobMetadata":
        return cls(job_id=job_id, valid=False)


@dataclass
class TaskRecord:
    """One running task line from `qstat -u OWNER -s r`."""

    job_id: str
    task_id: int  # 0 for non-array jobs
    start_time: datetime
    queue: str
    slots: str
    priority: str = ""
    name: str = ""
    user: str = ""
    state: str = ""
    end_time: Optional[datetime] = None

    def apply_runtime(self, max_runtime_seconds: Optional[int]) -> None:
        """Set end_time from the job's hard runtime request."""
        if max_runtime_seconds is None:
            self.end_time = None
        else:
            self.end_time = self.start_time + timedelta(seconds=max_runtime_seconds)

    @property
    def end_time_display(self) -> str:
        if self.end_time is None:
            return "N/A"
        return self.end_time.strftime(END_TIME_FORMAT)


@dataclass
class JobResult:
    """Resolved job: metadata plus its running tasks."""

    job_id: str
    status: JobStatus
    metadata: Optional[JobMetadata] = None
    tasks: List[TaskRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def valid(self) -> bool:
        return self.status == JobStatus.RESOLVED

    @property
    def owner(self) -> Optional[str]:
        return self.metadata.owner if self.metadata else None

    @property
    def max_runtime_seconds(self) -> Optional[int]:
        return self.metadata.max_runtime_seconds if self.metadata else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "owner": self.owner,
            "max_runtime_seconds": self.max_runtime_seconds,
            "error": self.error,
            "tasks": [
                {
                    "task_id": t.task_id,
                    "queue": t.queue,
                    "slots": t.slots,
                    "start_time": t.start_time.isoformat(),
                    "end_time": t.end_time.isoformat() if t.end_time else None,
                }
                for t in self.tasks
            ],
        }
