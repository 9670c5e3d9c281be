"""Grid Engine job end-time resolution.

Combines the job metadata query (owner, hard runtime request) with the
running-task listing to project when each task will hit its h_rt limit.
"""

from __future__ import annotations

import sys
from typing import Callable, Dict, Iterable, List, Tuple

from .collectors.base import CollectorError, SchedulerQuery
from .data.models import JobMetadata, JobResult, JobStatus
from .data.parsing import (
    DEFAULT_RUNTIME_RESOURCE,
    ParseError,
    parse_job_metadata,
    parse_running_tasks,
    parse_user_jobs,
)


def _log(msg: str) -> None:
    print(f"[resolver] {msg}", file=sys.stderr, flush=True)


def unique(items: Iterable[str]) -> List[str]:
    """Drop repeated items, keeping the first occurrence."""
    seen = set()
    result = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def expand_job_ids(
    query: SchedulerQuery,
    job_ids: Iterable[str],
    user_ids: Iterable[str],
    debug: bool = False,
    log: Callable[[str], None] = _log,
) -> Tuple[List[str], Dict[str, str]]:
    """Merge direct job ids with the running jobs of each user.

    Returns:
        (job_ids, failures) where job_ids is deduplicated in first-seen
        order and failures maps a user id to the error that stopped its
        expansion. A user without running jobs adds nothing.
    """
    expanded = unique(str(j) for j in job_ids)
    known = set(expanded)
    failures: Dict[str, str] = {}

    for user in unique(user_ids):
        try:
            found = parse_user_jobs(query.user_jobs(user))
        except CollectorError as e:
            failures[user] = str(e)
            continue

        if debug:
            log(f"User {user}: running jobs {found}")
        for job_id in found:
            if job_id not in known:
                known.add(job_id)
                expanded.append(job_id)

    return expanded, failures


class JobResolver:
    """Resolve job ids into JobResults.

    Args:
        query: Scheduler query capability (GridEngineCollector in production).
        runtime_resource: Resource name of the hard runtime request.
        debug: Trace raw scheduler output and derived values.
        log: Message sink for warnings and traces.
    """

    def __init__(
        self,
        query: SchedulerQuery,
        runtime_resource: str = DEFAULT_RUNTIME_RESOURCE,
        debug: bool = False,
        log: Callable[[str], None] = _log,
    ):
        self.query = query
        self.runtime_resource = runtime_resource
        self.debug = debug
        self.log = log

    def resolve(self, job_id: str) -> JobResult:
        """Resolve one job id.

        Unknown ids come back INVALID without a second query. Query or
        parse failures come back FAILED with the message in ``error``.
        """
        job_id = str(job_id)
        try:
            metadata = self._metadata(job_id)
            if not metadata.valid:
                return JobResult(job_id=job_id, status=JobStatus.INVALID, metadata=metadata)

            output = self.query.running_tasks(metadata.owner, job_id)
            if self.debug:
                self.log(f"Running tasks output for {job_id}:\n{output}")
        except (CollectorError, ParseError) as e:
            return JobResult(job_id=job_id, status=JobStatus.FAILED, error=str(e))

        tasks = parse_running_tasks(job_id, output, on_warning=self.log)
        if metadata.max_runtime_seconds is None:
            self.log(f"Job {job_id} has no {self.runtime_resource} request; end time unknown")
        for task in tasks:
            task.apply_runtime(metadata.max_runtime_seconds)
            if self.debug:
                self.log(f"Job {job_id} task {task.task_id}: start {task.start_time} end {task.end_time}")

        return JobResult(job_id=job_id, status=JobStatus.RESOLVED, metadata=metadata, tasks=tasks)

    def resolve_all(self, job_ids: Iterable[str]) -> List[JobResult]:
        """Resolve job ids in order; one failure never stops the rest."""
        return [self.resolve(job_id) for job_id in job_ids]

    def _metadata(self, job_id: str) -> JobMetadata:
        xml = self.query.job_metadata(job_id)
        if self.debug:
            self.log(f"Metadata for {job_id}:\n{xml}")
        metadata = parse_job_metadata(
            job_id, xml, runtime_resource=self.runtime_resource, on_warning=self.log
        )
        if self.debug:
            self.log(f"Parsed metadata: {metadata}")
        return metadata
