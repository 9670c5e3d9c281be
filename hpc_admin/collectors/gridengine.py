"""Grid Engine collector.

Runs `qstat` to fetch job metadata, running tasks and per-user job lists.
The output is returned untouched; see hpc_admin.data.parsing.
"""

from __future__ import annotations

import subprocess
import time
from typing import List

from .base import BaseCollector, CollectorError, SchedulerQuery


class GridEngineCollector(BaseCollector, SchedulerQuery):
    """Collector for a Grid Engine cluster.

    Uses `qstat -j` for job metadata and `qstat -u ... -s r` for the
    running task and job listings. The SGE_* environment variables are
    expected to be loaded in the caller's environment already.
    """

    def __init__(
        self,
        qstat: str = "qstat",
        timeout: int = 30,
        max_retries: int = 2,
        retry_delay: float = 2,
        debug: bool = False,
    ):
        self.qstat = qstat
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.debug = debug

    @property
    def name(self) -> str:
        return "gridengine"

    def job_metadata(self, job_id: str) -> str:
        """Run `qstat -j JOB_ID -xml`.

        An unknown job still produces an XML document (``unknown_jobs``),
        but qstat exits non-zero for it, so a failing exit status is only
        treated as an error when nothing was printed.
        """
        output = self._run([self.qstat, "-j", str(job_id), "-xml"], allow_failure=True)
        if not output.strip():
            raise CollectorError(self.name, f"Empty metadata output for job {job_id}")
        return output

    def running_tasks(self, owner: str, job_id: str) -> str:
        """Run `qstat -u OWNER -s r`; filtering by job id is left to the parser."""
        return self._run([self.qstat, "-u", owner, "-s", "r"])

    def user_jobs(self, user: str) -> str:
        """Run `qstat -u USER -s r -xml`."""
        return self._run([self.qstat, "-u", user, "-s", "r", "-xml"])

    def _run(self, cmd: List[str], allow_failure: bool = False) -> str:
        """Run a qstat command, retrying transient failures."""
        attempt = 0
        while True:
            attempt += 1
            try:
                return self._run_once(cmd, allow_failure)
            except CollectorError as e:
                if not e.retryable or attempt > self.max_retries:
                    raise
                self.log(f"{e}; retrying ({attempt}/{self.max_retries}) in {self.retry_delay}s")
                time.sleep(self.retry_delay)

    def _run_once(self, cmd: List[str], allow_failure: bool) -> str:
        self.trace(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CollectorError(
                self.name, f"Timeout after {self.timeout}s running {cmd[0]}", e, retryable=True
            )
        except FileNotFoundError as e:
            raise CollectorError(self.name, f"Command not found: {cmd[0]}", e)
        except OSError as e:
            raise CollectorError(self.name, f"Error running {cmd[0]}: {e}", e)

        output = result.stdout or ""
        if result.returncode != 0 and not (allow_failure and output.strip()):
            detail = (result.stderr or "").strip() or f"exit status {result.returncode}"
            raise CollectorError(self.name, f"{' '.join(cmd)} failed: {detail}")

        self.trace(f"Received {len(output)} bytes from {' '.join(cmd[1:])}")
        return output
