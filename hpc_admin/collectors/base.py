"""Base collector interfaces for external data sources."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Optional


class BaseCollector(ABC):
    """Abstract base class for data collectors.

    A collector wraps one external source (a scheduler CLI, a vendor web
    page) and turns failures of that source into CollectorError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this collector.

        Returns:
            A short, lowercase identifier (e.g., 'gridengine', 'dell')
        """
        pass

    def log(self, msg: str) -> None:
        """Write a prefixed message to stderr."""
        print(f"[{self.name}] {msg}", file=sys.stderr, flush=True)

    def trace(self, msg: str) -> None:
        """Write a prefixed message to stderr when debugging is enabled."""
        if self.debug:
            self.log(msg)


class SchedulerQuery(ABC):
    """Query capability the job resolver depends on.

    Every method returns the raw text the scheduler produced. Parsing lives
    in hpc_admin.data.parsing so canned output can stand in for a live
    scheduler.
    """

    @abstractmethod
    def job_metadata(self, job_id: str) -> str:
        """Return the XML metadata document for a job."""

    @abstractmethod
    def running_tasks(self, owner: str, job_id: str) -> str:
        """Return the plain-text listing of running tasks for a job."""

    @abstractmethod
    def user_jobs(self, user: str) -> str:
        """Return the XML listing of a user's running jobs."""


class CollectorError(Exception):
    """Exception raised when a collector fails to collect data.

    ``retryable`` is set for transient failures such as timeouts.
    """

    def __init__(
        self,
        collector_name: str,
        message: str,
        cause: Optional[Exception] = None,
        retryable: bool = False,
    ):
        self.collector_name = collector_name
        self.cause = cause
        self.retryable = retryable
        super().__init__(f"[{collector_name}] {message}")
