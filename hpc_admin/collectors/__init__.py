"""Data collectors - Grid Engine qstat and the Dell support site."""

from .base import BaseCollector, CollectorError, SchedulerQuery
from .dell import DellWarrantyCollector
from .gridengine import GridEngineCollector

__all__ = [
    "BaseCollector",
    "CollectorError",
    "SchedulerQuery",
    "DellWarrantyCollector",
    "GridEngineCollector",
]
