"""Bulk logout engine.

Components:
    WorkerPool: Bounded-concurrency asyncio job runner
    RetryHandler: Exponential backoff retry for provider calls
    SessionTerminator: Soft and hard logout sequence for one user
    BatchLogoutProcessor: Pagination driver feeding the worker pool
    RunAggregator / RunReport: Outcome accumulation and final report
    ReportGenerator: Rich rendering and error persistence
"""

from .batch import BatchLogoutProcessor, BatchOptions, run_batch_logout
from .pool import WorkerPool
from .reporting import ReportGenerator
from .results import (
    ErrorEntry,
    LogoutMode,
    OutcomeStatus,
    RunAggregator,
    RunReport,
    UserOutcome,
)
from .retry import RetryHandler
from .terminator import SessionTerminator

__all__ = [
    "BatchLogoutProcessor",
    "BatchOptions",
    "ErrorEntry",
    "LogoutMode",
    "OutcomeStatus",
    "ReportGenerator",
    "RetryHandler",
    "RunAggregator",
    "RunReport",
    "SessionTerminator",
    "UserOutcome",
    "WorkerPool",
    "run_batch_logout",
]
