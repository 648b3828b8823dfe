"""Per-user outcomes and run-level aggregation for bulk logout."""

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class LogoutMode(str, Enum):
    """Severity of a logout run."""

    SOFT = "soft"
    HARD = "hard"


class OutcomeStatus(str, Enum):
    """Final status of one user's logout."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class UserOutcome:
    """Result of processing a single user."""

    user_id: str
    status: OutcomeStatus
    email: Optional[str] = None
    error_message: Optional[str] = None
    account_left_disabled: bool = False
    quota_exceeded: bool = False
    processing_time: float = 0.0

    @classmethod
    def success(cls, user_id: str, email: Optional[str] = None, processing_time: float = 0.0):
        return cls(user_id, OutcomeStatus.SUCCESS, email=email, processing_time=processing_time)

    @classmethod
    def failed(
        cls,
        user_id: str,
        error_message: str,
        email: Optional[str] = None,
        account_left_disabled: bool = False,
        quota_exceeded: bool = False,
        processing_time: float = 0.0,
    ):
        return cls(
            user_id,
            OutcomeStatus.FAILED,
            email=email,
            error_message=error_message,
            account_left_disabled=account_left_disabled,
            quota_exceeded=quota_exceeded,
            processing_time=processing_time,
        )

    @classmethod
    def skipped(cls, user_id: str, email: Optional[str] = None):
        return cls(user_id, OutcomeStatus.SKIPPED, email=email)


@dataclass(frozen=True)
class ErrorEntry:
    """A failed user, kept in the report for follow-up."""

    uid: str
    email: Optional[str]
    error: str
    account_left_disabled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "error": self.error,
            "account_left_disabled": self.account_left_disabled,
        }


@dataclass
class RunReport:
    """Final report of a bulk logout run."""

    success_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    errors: List[ErrorEntry] = field(default_factory=list)
    mode: LogoutMode = LogoutMode.SOFT
    concurrency: int = 0
    pages_fetched: int = 0
    duration: float = 0.0
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @property
    def total_processed(self) -> int:
        """Every user seen, including skipped ones."""
        return self.success_count + self.failed_count + self.skipped_count

    @property
    def accounts_left_disabled(self) -> List[ErrorEntry]:
        """Failures where the account is still disabled and needs remediation."""
        return [entry for entry in self.errors if entry.account_left_disabled]

    @property
    def success_rate(self) -> float:
        """Success rate over non-skipped users, as a percentage."""
        attempted = self.success_count + self.failed_count
        if attempted == 0:
            return 0.0
        return (self.success_count / attempted) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON structure returned by the HTTP endpoint."""
        return {
            "success": self.success_count,
            "failed": self.failed_count,
            "skipped": self.skipped_count,
            "total": self.total_processed,
            "errors": [entry.to_dict() for entry in self.errors],
            "left_disabled": len(self.accounts_left_disabled),
            "mode": self.mode.value,
            "duration": round(self.duration, 3),
        }


class RunAggregator:
    """Collects outcomes from concurrently running workers into a RunReport.

    ``record`` may be called from any worker; counters and the error list are
    updated under a lock.
    """

    def __init__(self, mode: LogoutMode = LogoutMode.SOFT, concurrency: int = 0):
        self._lock = threading.Lock()
        self._report = RunReport(mode=mode, concurrency=concurrency, start_time=time.time())
        self._finalized = False
        # Progress is logged every N successful logouts.
        self.log_interval = 10 if mode == LogoutMode.HARD else 100

    @property
    def total_processed(self) -> int:
        with self._lock:
            return self._report.total_processed

    def record_page(self) -> None:
        """Count one fetched page of users."""
        with self._lock:
            self._report.pages_fetched += 1

    def record(self, outcome: UserOutcome) -> None:
        """Add one user's outcome to the run totals.

        Raises:
            RuntimeError: If the report was already finalized
        """
        with self._lock:
            if self._finalized:
                raise RuntimeError("Cannot record outcomes after the report is finalized")

            report = self._report
            if outcome.status == OutcomeStatus.SUCCESS:
                report.success_count += 1
                log_progress = report.success_count % self.log_interval == 0
                success_count = report.success_count
            elif outcome.status == OutcomeStatus.FAILED:
                report.failed_count += 1
                report.errors.append(
                    ErrorEntry(
                        uid=outcome.user_id,
                        email=outcome.email,
                        error=outcome.error_message or "Unknown error",
                        account_left_disabled=outcome.account_left_disabled,
                    )
                )
                log_progress = False
            elif outcome.status == OutcomeStatus.SKIPPED:
                report.skipped_count += 1
                log_progress = False
            else:
                raise ValueError(f"Invalid status: {outcome.status}")

        if log_progress:
            logger.info("Progress: %d users logged out...", success_count)

    def finalize(self) -> RunReport:
        """Freeze the report and return it."""
        with self._lock:
            if not self._finalized:
                self._finalized = True
                self._report.end_time = time.time()
                self._report.duration = self._report.end_time - self._report.start_time
            return self._report
