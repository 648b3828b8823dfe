"""Pagination driver for bulk logout runs.

This module walks every page of the user pool and feeds each eligible user
into a bounded worker pool without waiting for earlier pages to finish.

Classes:
    BatchOptions: Tunables for one run
    BatchLogoutProcessor: Pages through users, submits work, builds the RunReport

Functions:
    run_batch_logout: Single entry point used by the CLI and HTTP surfaces
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Set

from ..exceptions import FatalPagingError
from ..identity.base import IdentityService, UserIdentity
from .pool import WorkerPool
from .results import LogoutMode, OutcomeStatus, RunAggregator, RunReport, UserOutcome
from .retry import RetryHandler
from .terminator import SessionTerminator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class BatchOptions:
    """Tunables for a bulk logout run."""

    page_size: int = 1000
    hard_concurrency: int = 5
    soft_concurrency: int = 10
    max_attempts: int = 3
    base_delay: float = 0.5
    soft_pacing_delay: float = 0.1

    def concurrency_for(self, mode: LogoutMode) -> int:
        # Disable/enable calls share a stricter provider quota than revokes.
        return self.hard_concurrency if mode == LogoutMode.HARD else self.soft_concurrency


class BatchLogoutProcessor:
    """Logs out every non-excluded user in the pool."""

    def __init__(
        self,
        identity: IdentityService,
        mode: LogoutMode = LogoutMode.SOFT,
        options: Optional[BatchOptions] = None,
        retry_handler: Optional[RetryHandler] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """Initialize batch logout processor.

        Args:
            identity: Identity provider adapter
            mode: Soft or hard logout
            options: Run tunables
            retry_handler: Retry policy override (built from options when omitted)
            progress_callback: Called with (completed, seen) after each outcome
        """
        self.identity = identity
        self.mode = mode
        self.options = options or BatchOptions()
        self.concurrency = self.options.concurrency_for(mode)
        self.retry_handler = retry_handler or RetryHandler(
            max_attempts=self.options.max_attempts, base_delay=self.options.base_delay
        )
        self.terminator = SessionTerminator(
            identity,
            mode,
            retry_handler=self.retry_handler,
            pacing_delay=self.options.soft_pacing_delay if mode == LogoutMode.SOFT else 0.0,
        )
        self.progress_callback = progress_callback

    async def run(self, excluded_ids: Iterable[str] = ()) -> RunReport:
        """Process every page of users and return the final report.

        Args:
            excluded_ids: User IDs that must not be logged out

        Returns:
            RunReport once every submitted user has an outcome

        Raises:
            FatalPagingError: If a page of users could not be listed
        """
        excluded = frozenset(excluded_ids)
        aggregator = RunAggregator(self.mode, concurrency=self.concurrency)
        pool = WorkerPool(self.concurrency)
        seen: Set[str] = set()

        logger.info(
            "Starting %s logout: %d excluded users, concurrency %d",
            self.mode.value,
            len(excluded),
            self.concurrency,
        )

        page_token: Optional[str] = None
        page_number = 0
        try:
            # The pool drains on every exit, errors included.
            async with pool:
                while True:
                    try:
                        page = await self.identity.list_users_page(
                            self.options.page_size, page_token
                        )
                    except Exception as e:
                        raise FatalPagingError(
                            f"Failed to list users (page {page_number + 1}): {e}",
                            page_number=page_number,
                        ) from e

                    aggregator.record_page()
                    page_number += 1
                    logger.info(
                        "Fetched page %d with %d users, queuing for processing",
                        page_number,
                        len(page.users),
                    )

                    for user in page.users:
                        if user.id in seen:
                            logger.debug(
                                "User %s already seen in an earlier page, ignoring", user.id
                            )
                            continue
                        seen.add(user.id)

                        if user.id in excluded:
                            logger.debug("Skipped user %s (excluded)", user.id)
                            self._record(aggregator, seen, UserOutcome.skipped(user.id, user.email))
                            continue

                        pool.submit(self._job(user, aggregator, seen))

                    # An empty page with a token is still a valid intermediate page.
                    page_token = page.next_page_token
                    if not page_token:
                        break

                logger.info("All %d users queued. Waiting for completion...", pool.submitted)
        except FatalPagingError as e:
            logger.error("Fatal error during logout run: %s", e)
            e.partial_report = aggregator.finalize()
            raise

        report = aggregator.finalize()
        logger.info(
            "Logout run complete: total=%d success=%d failed=%d skipped=%d",
            report.total_processed,
            report.success_count,
            report.failed_count,
            report.skipped_count,
        )
        if report.accounts_left_disabled:
            logger.error(
                "%d accounts were left disabled and need manual re-enabling",
                len(report.accounts_left_disabled),
            )
        return report

    def _job(self, user: UserIdentity, aggregator: RunAggregator, seen: Set[str]):
        async def process_user() -> UserOutcome:
            outcome = await self.terminator.terminate(user)
            if outcome.status == OutcomeStatus.FAILED:
                self._log_failure(outcome)
            self._record(aggregator, seen, outcome)
            return outcome

        return process_user

    def _record(self, aggregator: RunAggregator, seen: Set[str], outcome: UserOutcome) -> None:
        aggregator.record(outcome)
        if self.progress_callback:
            self.progress_callback(aggregator.total_processed, len(seen))

    @staticmethod
    def _log_failure(outcome: UserOutcome) -> None:
        message = outcome.error_message or ""
        if outcome.account_left_disabled:
            logger.error("User %s: %s", outcome.user_id, message)
        elif outcome.quota_exceeded:
            logger.warning("Quota exceeded for user %s - skipping", outcome.user_id)
        else:
            logger.error("Failed to logout user %s: %s", outcome.user_id, message)


async def run_batch_logout(
    identity: IdentityService,
    excluded_ids: Iterable[str] = (),
    hard_mode: bool = False,
    options: Optional[BatchOptions] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> RunReport:
    """Log out every user except ``excluded_ids``.

    Args:
        identity: Identity provider adapter
        excluded_ids: User IDs to leave alone
        hard_mode: Disable/revoke/re-enable instead of only revoking tokens
        options: Run tunables
        progress_callback: Called with (completed, seen) after each outcome

    Returns:
        RunReport for the run
    """
    mode = LogoutMode.HARD if hard_mode else LogoutMode.SOFT
    processor = BatchLogoutProcessor(
        identity, mode=mode, options=options, progress_callback=progress_callback
    )
    return await processor.run(excluded_ids)
