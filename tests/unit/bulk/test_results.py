"""Tests for user outcomes, run reports and the thread-safe aggregator."""

import logging
import threading

import pytest

from src.forcelogout.bulk.results import (
    ErrorEntry,
    LogoutMode,
    OutcomeStatus,
    RunAggregator,
    RunReport,
    UserOutcome,
)


class TestUserOutcome:
    """Test cases for UserOutcome constructors."""

    def test_success(self):
        outcome = UserOutcome.success("u1", email="u1@example.com", processing_time=0.2)

        assert outcome.status == OutcomeStatus.SUCCESS
        assert outcome.error_message is None
        assert outcome.processing_time == 0.2

    def test_failed(self):
        outcome = UserOutcome.failed("u1", "boom", account_left_disabled=True)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.error_message == "boom"
        assert outcome.account_left_disabled is True

    def test_skipped(self):
        outcome = UserOutcome.skipped("u1")

        assert outcome.status == OutcomeStatus.SKIPPED


class TestRunReport:
    """Test cases for RunReport."""

    def test_total_includes_skipped(self):
        report = RunReport(success_count=5, failed_count=2, skipped_count=3)

        assert report.total_processed == 10

    def test_success_rate_ignores_skipped(self):
        report = RunReport(success_count=3, failed_count=1, skipped_count=10)

        assert report.success_rate == 75.0

    def test_success_rate_with_nothing_attempted(self):
        assert RunReport(skipped_count=4).success_rate == 0.0

    def test_accounts_left_disabled(self):
        report = RunReport(
            failed_count=2,
            errors=[
                ErrorEntry("a", None, "quota"),
                ErrorEntry("b", "b@example.com", "left disabled", account_left_disabled=True),
            ],
        )

        assert [entry.uid for entry in report.accounts_left_disabled] == ["b"]

    def test_to_dict(self):
        report = RunReport(
            success_count=1,
            failed_count=1,
            skipped_count=1,
            errors=[ErrorEntry("b", "b@example.com", "boom")],
            mode=LogoutMode.HARD,
            duration=1.23456,
        )

        assert report.to_dict() == {
            "success": 1,
            "failed": 1,
            "skipped": 1,
            "total": 3,
            "errors": [
                {
                    "uid": "b",
                    "email": "b@example.com",
                    "error": "boom",
                    "account_left_disabled": False,
                }
            ],
            "left_disabled": 0,
            "mode": "hard",
            "duration": 1.235,
        }


class TestRunAggregator:
    """Test cases for RunAggregator."""

    def test_records_each_status(self):
        aggregator = RunAggregator()

        aggregator.record(UserOutcome.success("a"))
        aggregator.record(UserOutcome.failed("b", "boom", email="b@example.com"))
        aggregator.record(UserOutcome.skipped("c"))
        report = aggregator.finalize()

        assert (report.success_count, report.failed_count, report.skipped_count) == (1, 1, 1)
        assert report.errors == [ErrorEntry("b", "b@example.com", "boom")]

    def test_failed_without_message_gets_placeholder(self):
        aggregator = RunAggregator()

        aggregator.record(UserOutcome(user_id="a", status=OutcomeStatus.FAILED))

        assert aggregator.finalize().errors[0].error == "Unknown error"

    def test_record_after_finalize_raises(self):
        aggregator = RunAggregator()
        aggregator.finalize()

        with pytest.raises(RuntimeError):
            aggregator.record(UserOutcome.success("a"))

    def test_finalize_is_idempotent(self):
        aggregator = RunAggregator(LogoutMode.HARD, concurrency=5)
        aggregator.record_page()

        first = aggregator.finalize()
        second = aggregator.finalize()

        assert first is second
        assert first.mode == LogoutMode.HARD
        assert first.concurrency == 5
        assert first.pages_fetched == 1
        assert first.duration >= 0
        assert first.end_time is not None

    def test_concurrent_records_are_not_lost(self):
        aggregator = RunAggregator()
        per_thread = 500

        def worker(index):
            for i in range(per_thread):
                if i % 2:
                    aggregator.record(UserOutcome.success(f"{index}-{i}"))
                else:
                    aggregator.record(UserOutcome.failed(f"{index}-{i}", "boom"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        report = aggregator.finalize()
        assert report.total_processed == 8 * per_thread
        assert report.success_count == 4 * per_thread
        assert len(report.errors) == report.failed_count == 4 * per_thread

    def test_progress_logged_every_ten_hard_successes(self, caplog):
        aggregator = RunAggregator(LogoutMode.HARD)

        with caplog.at_level(logging.INFO, logger="src.forcelogout.bulk.results"):
            for i in range(25):
                aggregator.record(UserOutcome.success(f"u{i}"))

        progress = [r.getMessage() for r in caplog.records if "Progress" in r.getMessage()]
        assert progress == [
            "Progress: 10 users logged out...",
            "Progress: 20 users logged out...",
        ]

    def test_soft_mode_logs_every_hundred(self):
        assert RunAggregator(LogoutMode.SOFT).log_interval == 100
