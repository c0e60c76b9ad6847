"""
Shadi Recommendations - Activity Tracker Tests

Tests for the per-user activity window and anomaly detection.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.models.audit import AuditAction
from app.services.activity_tracker import ActivityContext, ActivityTracker


NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _suspicious(audit_store, reason):
    return [
        e for e in audit_store.entries
        if e.action == AuditAction.SECURITY_SUSPICIOUS and e.metadata["reason"] == reason
    ]


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def tracker(audit_logger, clock) -> ActivityTracker:
    return ActivityTracker(audit_logger, clock=clock)


async def _track(tracker, user_id, action, count, at=NOW):
    for _ in range(count):
        await tracker.track_activity(ActivityContext(user_id=user_id, action=action, timestamp=at))


class TestActivityWindow:
    """Test the bounded per-user history."""

    @pytest.mark.asyncio
    async def test_history_is_capped(self, audit_logger, clock):
        tracker = ActivityTracker(audit_logger, capacity=3, clock=clock)

        for i in range(5):
            await tracker.track_activity(
                ActivityContext(user_id="u1", action=f"a{i}", timestamp=NOW)
            )

        assert [a.action for a in tracker.get_activity("u1")] == ["a2", "a3", "a4"]

    @pytest.mark.asyncio
    async def test_users_are_tracked_separately(self, tracker):
        await _track(tracker, "u1", "view", 2)
        await _track(tracker, "u2", "view", 1)

        assert len(tracker.get_activity("u1")) == 2
        assert len(tracker.get_activity("u2")) == 1
        assert tracker.get_activity("unknown") == []

    @pytest.mark.asyncio
    async def test_reset(self, tracker):
        await _track(tracker, "u1", "view", 2)
        tracker.reset()
        assert tracker.get_activity("u1") == []

    def test_window_label(self, tracker):
        assert tracker.window_label == "5 minutes"

    @pytest.mark.asyncio
    async def test_naive_timestamp_is_treated_as_utc(self, tracker):
        naive = datetime(2026, 10, 1, 11, 58)
        context = ActivityContext(user_id="u1", action="view", timestamp=naive)

        assert context.timestamp == naive.replace(tzinfo=timezone.utc)

        await tracker.track_activity(context)
        assert len(tracker.get_activity("u1")) == 1


class TestRapidRequests:
    """More than 50 actions in 5 minutes is suspicious."""

    @pytest.mark.asyncio
    async def test_fifty_actions_are_fine(self, tracker, audit_logger, audit_store):
        await _track(tracker, "u1", "view", 50)
        await audit_logger.flush()

        assert _suspicious(audit_store, "Rapid request rate") == []

    @pytest.mark.asyncio
    async def test_fifty_first_action_is_flagged(self, tracker, audit_store):
        await _track(tracker, "u1", "view", 51)

        # Critical severity, written without waiting for a flush
        events = _suspicious(audit_store, "Rapid request rate")
        assert len(events) == 1
        assert events[0].user_id == "u1"
        assert events[0].metadata["requestCount"] == 51
        assert events[0].metadata["timeWindow"] == "5 minutes"
        assert events[0].success is False

    @pytest.mark.asyncio
    async def test_every_call_above_threshold_emits(self, tracker, audit_store):
        await _track(tracker, "u1", "view", 53)
        assert len(_suspicious(audit_store, "Rapid request rate")) == 3

    @pytest.mark.asyncio
    async def test_old_actions_fall_out_of_window(self, tracker, clock, audit_store):
        await _track(tracker, "u1", "view", 40, at=NOW - timedelta(minutes=10))
        await _track(tracker, "u1", "view", 20)

        assert _suspicious(audit_store, "Rapid request rate") == []

    @pytest.mark.asyncio
    async def test_capacity_bounds_the_count(self, audit_logger, clock, audit_store):
        tracker = ActivityTracker(audit_logger, capacity=10, rapid_request_threshold=50, clock=clock)
        await _track(tracker, "u1", "view", 100)

        assert _suspicious(audit_store, "Rapid request rate") == []


class TestFailedAttempts:
    """More than 5 failed actions in 5 minutes is suspicious."""

    @pytest.mark.asyncio
    async def test_five_failures_are_fine(self, tracker, audit_logger, audit_store):
        await _track(tracker, "u1", "auth_failed_login", 5)
        await audit_logger.flush()

        assert _suspicious(audit_store, "Multiple failed attempts") == []

    @pytest.mark.asyncio
    async def test_sixth_failure_is_flagged(self, tracker, audit_store):
        await _track(tracker, "u1", "auth_failed_login", 6)

        events = _suspicious(audit_store, "Multiple failed attempts")
        assert len(events) == 1
        assert events[0].metadata["failedCount"] == 6
        assert events[0].user_id == "u1"

    @pytest.mark.asyncio
    async def test_failure_is_matched_anywhere_in_action(self, tracker, audit_store):
        await _track(tracker, "u1", "review_update_failed", 6)
        assert len(_suspicious(audit_store, "Multiple failed attempts")) == 1

    @pytest.mark.asyncio
    async def test_successes_do_not_count(self, tracker, audit_store):
        await _track(tracker, "u1", "auth_failed_login", 3)
        await _track(tracker, "u1", "auth_login", 10)
        await _track(tracker, "u1", "auth_failed_login", 2)

        assert _suspicious(audit_store, "Multiple failed attempts") == []
