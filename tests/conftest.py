"""Shared fixtures for correlation tests."""

from datetime import datetime, timedelta, timezone

import pytest
import structlog

from beadlink.models import (
    CorrelatedCommit,
    FileChange,
    HistoryReport,
    IssueEvent,
    IssueHistory,
    IssueMilestones,
)


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo CLI logging config so later tests don't log to a closed stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def now():
    """Fixed reference time."""
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_report(now):
    """Two issues sharing src/auth.py.

    bv-1 (open) touched src/auth.py twice and src/util.py once.
    bv-2 (closed) touched src/auth.py more recently, via a back-slashed path,
    and docs/login.md.
    """
    c1 = CorrelatedCommit(
        sha="c1" + "0" * 38,
        short_sha="c100000",
        author="Alice",
        author_email="alice@example.com",
        timestamp=now - timedelta(hours=10),
        message="bv-1: start token refresh",
        files=[
            FileChange(path="src/auth.py", insertions=5, deletions=1),
            FileChange(path="./src/util.py", insertions=2, deletions=0),
        ],
    )
    c2 = CorrelatedCommit(
        sha="c2" + "0" * 38,
        short_sha="c200000",
        author="Alice",
        author_email="alice@example.com",
        timestamp=now - timedelta(hours=5),
        message="bv-1: finish token refresh",
        files=[FileChange(path="src/auth.py", insertions=3, deletions=3)],
    )
    c3 = CorrelatedCommit(
        sha="c3" + "0" * 38,
        short_sha="c300000",
        author="Bob",
        author_email="bob@example.com",
        timestamp=now - timedelta(hours=2),
        message="bv-2: login page",
        files=[
            FileChange(path="src\\auth.py", insertions=1, deletions=0),
            FileChange(path="docs/login.md", insertions=10, deletions=0),
        ],
    )

    return HistoryReport(
        histories={
            "bv-1": IssueHistory(
                title="Auth token refresh",
                status="open",
                milestones=IssueMilestones(claimed=IssueEvent(timestamp=now - timedelta(hours=12))),
                commits=[c1, c2],
            ),
            "bv-2": IssueHistory(
                title="Login page",
                status="closed",
                milestones=IssueMilestones(
                    claimed=IssueEvent(timestamp=now - timedelta(hours=3)),
                    closed=IssueEvent(timestamp=now - timedelta(hours=1)),
                ),
                commits=[c3],
            ),
        },
        commit_index={
            c1.sha: ["bv-1"],
            c2.sha: ["bv-1"],
            c3.sha: ["bv-2"],
        },
    )


@pytest.fixture
def orphan_fixture_report():
    """One closed issue claimed 72h ago, closed 24h ago, one commit at 48h."""
    current = datetime.now(timezone.utc)
    return HistoryReport(
        histories={
            "bv-test1": IssueHistory(
                title="Refactor payment gateway",
                status="closed",
                last_author="Test Author",
                milestones=IssueMilestones(
                    claimed=IssueEvent(timestamp=current - timedelta(hours=72)),
                    closed=IssueEvent(timestamp=current - timedelta(hours=24)),
                ),
                commits=[
                    CorrelatedCommit(
                        sha="abc123def456",
                        short_sha="abc123d",
                        author="Test Author",
                        author_email="test@example.com",
                        timestamp=current - timedelta(hours=48),
                        message="bv-test1: move gateway client",
                        files=[
                            FileChange(path="pkg/payment/gateway.go", insertions=40, deletions=12),
                            FileChange(path="pkg/payment/client.go", insertions=8, deletions=2),
                        ],
                    )
                ],
            )
        },
        commit_index={"abc123def456": ["bv-test1"]},
    )
