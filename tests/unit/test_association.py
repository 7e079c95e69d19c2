"""Tests for the temporal and author association model."""

from datetime import timedelta

from beadlink.correlation.association import AssociationModel, TemporalWindow
from beadlink.correlation.file_index import build_file_index
from beadlink.models import CorrelatedCommit, HistoryReport, IssueHistory


def test_temporal_window_closed(now):
    window = TemporalWindow("bv-1", start=now - timedelta(hours=72), end=now - timedelta(hours=24))

    assert window.contains(now - timedelta(hours=48))
    assert window.contains(now - timedelta(hours=72))
    assert window.contains(now - timedelta(hours=24))
    assert not window.contains(now - timedelta(hours=100))
    assert not window.contains(now)
    assert not window.is_open


def test_temporal_window_open_extends_to_now(now):
    window = TemporalWindow("bv-1", start=now - timedelta(days=400))

    assert window.is_open
    assert window.contains(now)
    assert window.contains(now - timedelta(days=399))
    assert not window.contains(now - timedelta(days=401))
    assert window.describe().endswith(".. now")


def test_build_from_none():
    model = AssociationModel.build(None)

    assert model.windows == {}
    assert model.author_beads == {}
    assert model.bead_files == {}


def test_windows_only_for_claimed_issues(sample_report, now):
    sample_report.histories["bv-3"] = IssueHistory(title="Never claimed")

    model = AssociationModel.build(sample_report)

    assert set(model.windows) == {"bv-1", "bv-2"}
    assert model.windows["bv-1"].end is None
    assert model.windows["bv-2"].start == now - timedelta(hours=3)
    assert model.windows["bv-2"].end == now - timedelta(hours=1)


def test_author_beads(sample_report):
    model = AssociationModel.build(sample_report)

    assert model.author_beads == {
        "alice@example.com": {"bv-1"},
        "bob@example.com": {"bv-2"},
    }


def test_author_lookup_is_case_insensitive(sample_report):
    model = AssociationModel.build(sample_report)
    assert model.beads_for_author("Alice@Example.COM") == {"bv-1"}
    assert model.beads_for_author("nobody@example.com") == set()


def test_blank_author_email_ignored(now):
    report = HistoryReport(
        histories={"bv-1": IssueHistory(commits=[CorrelatedCommit(sha="e" * 40, timestamp=now)])}
    )
    assert AssociationModel.build(report).author_beads == {}


def test_bead_files_from_index(sample_report):
    model = AssociationModel.build(sample_report, build_file_index(sample_report))

    assert model.bead_files["bv-1"] == {"src/auth.py", "src/util.py"}
    assert model.bead_files["bv-2"] == {"src/auth.py", "docs/login.md"}


def test_orphan_fixture_windows_and_authors(orphan_fixture_report):
    model = AssociationModel.build(orphan_fixture_report)
    history = orphan_fixture_report.histories["bv-test1"]

    window = model.windows["bv-test1"]
    assert window.start == history.milestones.claimed.timestamp
    assert window.end == history.milestones.closed.timestamp
    assert model.author_beads["test@example.com"] == {"bv-test1"}
