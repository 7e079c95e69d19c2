"""Unit tests for Git extraction module."""

import tempfile
from pathlib import Path

import git
import pytest

from beadlink.correlation.orphan import OrphanDetector
from beadlink.extraction import GitExtractor
from beadlink.models import (
    CorrelatedCommit,
    DetectorSettings,
    ExtractOptions,
    HistoryReport,
    IssueHistory,
)


@pytest.fixture
def test_repo():
    """Create a temporary Git repository for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_path = Path(tmpdir)
        repo = git.Repo.init(repo_path)

        # Configure git
        repo.config_writer().set_value("user", "name", "Test User").release()
        repo.config_writer().set_value("user", "email", "test@example.com").release()

        # Create initial commit
        (repo_path / "README.md").write_text("# Test Project\n")
        repo.index.add(["README.md"])
        repo.index.commit("Initial commit")

        # Create second commit
        (repo_path / "main.py").write_text("def hello():\n    print('Hello, World!')\n")
        repo.index.add(["main.py"])
        repo.index.commit("Add main.py")

        # Create third commit
        (repo_path / "main.py").write_text("def hello():\n    print('Hello, beads!')\n")
        repo.index.add(["main.py"])
        repo.index.commit("Fix: Update hello message")

        yield repo_path


def test_git_extractor_initialization(test_repo):
    """Test GitExtractor initialization."""
    extractor = GitExtractor(test_repo)

    assert extractor.repo_path == test_repo
    assert extractor.repo is not None


def test_git_extractor_invalid_path():
    """Test GitExtractor with invalid repository path."""
    with pytest.raises(ValueError, match="Repository path does not exist"):
        GitExtractor(Path("/nonexistent/path"))


def test_git_extractor_not_a_repo(tmp_path):
    """Test GitExtractor with a directory that is not a repository."""
    with pytest.raises(ValueError, match="Invalid Git repository"):
        GitExtractor(tmp_path)


def test_extract_commits(test_repo):
    """Test extracting all commits from repository."""
    extractor = GitExtractor(test_repo)

    commits = list(extractor.extract_commits(ExtractOptions()))

    assert len(commits) == 3
    assert commits[0].message == "Fix: Update hello message"
    assert commits[1].message == "Add main.py"
    assert commits[2].message == "Initial commit"
    assert all(isinstance(c, CorrelatedCommit) for c in commits)


def test_extract_commits_with_limit(test_repo):
    """Test extracting commits with a limit."""
    extractor = GitExtractor(test_repo)

    commits = list(extractor.extract_commits(ExtractOptions(limit=2)))

    assert len(commits) == 2


def test_commit_fields(test_repo):
    """Test identity, timestamp and file changes of an extracted commit."""
    extractor = GitExtractor(test_repo)

    latest = next(extractor.extract_commits(ExtractOptions()))

    assert len(latest.sha) == 40
    assert latest.short_sha == latest.sha[:7]
    assert latest.author == "Test User"
    assert latest.author_email == "test@example.com"
    assert latest.timestamp.tzinfo is not None
    assert [f.path for f in latest.files] == ["main.py"]
    assert latest.files[0].insertions == 1
    assert latest.files[0].deletions == 1


def test_initial_commit_files(test_repo):
    """Test that the root commit reports the files it added."""
    extractor = GitExtractor(test_repo)

    initial = list(extractor.extract_commits(ExtractOptions()))[-1]

    assert initial.file_paths == ["README.md"]


def test_extract_commit(test_repo):
    """Test extracting a specific commit."""
    extractor = GitExtractor(test_repo)
    latest_hash = next(extractor.extract_commits(ExtractOptions())).sha

    commit = extractor.extract_commit(latest_hash)

    assert commit.sha == latest_hash
    assert commit.message == "Fix: Update hello message"


def test_extract_commit_invalid_hash(test_repo):
    """Test extracting a commit with invalid hash."""
    extractor = GitExtractor(test_repo)

    with pytest.raises(ValueError, match="Commit not found"):
        extractor.extract_commit("invalid_hash_123")


def test_detector_reads_commits_from_repo(test_repo):
    """Test that the detector walks the repository when no commits are passed."""
    extractor = GitExtractor(test_repo)
    first_two = list(extractor.extract_commits(ExtractOptions()))[1:]

    report = HistoryReport(
        histories={"bv-1": IssueHistory(title="Hello message", status="open", commits=first_two)},
        commit_index={c.sha: ["bv-1"] for c in first_two},
    )
    detector = OrphanDetector(
        report,
        repo_path=test_repo,
        settings=DetectorSettings(_env_file=None),
    )

    result = detector.detect()

    assert result.stats.total_commits == 3
    assert result.stats.correlated_count == 2
    assert result.stats.orphan_count == 1
    # same author, same file, "hello" and "message" in the message
    assert result.stats.candidate_count == 1
    assert result.by_bead == {"bv-1": [next(extractor.extract_commits(ExtractOptions())).sha]}
