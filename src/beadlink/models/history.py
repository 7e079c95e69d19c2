"""Data models for issue histories and the commits linked to them."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are treated as UTC so every comparison is aware vs aware
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class FileChange(BaseModel):
    """A single file touched by a commit."""

    model_config = ConfigDict(extra="ignore")

    path: str = Field(..., description="Path of the changed file")
    action: Optional[str] = Field(None, description="Change type: A, M, D, R")
    insertions: int = Field(0, description="Number of lines added")
    deletions: int = Field(0, description="Number of lines deleted")

    @property
    def changed_lines(self) -> int:
        return self.insertions + self.deletions


class CorrelatedCommit(BaseModel):
    """A commit as seen by the correlation engine."""

    model_config = ConfigDict(extra="ignore")

    sha: str = Field(..., description="Full commit SHA")
    short_sha: str = Field("", description="Short commit SHA (7 chars)")
    author: str = Field("", description="Author display name")
    author_email: str = Field("", description="Author email")
    timestamp: datetime = Field(..., description="Commit timestamp")
    message: str = Field("", description="Full commit message")
    files: List[FileChange] = Field(default_factory=list, description="Files changed by the commit")

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def model_post_init(self, __context: Any) -> None:
        if not self.short_sha:
            self.short_sha = self.sha[:7]

    @property
    def file_paths(self) -> List[str]:
        return [f.path for f in self.files]


class IssueEvent(BaseModel):
    """A lifecycle milestone of an issue."""

    model_config = ConfigDict(extra="ignore")

    timestamp: datetime
    commit_sha: Optional[str] = None
    author: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)


class IssueMilestones(BaseModel):
    """Milestone events of an issue. Any of them may be missing."""

    model_config = ConfigDict(extra="ignore")

    created: Optional[IssueEvent] = None
    claimed: Optional[IssueEvent] = None
    closed: Optional[IssueEvent] = None


class IssueHistory(BaseModel):
    """Aggregated view of one issue and the commits linked to it."""

    model_config = ConfigDict(extra="ignore")

    bead_id: str = Field("", description="Issue ID")
    title: str = Field("", description="Issue title")
    status: str = Field("open", description="Current status: open, in_progress, closed, ...")
    last_author: str = Field("", description="Last known author")
    milestones: IssueMilestones = Field(default_factory=IssueMilestones)
    commits: List[CorrelatedCommit] = Field(default_factory=list)


class HistoryReport(BaseModel):
    """Snapshot of issue histories plus the forward commit -> issues index.

    This mirrors the payload of ``bv --robot-history``; unknown keys are
    ignored so newer producers stay readable.
    """

    model_config = ConfigDict(extra="ignore")

    histories: Dict[str, IssueHistory] = Field(default_factory=dict)
    commit_index: Dict[str, List[str]] = Field(default_factory=dict)
    stats: Dict[str, Any] = Field(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        for bead_id, history in self.histories.items():
            if not history.bead_id:
                history.bead_id = bead_id

    def linked_beads(self, sha: str, short_sha: str = "") -> List[str]:
        """Return the issues a commit is linked to, by full or short SHA."""
        beads = self.commit_index.get(sha)
        if not beads and short_sha:
            beads = self.commit_index.get(short_sha)
        return list(beads or [])


class IssueSnapshot(BaseModel):
    """Current title/status of an issue as reported by the ledger."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    status: str = "open"
