"""Data models for orphan commit detection."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ExtractOptions(BaseModel):
    """Controls which commits are examined."""

    limit: int = Field(0, description="Maximum commits to examine (0 = unlimited)")
    since: Optional[str] = Field(None, description="Only commits after this date")
    until: Optional[str] = Field(None, description="Only commits before this date")
    branch: str = Field("HEAD", description="Branch or revision to walk")


class OrphanSignal(str, Enum):
    """Heuristic signals that tie a commit to an issue."""

    TIMING = "timing"
    FILES = "files"
    MESSAGE = "message"
    AUTHOR = "author"


class SignalHit(BaseModel):
    """One signal's contribution for a (commit, issue) pair."""

    signal: OrphanSignal
    details: str = ""
    weight: int = 0
    bead_id: str = Field("", description="Issue the signal was scored against")


class ProbableIssue(BaseModel):
    """An issue the commit probably belongs to."""

    bead_id: str
    bead_title: str = ""
    bead_status: str = ""
    confidence: int = Field(0, ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)


class OrphanCandidate(BaseModel):
    """A commit without an issue link that looks like it should have one."""

    sha: str
    short_sha: str
    message: str = ""
    author: str = ""
    author_email: str = ""
    timestamp: datetime
    files: List[str] = Field(default_factory=list)
    suspicion_score: int = Field(0, ge=0, le=100)
    probable_beads: List[ProbableIssue] = Field(default_factory=list)
    signals: List[SignalHit] = Field(default_factory=list)


class OrphanStats(BaseModel):
    """Aggregate statistics of an orphan report."""

    total_commits: int = 0
    correlated_count: int = 0
    orphan_count: int = 0
    candidate_count: int = 0
    orphan_ratio: float = 0.0
    avg_suspicion: float = 0.0


class OrphanReport(BaseModel):
    """Result of an orphan detection pass."""

    generated_at: datetime
    git_range: str = "all history"
    data_hash: str = ""
    stats: OrphanStats = Field(default_factory=OrphanStats)
    candidates: List[OrphanCandidate] = Field(default_factory=list)
    by_bead: Dict[str, List[str]] = Field(default_factory=dict)
    cancelled: bool = Field(False, description="True when the pass stopped before all commits were examined")
