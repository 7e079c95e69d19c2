"""Data models for issue histories, file indexes and orphan reports."""

from beadlink.models.config import DetectorSettings, Settings
from beadlink.models.correlation import (
    FileHotspot,
    FileIndex,
    FileIndexStats,
    FileLookupResult,
    IssueReference,
)
from beadlink.models.history import (
    CorrelatedCommit,
    FileChange,
    HistoryReport,
    IssueEvent,
    IssueHistory,
    IssueMilestones,
    IssueSnapshot,
)
from beadlink.models.orphan import (
    ExtractOptions,
    OrphanCandidate,
    OrphanReport,
    OrphanSignal,
    OrphanStats,
    ProbableIssue,
    SignalHit,
)

__all__ = [
    "CorrelatedCommit",
    "FileChange",
    "HistoryReport",
    "IssueEvent",
    "IssueHistory",
    "IssueMilestones",
    "IssueSnapshot",
    "IssueReference",
    "FileIndex",
    "FileIndexStats",
    "FileLookupResult",
    "FileHotspot",
    "ExtractOptions",
    "OrphanSignal",
    "SignalHit",
    "ProbableIssue",
    "OrphanCandidate",
    "OrphanStats",
    "OrphanReport",
    "DetectorSettings",
    "Settings",
]
