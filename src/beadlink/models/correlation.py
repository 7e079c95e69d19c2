"""Data models for the file -> issue reverse index."""

from datetime import datetime
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field


class IssueReference(BaseModel):
    """Links an issue to a file through the commits that touched it.

    ``title`` and ``status`` are snapshots taken when the index was built;
    lookups refresh them from the live issue map before returning.
    """

    model_config = ConfigDict(frozen=True)

    bead_id: str = Field(..., description="Issue ID")
    title: str = Field("", description="Issue title at index-build time")
    status: str = Field("", description="Issue status at index-build time")
    commit_shas: Tuple[str, ...] = Field(default_factory=tuple, description="Commits that linked this issue to the file")
    last_touch: datetime = Field(..., description="Most recent commit timestamp")
    total_changes: int = Field(0, description="Sum of insertions and deletions across commits")

    @property
    def is_closed(self) -> bool:
        return self.status == "closed"


class FileIndexStats(BaseModel):
    """Aggregate statistics about a file index."""

    total_files: int = Field(0, description="Number of unique files")
    total_bead_links: int = Field(0, description="Sum of all issue references")
    files_with_multiple_beads: int = Field(0, description="Files touched by more than one issue")


class FileIndex(BaseModel):
    """Mapping from normalized file path to the issues that touched it.

    References are frozen and stored as tuples. The top-level dict is only
    protected against reassignment; lookups never add or remove paths.
    """

    model_config = ConfigDict(frozen=True)

    file_to_beads: Dict[str, Tuple[IssueReference, ...]] = Field(default_factory=dict)
    stats: FileIndexStats = Field(default_factory=FileIndexStats)


class FileLookupResult(BaseModel):
    """Issues found for a file, directory or glob pattern."""

    file_path: str
    open_beads: List[IssueReference] = Field(default_factory=list)
    closed_beads: List[IssueReference] = Field(default_factory=list)
    total_beads: int = 0
    pattern_errors: List[str] = Field(
        default_factory=list, description="Problems with the glob pattern, if any"
    )


class FileHotspot(BaseModel):
    """A file touched by many issues."""

    file_path: str
    total_beads: int
    open_beads: int
    closed_beads: int
