"""Temporal and author association model.

Derived per history report: when each issue was being worked on, which
authors have committed against which issues, and which files each issue has
touched.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Set

import structlog

from beadlink.models.correlation import FileIndex
from beadlink.models.history import HistoryReport

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TemporalWindow:
    """Interval during which an issue was actively worked.

    ``end`` is None while the issue is still open; such windows extend to
    the present.
    """

    bead_id: str
    start: datetime
    end: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.end is None

    def contains(self, ts: datetime) -> bool:
        if ts < self.start:
            return False
        return self.end is None or ts <= self.end

    def describe(self) -> str:
        start = self.start.strftime("%Y-%m-%d %H:%M")
        end = self.end.strftime("%Y-%m-%d %H:%M") if self.end else "now"
        return f"{start} .. {end}"


@dataclass
class AssociationModel:
    """Per-issue windows and files plus per-author issue sets."""

    windows: Dict[str, TemporalWindow] = field(default_factory=dict)
    author_beads: Dict[str, Set[str]] = field(default_factory=dict)
    bead_files: Dict[str, Set[str]] = field(default_factory=dict)

    @classmethod
    def build(cls, report: Optional[HistoryReport], index: Optional[FileIndex] = None) -> "AssociationModel":
        """Derive the model from a history report.

        Args:
            report: History report, or None for an empty model
            index: File index built from the same report; supplies the
                files each issue has touched

        Returns:
            AssociationModel
        """
        model = cls()
        if report is None:
            return model

        for bead_id, history in report.histories.items():
            claimed = history.milestones.claimed
            if claimed is not None:
                closed = history.milestones.closed
                model.windows[bead_id] = TemporalWindow(
                    bead_id=bead_id,
                    start=claimed.timestamp,
                    end=closed.timestamp if closed else None,
                )

            for commit in history.commits:
                email = commit.author_email.strip().lower()
                if email:
                    model.author_beads.setdefault(email, set()).add(bead_id)

        if index is not None:
            for path, refs in index.file_to_beads.items():
                for ref in refs:
                    model.bead_files.setdefault(ref.bead_id, set()).add(path)

        logger.debug(
            "association_model_built",
            windows=len(model.windows),
            authors=len(model.author_beads),
            beads_with_files=len(model.bead_files),
        )
        return model

    def beads_for_author(self, email: str) -> Set[str]:
        return self.author_beads.get(email.strip().lower(), set())
