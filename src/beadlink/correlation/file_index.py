"""File -> issue reverse index and lookups.

The index is built once from a history report and never mutated afterwards.
Lookups refresh each reference's title and status from a live issue map, so
callers always see current status even when the index is older.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import structlog

from beadlink.correlation.paths import append_unique, compile_glob, normalize_path
from beadlink.models.correlation import (
    FileHotspot,
    FileIndex,
    FileIndexStats,
    FileLookupResult,
    IssueReference,
)
from beadlink.models.history import HistoryReport, IssueSnapshot

logger = structlog.get_logger(__name__)


def build_file_index(report: Optional[HistoryReport]) -> FileIndex:
    """Create a file index from a history report.

    Every file changed by a commit linked to an issue gets one reference per
    issue. References are ordered most recently touched first; ties keep the
    order in which they were first seen.

    Args:
        report: History report, or None

    Returns:
        FileIndex (empty with zeroed stats when report is None)
    """
    if report is None:
        return FileIndex()

    # path -> bead_id -> reference fields; dicts keep first-seen order
    accumulator: Dict[str, Dict[str, Dict[str, Any]]] = {}

    for bead_id, history in report.histories.items():
        for commit in history.commits:
            for change in commit.files:
                path = normalize_path(change.path)
                fields = accumulator.setdefault(path, {}).setdefault(
                    bead_id,
                    {
                        "bead_id": bead_id,
                        "title": history.title,
                        "status": history.status,
                        "commit_shas": [],
                        "last_touch": commit.timestamp,
                        "total_changes": 0,
                    },
                )

                fields["commit_shas"] = append_unique(fields["commit_shas"], commit.short_sha)
                if commit.timestamp > fields["last_touch"]:
                    fields["last_touch"] = commit.timestamp
                fields["total_changes"] += change.changed_lines

    file_to_beads: Dict[str, Tuple[IssueReference, ...]] = {}
    for path, by_bead in accumulator.items():
        refs = [IssueReference(**fields) for fields in by_bead.values()]
        # sorted() is stable, so exact ties keep accumulation order
        file_to_beads[path] = tuple(sorted(refs, key=lambda r: r.last_touch, reverse=True))

    stats = FileIndexStats(
        total_files=len(file_to_beads),
        total_bead_links=sum(len(refs) for refs in file_to_beads.values()),
        files_with_multiple_beads=sum(1 for refs in file_to_beads.values() if len(refs) > 1),
    )

    logger.debug(
        "file_index_built",
        total_files=stats.total_files,
        total_bead_links=stats.total_bead_links,
        files_with_multiple_beads=stats.files_with_multiple_beads,
    )

    return FileIndex(file_to_beads=file_to_beads, stats=stats)


class FileLookup:
    """File -> issue queries over a FileIndex.

    Example:
        >>> lookup = FileLookup.from_report(report)
        >>> result = lookup.lookup_by_file("src/auth.py")
        >>> for ref in result.open_beads:
        ...     print(ref.bead_id, ref.status)
        >>> lookup.get_hotspots(10)
    """

    def __init__(self, index: FileIndex, beads: Optional[Mapping[str, Any]] = None) -> None:
        """Initialize the lookup.

        Args:
            index: Prebuilt file index
            beads: Issue ID -> record with ``title`` and ``status`` attributes
                (IssueHistory or IssueSnapshot) used to refresh references
        """
        self.index = index
        self.beads: Mapping[str, Any] = beads or {}

    @classmethod
    def from_report(cls, report: Optional[HistoryReport]) -> "FileLookup":
        """Build the index from a report and use its histories for status."""
        return cls(build_file_index(report), report.histories if report else {})

    def with_live_status(self, snapshots: Iterable[IssueSnapshot]) -> "FileLookup":
        """Return a lookup over the same index with status taken from the ledger."""
        beads: Dict[str, Any] = dict(self.beads)
        for snapshot in snapshots:
            beads[snapshot.id] = snapshot
        return FileLookup(self.index, beads)

    def lookup_by_file(self, path: str) -> FileLookupResult:
        """Find all issues that touched a file.

        An exact path match wins. Otherwise ``path`` is treated as a
        directory and every indexed file below it contributes, with issues
        de-duplicated.

        Args:
            path: File or directory path

        Returns:
            FileLookupResult split into open and closed issues
        """
        normalized = normalize_path(path)
        result = FileLookupResult(file_path=path)

        refs = self.index.file_to_beads.get(normalized)
        if refs is not None:
            for ref in refs:
                self._bucket(result, self._refresh(ref))
            result.total_beads = len(refs)
            return result

        prefixes = (normalized + "/", normalized + "\\")
        for file_path in sorted(self.index.file_to_beads):
            if file_path.startswith(prefixes):
                self._collect(result, self.index.file_to_beads[file_path])

        result.total_beads = len(result.open_beads) + len(result.closed_beads)
        return result

    def lookup_by_file_glob(self, pattern: str) -> FileLookupResult:
        """Find issues for every indexed file matching a glob pattern.

        A malformed pattern does not raise: the result is empty and the
        problem is reported in ``pattern_errors``.

        Args:
            pattern: Glob pattern, e.g. ``src/*.py``

        Returns:
            FileLookupResult with issues de-duplicated across files
        """
        result = FileLookupResult(file_path=pattern)

        try:
            matcher = compile_glob(pattern)
        except ValueError as e:
            logger.warning("invalid_glob_pattern", pattern=pattern, error=str(e))
            result.pattern_errors.append(str(e))
            return result

        for file_path in sorted(self.index.file_to_beads):
            if matcher.fullmatch(file_path):
                self._collect(result, self.index.file_to_beads[file_path])

        result.total_beads = len(result.open_beads) + len(result.closed_beads)
        return result

    def get_all_files(self) -> List[str]:
        """Return all indexed files, sorted by path."""
        return sorted(self.index.file_to_beads)

    def get_stats(self) -> FileIndexStats:
        """Return statistics about the file index."""
        return self.index.stats

    def get_hotspots(self, limit: int = 0) -> List[FileHotspot]:
        """Return files touched by the most issues (potential conflict zones).

        Args:
            limit: Maximum number of files; ``<= 0`` returns all of them

        Returns:
            Hotspots sorted by issue count descending, then by path
        """
        ranked = sorted(
            self.index.file_to_beads.items(),
            key=lambda item: (-len(item[1]), item[0]),
        )
        if limit > 0:
            ranked = ranked[:limit]

        hotspots = []
        for path, refs in ranked:
            open_count = sum(1 for ref in refs if not self._refresh(ref).is_closed)
            hotspots.append(
                FileHotspot(
                    file_path=path,
                    total_beads=len(refs),
                    open_beads=open_count,
                    closed_beads=len(refs) - open_count,
                )
            )
        return hotspots

    def _refresh(self, ref: IssueReference) -> IssueReference:
        # Copies keep the index itself untouched
        current = self.beads.get(ref.bead_id)
        update = {} if current is None else {"status": current.status, "title": current.title}
        return ref.model_copy(update=update, deep=True)

    def _collect(self, result: FileLookupResult, refs: Sequence[IssueReference]) -> None:
        # De-duplicate by issue ID within each bucket
        for ref in refs:
            ref = self._refresh(ref)
            bucket = result.closed_beads if ref.is_closed else result.open_beads
            if not any(existing.bead_id == ref.bead_id for existing in bucket):
                bucket.append(ref)

    @staticmethod
    def _bucket(result: FileLookupResult, ref: IssueReference) -> None:
        if ref.is_closed:
            result.closed_beads.append(ref)
        else:
            result.open_beads.append(ref)
