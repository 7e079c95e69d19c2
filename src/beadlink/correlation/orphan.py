"""Orphan commit detection.

An orphan is a commit with no issue link in the forward commit index. Each
orphan is scored against every known issue with four independent signals:

1. timing  - the commit falls inside the issue's claimed..closed window
2. files   - the commit touches files the issue has touched before
3. message - the commit message mentions the issue ID or title keywords
4. author  - the author has committed against the issue before

Per-issue confidence is the capped sum of signal weights. A commit's
suspicion score is its best confidence plus a small bonus for each further
signal kind that fired on other issues.
"""

import hashlib
import itertools
import json
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

import structlog

from beadlink.correlation.association import AssociationModel, TemporalWindow
from beadlink.correlation.file_index import build_file_index
from beadlink.correlation.paths import append_unique, normalize_path
from beadlink.models.config import DetectorSettings
from beadlink.models.history import CorrelatedCommit, HistoryReport, IssueHistory
from beadlink.models.orphan import (
    ExtractOptions,
    OrphanCandidate,
    OrphanReport,
    OrphanSignal,
    OrphanStats,
    ProbableIssue,
    SignalHit,
)

logger = structlog.get_logger(__name__)

# Title words too common to say anything about a commit
STOP_WORDS = frozenset(
    {
        "about", "after", "also", "been", "before", "from", "have", "into",
        "make", "more", "only", "should", "some", "than", "that", "them",
        "then", "there", "these", "this", "when", "where", "which", "while",
        "will", "with", "without", "work", "update", "support", "issue",
        "task", "feature", "bug", "add", "fix",
    }
)

_WORD = re.compile(r"[a-z0-9]+")


def format_git_range(options: Optional[ExtractOptions]) -> str:
    """Describe the commit range an extraction covers.

    Example:
        >>> format_git_range(ExtractOptions())
        'all history'
        >>> format_git_range(ExtractOptions(limit=100))
        'limit 100'
    """
    if options is None:
        return "all history"

    parts = []
    if options.since:
        parts.append(f"since {options.since}")
    if options.until:
        parts.append(f"until {options.until}")
    if options.limit > 0:
        parts.append(f"limit {options.limit}")
    if options.branch and options.branch != "HEAD":
        parts.append(f"branch {options.branch}")

    return ", ".join(parts) if parts else "all history"


def compute_data_hash(report: Optional[HistoryReport], commit_shas: Iterable[str]) -> str:
    """Fingerprint the input data so cached reports can be invalidated.

    Covers every history field that feeds scoring (titles, statuses,
    milestones, commits with their authors and files), the commit index and
    the examined SHAs. This is a change detector, not a security hash.
    """
    beads = []
    index: Dict[str, List[str]] = {}
    if report is not None:
        for bead_id in sorted(report.histories):
            beads.append([bead_id, report.histories[bead_id].model_dump(mode="json")])
        index = {sha: sorted(ids) for sha, ids in report.commit_index.items()}

    payload = json.dumps(
        {"beads": beads, "index": index, "commits": sorted(set(commit_shas))},
        sort_keys=True,
    )
    return hashlib.sha256(payload.encode()).hexdigest()[:16]


def title_keywords(title: str, min_length: int = 4) -> List[str]:
    """Return distinct, lower-cased title words useful for message matching."""
    keywords: List[str] = []
    for word in _WORD.findall(title.lower()):
        if len(word) >= min_length and word not in STOP_WORDS:
            keywords = append_unique(keywords, word)
    return keywords


class OrphanDetector:
    """Finds commits that probably belong to an issue but are not linked.

    Example:
        >>> detector = OrphanDetector(report, repo_path=Path("/path/to/repo"))
        >>> result = detector.detect(ExtractOptions(limit=500))
        >>> for candidate in result.candidates:
        ...     top = candidate.probable_beads[0]
        ...     print(candidate.short_sha, top.bead_id, top.confidence)
    """

    def __init__(
        self,
        report: Optional[HistoryReport],
        repo_path: Optional[Path] = None,
        settings: Optional[DetectorSettings] = None,
    ) -> None:
        """Initialize the detector and build its indexes.

        Args:
            report: History report (None is treated as empty)
            repo_path: Repository to read commits from when none are passed
                to ``detect``
            settings: Weights and thresholds (defaults from environment)
        """
        self.report = report if report is not None else HistoryReport()
        self.repo_path = Path(repo_path) if repo_path is not None else None
        self.settings = settings or DetectorSettings()

        self.file_index = build_file_index(self.report)
        self.associations = AssociationModel.build(self.report, self.file_index)
        self._keywords = {
            bead_id: title_keywords(history.title, self.settings.min_keyword_length)
            for bead_id, history in self.report.histories.items()
        }

    @property
    def bead_windows(self) -> Dict[str, TemporalWindow]:
        return self.associations.windows

    @property
    def author_beads(self) -> Dict[str, Set[str]]:
        return self.associations.author_beads

    def detect(
        self,
        options: Optional[ExtractOptions] = None,
        commits: Optional[Iterable[CorrelatedCommit]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> OrphanReport:
        """Scan commits and report the suspicious unlinked ones.

        Args:
            options: Commit range to examine
            commits: Commits to examine; read from ``repo_path`` when omitted
            cancel: Checked between commits; when set the scan stops and the
                partial report is returned with ``cancelled=True``

        Returns:
            OrphanReport
        """
        options = options or ExtractOptions()
        stream = self._commit_stream(options, commits)

        total = 0
        correlated = 0
        orphans = 0
        cancelled = False
        examined: List[str] = []
        candidates: List[OrphanCandidate] = []

        for commit in stream:
            if cancel is not None and cancel.is_set():
                cancelled = True
                break

            total += 1
            examined.append(commit.sha)

            if self.report.linked_beads(commit.sha, commit.short_sha):
                correlated += 1
                continue

            orphans += 1
            candidate = self.score_commit(commit)
            if candidate.probable_beads and candidate.suspicion_score >= self.settings.min_suspicion:
                candidates.append(candidate)

        if cancelled:
            logger.warning("orphan_detection_cancelled", examined=total)

        by_bead: Dict[str, List[str]] = {}
        for candidate in candidates:
            top = candidate.probable_beads[0].bead_id
            by_bead[top] = append_unique(by_bead.get(top, []), candidate.sha)

        stats = OrphanStats(
            total_commits=total,
            correlated_count=correlated,
            orphan_count=orphans,
            candidate_count=len(candidates),
            orphan_ratio=orphans / total if total else 0.0,
            avg_suspicion=(
                sum(c.suspicion_score for c in candidates) / len(candidates) if candidates else 0.0
            ),
        )

        logger.info(
            "orphan_detection_complete",
            total_commits=stats.total_commits,
            correlated=stats.correlated_count,
            orphans=stats.orphan_count,
            candidates=stats.candidate_count,
        )

        return OrphanReport(
            generated_at=datetime.now(timezone.utc),
            git_range=format_git_range(options),
            data_hash=compute_data_hash(self.report, examined),
            stats=stats,
            candidates=candidates,
            by_bead=by_bead,
            cancelled=cancelled,
        )

    def score_commit(self, commit: CorrelatedCommit) -> OrphanCandidate:
        """Score one commit against every known issue.

        Args:
            commit: Commit to score (link status is not checked here)

        Returns:
            OrphanCandidate with ranked probable issues and all signal hits
        """
        paths = {normalize_path(p) for p in commit.file_paths}

        probable: List[ProbableIssue] = []
        signals: List[SignalHit] = []
        kinds_by_bead: Dict[str, Set[OrphanSignal]] = {}

        for bead_id, history in self.report.histories.items():
            hits = self._score_issue(commit, bead_id, history, paths)
            if not hits:
                continue

            signals.extend(hits)
            kinds_by_bead[bead_id] = {hit.signal for hit in hits}
            probable.append(
                ProbableIssue(
                    bead_id=bead_id,
                    bead_title=history.title,
                    bead_status=history.status,
                    confidence=min(100, sum(hit.weight for hit in hits)),
                    reasons=[hit.signal.value for hit in hits],
                )
            )

        # Stable sort keeps issue order for equal confidence
        probable.sort(key=lambda p: p.confidence, reverse=True)

        return OrphanCandidate(
            sha=commit.sha,
            short_sha=commit.short_sha,
            message=commit.message,
            author=commit.author,
            author_email=commit.author_email,
            timestamp=commit.timestamp,
            files=commit.file_paths,
            suspicion_score=self._suspicion(probable, kinds_by_bead),
            probable_beads=probable[: self.settings.max_probable_beads],
            signals=signals,
        )

    def _score_issue(
        self,
        commit: CorrelatedCommit,
        bead_id: str,
        history: IssueHistory,
        paths: Set[str],
    ) -> List[SignalHit]:
        s = self.settings
        hits: List[SignalHit] = []

        window = self.associations.windows.get(bead_id)
        if window is not None and window.contains(commit.timestamp):
            hits.append(
                SignalHit(
                    signal=OrphanSignal.TIMING,
                    details=f"Commit during active period ({window.describe()})",
                    weight=s.timing_weight,
                    bead_id=bead_id,
                )
            )

        overlap = sorted(paths & self.associations.bead_files.get(bead_id, set()))
        if overlap:
            hits.append(
                SignalHit(
                    signal=OrphanSignal.FILES,
                    details=f"Touches {len(overlap)} file(s) of this issue: {', '.join(overlap)}",
                    weight=min(s.files_weight_cap, s.files_weight_per_file * len(overlap)),
                    bead_id=bead_id,
                )
            )

        fragment = self._message_match(commit.message, bead_id)
        if fragment:
            hits.append(
                SignalHit(
                    signal=OrphanSignal.MESSAGE,
                    details=f"Message mentions {fragment}",
                    weight=s.message_weight,
                    bead_id=bead_id,
                )
            )

        if bead_id in self.associations.beads_for_author(commit.author_email):
            hits.append(
                SignalHit(
                    signal=OrphanSignal.AUTHOR,
                    details=f"{commit.author or commit.author_email} has committed to this issue before",
                    weight=s.author_weight,
                    bead_id=bead_id,
                )
            )

        return hits

    def _message_match(self, message: str, bead_id: str) -> Optional[str]:
        text = message.lower()
        if not text:
            return None
        if bead_id and re.search(rf"\b{re.escape(bead_id.lower())}\b", text):
            return f'"{bead_id}"'

        matched = [kw for kw in self._keywords.get(bead_id, []) if re.search(rf"\b{re.escape(kw)}\b", text)]
        if not matched:
            return None
        return ", ".join(f'"{kw}"' for kw in matched)

    def _suspicion(self, probable: List[ProbableIssue], kinds_by_bead: Dict[str, Set[OrphanSignal]]) -> int:
        if not probable:
            return 0
        top = probable[0]
        top_kinds = kinds_by_bead.get(top.bead_id, set())
        other_kinds = set(itertools.chain.from_iterable(kinds_by_bead.values())) - top_kinds
        return min(100, top.confidence + self.settings.corroboration_bonus * len(other_kinds))

    def _commit_stream(
        self, options: ExtractOptions, commits: Optional[Iterable[CorrelatedCommit]]
    ) -> Iterable[CorrelatedCommit]:
        if commits is None:
            if self.repo_path is None:
                logger.warning("no_commit_source", reason="no commits and no repo_path")
                return iter(())

            from beadlink.extraction.git_extractor import GitExtractor

            commits = GitExtractor(self.repo_path).extract_commits(options)

        if options.limit > 0:
            return itertools.islice(commits, options.limit)
        return iter(commits)
