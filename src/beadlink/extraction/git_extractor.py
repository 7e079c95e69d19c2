"""Git repository commit extraction."""

from pathlib import Path
from typing import Iterator, List

import git
from git import Commit, Repo

from beadlink.models import CorrelatedCommit, ExtractOptions, FileChange


class GitExtractor:
    """Extracts commits from a Git repository for correlation."""

    def __init__(self, repo_path: Path) -> None:
        """Initialize the GitExtractor.

        Args:
            repo_path: Path to the Git repository

        Raises:
            ValueError: If repository path is invalid
        """
        self.repo_path = Path(repo_path)
        if not self.repo_path.exists():
            raise ValueError(f"Repository path does not exist: {self.repo_path}")

        try:
            self.repo = Repo(self.repo_path)
        except git.exc.InvalidGitRepositoryError as e:
            raise ValueError(f"Invalid Git repository: {self.repo_path}") from e

    def extract_commits(self, options: ExtractOptions) -> Iterator[CorrelatedCommit]:
        """Extract commits newest first.

        Args:
            options: Range to extract (limit, since, until, branch)

        Yields:
            CorrelatedCommit objects
        """
        kwargs = {}
        if options.limit > 0:
            kwargs["max_count"] = options.limit
        if options.since:
            kwargs["since"] = options.since
        if options.until:
            kwargs["until"] = options.until

        for commit in self.repo.iter_commits(options.branch or "HEAD", **kwargs):
            yield self._to_correlated_commit(commit)

    def extract_commit(self, commit_hash: str) -> CorrelatedCommit:
        """Extract a specific commit.

        Args:
            commit_hash: Commit hash (full or short)

        Returns:
            CorrelatedCommit object

        Raises:
            ValueError: If commit not found
        """
        try:
            commit = self.repo.commit(commit_hash)
            return self._to_correlated_commit(commit)
        except (git.exc.BadName, ValueError) as e:
            raise ValueError(f"Commit not found: {commit_hash}") from e

    def _to_correlated_commit(self, commit: Commit) -> CorrelatedCommit:
        """Convert a GitPython Commit object.

        Args:
            commit: GitPython Commit object

        Returns:
            CorrelatedCommit object
        """
        return CorrelatedCommit(
            sha=commit.hexsha,
            short_sha=commit.hexsha[:7],
            author=commit.author.name or "",
            author_email=commit.author.email or "",
            timestamp=commit.committed_datetime,
            message=commit.message.strip(),
            files=self._file_changes(commit),
        )

    def _file_changes(self, commit: Commit) -> List[FileChange]:
        # commit.stats diffs against the first parent (or the empty tree)
        changes = []
        for path, counts in commit.stats.files.items():
            changes.append(
                FileChange(
                    path=str(path),
                    insertions=counts.get("insertions", 0),
                    deletions=counts.get("deletions", 0),
                )
            )
        return changes
