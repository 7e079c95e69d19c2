"""
Beads Integration Module

Python wrappers for the beads (bd) and beads_viewer (bv) CLI tools, the two
external sources the correlation engine reads from:

1. BeadsClient (bd) - current issue titles and statuses (live refresh)
2. BeadsViewerClient (bv) - per-issue commit histories via the Robot Protocol

Both are read-only: nothing here mutates the issue ledger.
"""

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from beadlink.models.history import HistoryReport, IssueSnapshot

logger = logging.getLogger(__name__)


class BeadsError(Exception):
    """Base exception for beads integration errors"""
    pass


class BeadsCommandError(BeadsError):
    """Raised when a beads command fails"""
    def __init__(self, command: List[str], returncode: int, stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command {' '.join(command)} failed with code {returncode}: {stderr}")


class BeadsConfigError(BeadsError):
    """Raised when beads configuration is invalid"""
    pass


@dataclass
class BeadsConfig:
    """Configuration for beads integration

    Attributes:
        repo_path: Path to the repository containing .beads directory
        bd_path: Path to bd CLI binary (default: ~/go/bin/bd)
        bv_path: Path to bv CLI binary (default: ~/go/bin/bv)
        timeout: Command timeout in seconds (default: 30)
    """
    repo_path: Path
    bd_path: Optional[Path] = None
    bv_path: Optional[Path] = None
    timeout: int = 30

    def __post_init__(self):
        """Normalize paths, fill in default binaries and check the repository"""
        self.repo_path = Path(self.repo_path)
        go_bin = Path.home() / "go" / "bin"
        self.bd_path = Path(self.bd_path) if self.bd_path is not None else go_bin / "bd"
        self.bv_path = Path(self.bv_path) if self.bv_path is not None else go_bin / "bv"

        if not self.repo_path.exists():
            raise BeadsConfigError(f"Repository path does not exist: {self.repo_path}")

        # bv still runs without .beads, it just has no history to report
        if not (self.repo_path / ".beads").exists():
            logger.warning(f"No .beads directory at {self.repo_path}; history will be empty")


def _run_json(cmd: List[str], cwd: str, timeout: int, tool: str) -> Union[Dict[str, Any], List[Any]]:
    """Run a beads tool and parse its JSON stdout.

    Raises:
        BeadsCommandError: If the command exits non-zero
        BeadsError: On timeout, missing binary or invalid JSON
    """
    logger.debug(f"Running {tool} command: {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True
        )
    except FileNotFoundError as e:
        raise BeadsConfigError(f"{tool} binary not found at {cmd[0]}") from e
    except subprocess.CalledProcessError as e:
        logger.error(f"Command failed: {' '.join(cmd)}")
        logger.error(f"stderr: {e.stderr}")
        raise BeadsCommandError(cmd, e.returncode, e.stderr)
    except subprocess.TimeoutExpired as e:
        logger.error(f"Command timed out after {timeout}s: {' '.join(cmd)}")
        raise BeadsError(f"Command timed out: {' '.join(cmd)}") from e

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON output: {e}")
        logger.debug(f"Raw output: {result.stdout[:500]}")
        raise BeadsError(f"Invalid JSON response from {tool}: {e}") from e

    logger.debug(f"Command successful, returned {len(data) if isinstance(data, list) else 1} item(s)")
    return data


class BeadsClient:
    """Layer 1: Beads (bd) - current issue state.

    Supplies live titles and statuses so file lookups never report a status
    that changed after the history was captured.

    Example:
        >>> config = BeadsConfig(repo_path=Path("/path/to/repo"))
        >>> client = BeadsClient(config)
        >>> lookup = lookup.with_live_status(client.list_all())
    """

    def __init__(self, config: BeadsConfig):
        """Initialize BeadsClient

        Args:
            config: BeadsConfig instance with repository and CLI paths
        """
        self.config = config
        self._bd_path = str(config.bd_path)
        self._repo_path = str(config.repo_path)
        self._timeout = config.timeout

    def list_all(self, status: Optional[str] = None) -> List[IssueSnapshot]:
        """Get all issues with their current title and status

        Args:
            status: Optional status filter (e.g., 'open', 'closed')

        Returns:
            List of IssueSnapshot records
        """
        args = [self._bd_path, 'list', '--json']
        if status:
            args.extend(['--status', status])

        result = _run_json(args, self._repo_path, self._timeout, "bd")
        if not isinstance(result, list):
            raise BeadsError(f"Expected list from 'bd list', got {type(result)}")

        snapshots = []
        for item in result:
            try:
                snapshots.append(IssueSnapshot.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed issue record from bd: {e}")
        return snapshots


class BeadsViewerClient:
    """Layer 2: Beads Viewer (bv) - history via the Robot Protocol

    Example:
        >>> config = BeadsConfig(repo_path=Path("/path/to/repo"))
        >>> client = BeadsViewerClient(config)
        >>> report = client.history()
        >>> print(f"Issues with history: {len(report.histories)}")
    """

    def __init__(self, config: BeadsConfig):
        """Initialize BeadsViewerClient

        Args:
            config: BeadsConfig instance with repository and CLI paths
        """
        self.config = config
        self._bv_path = str(config.bv_path)
        self._repo_path = str(config.repo_path)
        self._timeout = config.timeout

    def history(self) -> HistoryReport:
        """Get issue-to-commit correlations

        Returns:
            HistoryReport with per-issue histories and the commit index

        Raises:
            BeadsError: If bv fails or returns an unexpected payload
        """
        result = _run_json([self._bv_path, '--robot-history'], self._repo_path, self._timeout, "bv")
        return parse_history_report(result)


def parse_history_report(data: Any) -> HistoryReport:
    """Validate a robot-history payload.

    Raises:
        BeadsError: If the payload is not a valid history report
    """
    if not isinstance(data, dict):
        raise BeadsError(f"Expected object from 'bv --robot-history', got {type(data)}")
    try:
        return HistoryReport.model_validate(data)
    except ValidationError as e:
        raise BeadsError(f"Invalid history report: {e}") from e


def load_history_report(path: Path) -> HistoryReport:
    """Load a history report saved from ``bv --robot-history``.

    Args:
        path: JSON file

    Returns:
        HistoryReport

    Raises:
        BeadsError: If the file is not valid JSON or not a history report
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise BeadsError(f"Invalid JSON in {path}: {e}") from e

    report = parse_history_report(data)
    logger.info(f"Loaded history for {len(report.histories)} issue(s) from {path}")
    return report
