"""Adapters for the beads (bd) and beads_viewer (bv) tools."""

from beadlink.integrations.beads import (
    BeadsClient,
    BeadsCommandError,
    BeadsConfig,
    BeadsConfigError,
    BeadsError,
    BeadsViewerClient,
    load_history_report,
    parse_history_report,
)

__all__ = [
    "BeadsClient",
    "BeadsViewerClient",
    "BeadsConfig",
    "BeadsError",
    "BeadsCommandError",
    "BeadsConfigError",
    "load_history_report",
    "parse_history_report",
]
