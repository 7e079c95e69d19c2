"""Commit-to-issue correlation: reverse file index, associations and orphan detection."""

from beadlink.correlation.association import AssociationModel, TemporalWindow
from beadlink.correlation.file_index import FileLookup, build_file_index
from beadlink.correlation.orphan import OrphanDetector, compute_data_hash, format_git_range
from beadlink.correlation.paths import append_unique, normalize_path

__all__ = [
    "AssociationModel",
    "TemporalWindow",
    "FileLookup",
    "build_file_index",
    "OrphanDetector",
    "compute_data_hash",
    "format_git_range",
    "append_unique",
    "normalize_path",
]
