"""Commit extraction from Git repositories."""

from beadlink.extraction.git_extractor import GitExtractor

__all__ = ["GitExtractor"]
