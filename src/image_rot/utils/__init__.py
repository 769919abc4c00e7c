"""Utility functions for image rot resolution."""

from .digest import extract_digest, series_prefix
from .taglog import extract_tag, parse_tag_log

__all__ = ["extract_digest", "series_prefix", "extract_tag", "parse_tag_log"]
