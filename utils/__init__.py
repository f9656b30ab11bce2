"""Utility modules for browsing and rendering communities."""

from .browse import CompareSelection, collect_facets, filter_communities, sort_communities
from .markdown_generator import MarkdownGenerator

__all__ = [
    "CompareSelection",
    "MarkdownGenerator",
    "collect_facets",
    "filter_communities",
    "sort_communities",
]
