"""Integrity validation for the relationship graph.

This package provides:
- Checks for duplicate, dangling and mislabeled relationships
- Report generation
- Repair of duplicate relationships
"""

from content_graph.validation.fixes import format_fix_preview, merge_duplicate_edges
from content_graph.validation.queries import (
    find_dangling_edges,
    find_duplicate_edges,
    find_invalid_labels,
    load_all_edges,
    run_all_validations,
)
from content_graph.validation.reporter import GraphValidator, IntegrityReport

__all__ = [
    # Queries
    "load_all_edges",
    "find_duplicate_edges",
    "find_dangling_edges",
    "find_invalid_labels",
    "run_all_validations",
    # Reporter
    "IntegrityReport",
    "GraphValidator",
    # Fixes
    "merge_duplicate_edges",
    "format_fix_preview",
]
