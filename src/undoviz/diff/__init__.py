"""Diff layer — LCS line diffs between historical states.

Produces unified-diff hunks for previews and change counts for inline
graph annotations.
"""

from undoviz.diff.engine import DiffChange, DiffHunk, DiffStats, count_changes, diff, unified_diff
from undoviz.diff.preview import preview_diff

__all__ = [
    "DiffChange",
    "DiffHunk",
    "DiffStats",
    "count_changes",
    "diff",
    "preview_diff",
    "unified_diff",
]
