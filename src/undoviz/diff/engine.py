"""Line diff engine — LCS backtrace, hunk grouping, unified-diff output.

Compares two historical buffer states line by line. Lines are equal only
when their strings are identical; no whitespace or case normalization is
applied.

Pipeline::

    lcs_table()        O(m*n) longest-common-subsequence lengths
    compute_changes()  backtrace into equal/add/delete entries (forward order)
    group_hunks()      cluster changes with surrounding context
    format_hunks()     "@@ -b,c +a,c @@" headers and prefixed lines

:func:`diff` wraps the pipeline and answers the degenerate comparisons
(missing side, both empty, identical) with a single informational line.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from undoviz._errors import DiffError
from undoviz._types import ChangeKind

DEFAULT_CONTEXT = 3

NO_CHANGES_TO_DISPLAY = "No changes to display"
BOTH_EMPTY = "Both states are empty"
IDENTICAL = "No changes between these states"


@dataclass(frozen=True, slots=True)
class DiffChange:
    """One line of the edit script.

    Attributes:
        kind: ``equal`` (in both), ``add`` (only after), ``delete`` (only before).
        content: The line text.
        before_offset: Lines of *before* consumed ahead of this entry.
        after_offset: Lines of *after* consumed ahead of this entry.

    """

    kind: ChangeKind
    content: str
    before_offset: int
    after_offset: int

    @property
    def before_line(self) -> int | None:
        """1-based line number in *before*, or None for additions."""
        return None if self.kind == "add" else self.before_offset + 1

    @property
    def after_line(self) -> int | None:
        """1-based line number in *after*, or None for deletions."""
        return None if self.kind == "delete" else self.after_offset + 1


@dataclass(slots=True)
class DiffHunk:
    """A run of changes plus context, printed under one ``@@`` header.

    Context lines are stored as ``equal`` changes.
    """

    changes: list[DiffChange] = field(default_factory=list)

    @property
    def before_count(self) -> int:
        return sum(1 for c in self.changes if c.kind != "add")

    @property
    def after_count(self) -> int:
        return sum(1 for c in self.changes if c.kind != "delete")

    @property
    def before_start(self) -> int:
        first = self.changes[0].before_offset
        return first + 1 if self.before_count else first

    @property
    def after_start(self) -> int:
        first = self.changes[0].after_offset
        return first + 1 if self.after_count else first

    def header(self) -> str:
        return (
            f"@@ -{self.before_start},{self.before_count} "
            f"+{self.after_start},{self.after_count} @@"
        )


@dataclass(frozen=True, slots=True)
class DiffStats:
    """Summary of a comparison."""

    added: int
    removed: int
    hunks: int

    @property
    def changes(self) -> int:
        return self.added + self.removed


# ---------------------------------------------------------------------------
# LCS and backtrace
# ---------------------------------------------------------------------------


def lcs_table(before: Sequence[str], after: Sequence[str]) -> list[list[int]]:
    """Return the (m+1) x (n+1) table of LCS lengths of every prefix pair."""
    m, n = len(before), len(after)
    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        row, prev = dp[i], dp[i - 1]
        line = before[i - 1]
        for j in range(1, n + 1):
            if line == after[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])
    return dp


def compute_changes(before: Sequence[str], after: Sequence[str]) -> list[DiffChange]:
    """Backtrace the LCS table into an edit script in forward order.

    Walking back from the end, a matching pair is ``equal``; otherwise an
    addition is preferred whenever the left cell is at least as long as the
    upper one, so deletions print ahead of the additions replacing them.

    """
    dp = lcs_table(before, after)
    i, j = len(before), len(after)
    changes: list[DiffChange] = []
    while i > 0 or j > 0:
        if i > 0 and j > 0 and before[i - 1] == after[j - 1]:
            changes.append(DiffChange("equal", before[i - 1], i - 1, j - 1))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or dp[i][j - 1] >= dp[i - 1][j]):
            changes.append(DiffChange("add", after[j - 1], i, j - 1))
            j -= 1
        else:
            changes.append(DiffChange("delete", before[i - 1], i - 1, j))
            i -= 1
    changes.reverse()
    return changes


# ---------------------------------------------------------------------------
# Hunks
# ---------------------------------------------------------------------------


def group_hunks(changes: Sequence[DiffChange], context: int = DEFAULT_CONTEXT) -> list[DiffHunk]:
    """Cluster an edit script into hunks with *context* lines around changes.

    An equal run of at most ``2 * context`` lines after a change stays whole
    inside the hunk, whether another change or the end of the script follows
    it. A longer run closes the hunk after *context* trailing lines.

    """
    _check_context(context)
    hunks: list[DiffHunk] = []
    current: DiffHunk | None = None
    total = len(changes)
    i = 0
    while i < total:
        if changes[i].kind != "equal":
            if current is None:
                current = DiffHunk(changes=list(changes[max(0, i - context):i]))
            current.changes.append(changes[i])
            i += 1
            continue

        run_end = i
        while run_end < total and changes[run_end].kind == "equal":
            run_end += 1
        if current is not None:
            if run_end - i <= 2 * context:
                current.changes.extend(changes[i:run_end])
            else:
                current.changes.extend(changes[i:i + context])
                hunks.append(current)
                current = None
        i = run_end

    if current is not None:
        hunks.append(current)
    return hunks


def format_hunks(hunks: Sequence[DiffHunk]) -> list[str]:
    """Render hunks as unified-diff lines."""
    prefixes = {"equal": " ", "add": "+", "delete": "-"}
    lines: list[str] = []
    for hunk in hunks:
        lines.append(hunk.header())
        lines.extend(prefixes[c.kind] + c.content for c in hunk.changes)
    return lines


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def comparison_message(
    before: Sequence[str] | None, after: Sequence[str] | None
) -> str | None:
    """Return the informational line for a degenerate comparison, else None."""
    if before is None or after is None:
        return NO_CHANGES_TO_DISPLAY
    if not before and not after:
        return BOTH_EMPTY
    if len(before) == len(after) and all(a == b for a, b in zip(before, after)):
        return IDENTICAL
    return None


def unified_diff(
    before: Sequence[str], after: Sequence[str], context: int = DEFAULT_CONTEXT
) -> list[str]:
    """Hunk lines for two line sequences (empty when they are equal)."""
    _check_context(context)
    return format_hunks(group_hunks(compute_changes(before, after), context))


def diff(
    before: Sequence[str] | None,
    after: Sequence[str] | None,
    context: int = DEFAULT_CONTEXT,
) -> list[str]:
    """Compare two buffer states and return displayable diff lines.

    Returns a single informational line when either side is missing, both
    are empty, or both are identical. Otherwise returns unified-diff hunks
    without file headers.

    Raises:
        DiffError: *context* is negative.

    """
    _check_context(context)
    message = comparison_message(before, after)
    if message is not None:
        return [message]
    return unified_diff(before, after, context)  # type: ignore[arg-type]


def diff_stats(before: Sequence[str], after: Sequence[str], context: int = DEFAULT_CONTEXT) -> DiffStats:
    """Count added and removed lines and the hunks they form."""
    changes = compute_changes(before, after)
    return DiffStats(
        added=sum(1 for c in changes if c.kind == "add"),
        removed=sum(1 for c in changes if c.kind == "delete"),
        hunks=len(group_hunks(changes, context)),
    )


def count_changes(lines: Sequence[str]) -> int:
    """Number of ``+``/``-`` body lines in diff output (file headers excluded)."""
    if len(lines) >= 2 and lines[0].startswith("--- ") and lines[1].startswith("+++ "):
        lines = lines[2:]
    return sum(1 for line in lines if line[:1] in ("+", "-"))


def _check_context(context: int) -> None:
    if context < 0:
        msg = f"context must be >= 0, got {context}"
        raise DiffError(msg)
