"""History tree builder — reconstructs parent links from a change log.

The host never reports parents. It reports a trunk (the top-level entry
list) where any entry may own an ``alternates`` list of states that diverged
from that point. The builder turns this into a tree:

- the *first* alternate of a list starts a branch under the owning entry;
- every later alternate in the same list hangs off the alternate before it
  (the list is a chain, not a set of siblings);
- a trunk entry continues from the nearest older trunk entry;
- anything else continues from the nearest older state that exists.

The same rules apply at every nesting depth. Malformed logs (duplicate or
self-referencing sequence numbers) never raise: offending links fall back
to the root so the tree always renders.

All traversals use explicit stacks; deeply nested histories cannot exhaust
the interpreter's recursion limit.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Sequence
from dataclasses import dataclass, field

from undoviz.history.entries import ChangeLogEntry, iter_entries
from undoviz.history.node import Node
from undoviz.history.tree import HistoryTree


@dataclass(slots=True)
class BranchRelations:
    """Structural facts gathered from one pass over the change log.

    Attributes:
        alt_sequences: Owner seq -> ordered seqs of its alternates list.
        in_alt_of: Alternate seq -> seq of the entry owning its list.
        alt_position: Alternate seq -> index within its owner's list.
        branch_starts: First-alternate seq -> owner seq.
        trunk: Seqs of the top-level entries.

    """

    alt_sequences: dict[int, list[int]] = field(default_factory=dict)
    in_alt_of: dict[int, int] = field(default_factory=dict)
    alt_position: dict[int, int] = field(default_factory=dict)
    branch_starts: dict[int, int] = field(default_factory=dict)
    trunk: set[int] = field(default_factory=set)


def build_tree(entries: Sequence[ChangeLogEntry]) -> HistoryTree:
    """Build a validated HistoryTree from the host's top-level entries.

    The result is deterministic for a given log: parents are resolved in
    ascending seq order, independent of how the log nests its entries.

    """
    root = Node(seq=0)
    nodes, by_seq = _materialize(entries, root)
    relations = classify_relations(entries)

    # Ascending lookups for "nearest smaller" resolution
    trunk_seqs = sorted(relations.trunk & by_seq.keys())
    known_seqs = sorted(by_seq)

    for node in sorted(nodes[1:], key=lambda n: n.seq):
        parent_seq = resolve_parent_seq(node.seq, relations, trunk_seqs, known_seqs)
        parent = by_seq.get(parent_seq, root)
        # Only a node that already has children can be above its parent
        if parent is node or (node.children and node.is_ancestor_of(parent)):
            parent = root
        parent.add_child(node)

    return HistoryTree(nodes)


def classify_relations(entries: Sequence[ChangeLogEntry]) -> BranchRelations:
    """Record alternates lists, branch starts, and trunk membership.

    Duplicate sequence numbers keep the first record made for them.

    """
    relations = BranchRelations(trunk={entry.seq for entry in entries})
    for entry in iter_entries(entries):
        if not entry.alternates or entry.seq in relations.alt_sequences:
            continue
        relations.alt_sequences[entry.seq] = [alt.seq for alt in entry.alternates]
        for position, alt in enumerate(entry.alternates):
            if alt.seq in relations.in_alt_of:
                continue
            relations.in_alt_of[alt.seq] = entry.seq
            relations.alt_position[alt.seq] = position
        relations.branch_starts.setdefault(entry.alternates[0].seq, entry.seq)
    return relations


def resolve_parent_seq(
    seq: int,
    relations: BranchRelations,
    trunk_seqs: Sequence[int],
    known_seqs: Sequence[int],
) -> int:
    """Pick the parent seq for *seq* by the branch, chain, trunk, fallback rules.

    Args:
        seq: The state whose parent is being resolved.
        relations: Output of :func:`classify_relations`.
        trunk_seqs: Ascending trunk seqs that have a node.
        known_seqs: Ascending seqs of every node, root included.

    """
    if seq in relations.branch_starts:
        return relations.branch_starts[seq]

    if seq in relations.in_alt_of:
        owner = relations.in_alt_of[seq]
        position = relations.alt_position[seq]
        if position > 0:
            return relations.alt_sequences[owner][position - 1]
        return owner

    if seq in relations.trunk:
        return _nearest_below(trunk_seqs, seq)

    return _nearest_below(known_seqs, seq)


def _nearest_below(ascending: Sequence[int], seq: int) -> int:
    """Largest value in *ascending* smaller than *seq*, or 0 (the root)."""
    index = bisect_left(ascending, seq)
    return ascending[index - 1] if index > 0 else 0


def _materialize(
    entries: Sequence[ChangeLogEntry], root: Node
) -> tuple[list[Node], dict[int, Node]]:
    """Create one node per distinct seq, root first, in preorder."""
    nodes = [root]
    by_seq = {0: root}
    for entry in iter_entries(entries):
        if entry.seq in by_seq:
            continue
        node = Node(
            seq=entry.seq,
            time=entry.time,
            saved_marker=entry.saved_marker,
            is_branch_head=entry.is_branch_head,
        )
        nodes.append(node)
        by_seq[entry.seq] = node
    return nodes, by_seq
