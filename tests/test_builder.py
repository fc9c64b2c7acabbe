"""Tests for undoviz.history.builder — parent resolution from a change log."""

from __future__ import annotations

import random

import pytest

from undoviz.history.builder import BranchRelations, build_tree, classify_relations, resolve_parent_seq
from undoviz.history.entries import ChangeLogEntry, entries_from_mappings, iter_entries
from undoviz.history.node import Node
from undoviz.history.tree import HistoryTree

from .conftest import entry, parent_map


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _random_log(rng: random.Random, count: int) -> list[ChangeLogEntry]:
    """A log of *count* unique states with random nesting of alternates."""
    top: list[dict] = []
    created: list[dict] = []
    for seq in range(1, count + 1):
        raw: dict = {"seq": seq, "time": seq}
        if created and rng.random() < 0.4:
            rng.choice(created).setdefault("alt", []).append(raw)
        else:
            top.append(raw)
        created.append(raw)
    return entries_from_mappings(top)


def _depth_to_root(tree: HistoryTree, seq: int) -> int:
    return len(tree.path_to_root(seq)) - 1


# ---------------------------------------------------------------------------
# Concrete histories
# ---------------------------------------------------------------------------


class TestBuildTree:
    """build_tree — branch, chain and trunk rules."""

    def test_branch_start_and_chained_alternate(self) -> None:
        tree = build_tree([entry(1), entry(2, entry(3), entry(4))])
        assert sorted(tree.nmap) == [0, 1, 2, 3, 4]
        assert parent_map(tree) == {0: None, 1: 0, 2: 1, 3: 2, 4: 3}

    def test_trunk_resumes_from_branch_owner(self) -> None:
        tree = build_tree([entry(1), entry(2, entry(3), entry(4)), entry(5)])
        assert tree[5].parent is tree[2]
        assert [c.seq for c in tree[2].children] == [3, 5]

    def test_nested_alternates(self) -> None:
        log = [
            entry(1, entry(5, entry(6)), entry(7)),
            entry(2),
            entry(3),
        ]
        tree = build_tree(log)
        assert parent_map(tree) == {0: None, 1: 0, 5: 1, 6: 5, 7: 5, 2: 1, 3: 2}

    def test_empty_log(self) -> None:
        tree = build_tree([])
        assert len(tree) == 1
        assert tree.root.children == []

    def test_root_is_seq_zero(self, branching_entries: list[ChangeLogEntry]) -> None:
        tree = build_tree(branching_entries)
        assert tree.root.seq == 0
        assert tree.root.parent is None
        assert tree.root.time == 0

    def test_node_fields_copied(self, branching_entries: list[ChangeLogEntry]) -> None:
        tree = build_tree(branching_entries)
        assert tree[2].saved_marker == 1
        assert tree[2].time == branching_entries[1].time
        assert tree[3].saved_marker is None

    def test_sparse_sequence_numbers(self) -> None:
        tree = build_tree([entry(2), entry(5), entry(9)])
        assert parent_map(tree) == {0: None, 2: 0, 5: 2, 9: 5}

    def test_deterministic(self, branching_entries: list[ChangeLogEntry]) -> None:
        assert parent_map(build_tree(branching_entries)) == parent_map(build_tree(branching_entries))

    def test_rebuild_produces_fresh_nodes(self, branching_entries: list[ChangeLogEntry]) -> None:
        first = build_tree(branching_entries)
        second = build_tree(branching_entries)
        assert first[3] is not second[3]
        assert first[3].parent is first[2]


class TestMalformedLogs:
    """Duplicates and cycles fall back instead of raising."""

    def test_duplicate_seq_first_wins(self) -> None:
        tree = build_tree([entry(1), entry(2, time=20), entry(2, time=99)])
        assert len(tree) == 3
        assert tree[2].time == 20

    def test_seq_zero_entry_ignored(self) -> None:
        tree = build_tree([entry(0), entry(1)])
        assert len(tree) == 2
        assert tree[1].parent is tree.root

    def test_self_reference_attaches_to_root(self) -> None:
        tree = build_tree([entry(4, entry(4))])
        assert len(tree) == 2
        assert tree[4].parent is tree.root

    def test_mutual_reference_is_broken_at_root(self) -> None:
        tree = build_tree([entry(3, entry(2, entry(3)))])
        assert tree[2].parent is tree[3]
        assert tree[3].parent is tree.root
        for node in tree:
            assert _depth_to_root(tree, node.seq) <= len(tree)

    def test_deep_nesting(self) -> None:
        depth = 1000
        nested = entry(depth)
        for seq in range(depth - 1, 0, -1):
            nested = entry(seq, nested)
        tree = build_tree([nested])
        assert len(tree) == depth + 1
        assert _depth_to_root(tree, depth) == depth


class TestLongHistories:
    """Large logs build without walking ancestor chains."""

    def test_long_linear_trunk(self) -> None:
        count = 20_000
        tree = build_tree([entry(seq) for seq in range(1, count + 1)])
        assert len(tree) == count + 1
        assert tree[count].parent is tree[count - 1]
        assert _depth_to_root(tree, count) == count

    def test_childless_nodes_skip_cycle_check(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[int] = []
        original = Node.is_ancestor_of

        def counting(self: Node, other: Node) -> bool:
            calls.append(self.seq)
            return original(self, other)

        monkeypatch.setattr(Node, "is_ancestor_of", counting)
        build_tree([entry(seq) for seq in range(1, 500)])
        assert calls == []


class TestClassifyRelations:
    """classify_relations and resolve_parent_seq in isolation."""

    def test_relations(self) -> None:
        relations = classify_relations([entry(1), entry(2, entry(3), entry(4))])
        assert relations.trunk == {1, 2}
        assert relations.alt_sequences == {2: [3, 4]}
        assert relations.in_alt_of == {3: 2, 4: 2}
        assert relations.alt_position == {3: 0, 4: 1}
        assert relations.branch_starts == {3: 2}

    def test_fallback_to_nearest_known(self) -> None:
        assert resolve_parent_seq(7, BranchRelations(), [], [0, 3, 5, 7]) == 5

    def test_trunk_without_older_trunk_goes_to_root(self) -> None:
        relations = BranchRelations(trunk={4})
        assert resolve_parent_seq(4, relations, [4], [0, 4]) == 0


# ---------------------------------------------------------------------------
# Properties over random logs
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("seed", range(40))
def test_random_log_properties(seed: int) -> None:
    rng = random.Random(seed)
    count = rng.randint(0, 60)
    log = _random_log(rng, count)
    tree = build_tree(log)

    # One node per entry plus the root, keyed by exactly those seqs
    assert len(tree) == count + 1
    assert set(tree.nmap) == {e.seq for e in iter_entries(log)} | {0}

    # Every parent chain reaches the root
    for node in tree:
        assert tree.path_to_root(node.seq)[-1] is tree.root
        assert _depth_to_root(tree, node.seq) <= count

    # First alternate hangs off its owner, later ones chain
    for owner in iter_entries(log):
        previous = owner
        for alt in owner.alternates:
            assert tree[alt.seq].parent is tree[previous.seq]
            previous = alt
