"""Tests for cluster matching, template generalization and the cluster store."""
import threading

import pytest

from drainminer.cluster import ClusterListing, ClusterStore, Logcluster, absorb, fastMatch, getTemplate, seqDist
from drainminer.tree import Node, NodeKind


def test_seq_dist_counts_literal_matches_only():
    assert seqDist(['a', 'b', 'c'], ['a', 'b', 'c']) == 1.0
    assert seqDist(['a', 'b', 'c'], ['a', 'b', 'c'], frozenset({1})) == pytest.approx(2 / 3)
    assert seqDist(['a', 'b', 'c'], ['a', 'x', 'c'], frozenset({1})) == pytest.approx(2 / 3)
    assert seqDist(['x', 'y'], ['a', 'b']) == 0.0


def test_seq_dist_literal_wildcard_text_is_a_literal():
    assert seqDist(['<*>', '<*>'], ['<*>', '<*>']) == 1.0
    assert seqDist(['<*>', 'b'], ['a', 'b']) == 0.5


def test_seq_dist_empty_sequences_fully_match():
    assert seqDist([], []) == 1.0


def test_fast_match_empty_leaf():
    assert fastMatch([], ['a'], 0.1) is None
    assert fastMatch([], [], 0.1) is None


def test_fast_match_prefers_highest_score():
    low = Logcluster(1, ['a', 'x', 'y', 'z'])
    high = Logcluster(2, ['a', 'b', 'c', 'z'])
    assert fastMatch([low, high], ['a', 'b', 'c', 'd'], 0.5) is high


def test_fast_match_tie_keeps_earliest():
    first = Logcluster(1, ['a', 'b', 'x'])
    second = Logcluster(2, ['a', 'b', 'y'])
    assert fastMatch([first, second], ['a', 'b', 'z'], 0.5) is first
    assert fastMatch([second, first], ['a', 'b', 'z'], 0.5) is second


def test_threshold_is_inclusive():
    clust = Logcluster(1, ['a', 'b', 'c', 'd'])
    assert fastMatch([clust], ['a', 'b', 'x', 'y'], 0.5) is clust
    assert fastMatch([clust], ['a', 'b', 'x', 'y'], 0.51) is None

    clust = Logcluster(1, ['a', 'b', 'c', 'd', 'e'])
    assert fastMatch([clust], ['a', 'b', 'c', 'x', 'y'], 0.6) is clust
    assert fastMatch([clust], ['a', 'b', 'c', 'x', 'y'], 0.6000001) is None


def test_get_template_generalizes_mismatches():
    assert getTemplate(['a', 'b', 'c'], ['a', 'x', 'c']) == {1}
    assert getTemplate(['a', 'b', 'c'], ['a', 'b', 'c'], frozenset({1})) == {1}
    assert getTemplate(['a', 'b', 'c'], ['y', 'b', 'c'], frozenset({1})) == {0, 1}
    assert getTemplate(['<*>', 'b'], ['<*>', 'b']) == frozenset()


def test_absorb_is_monotonic():
    clust = Logcluster(1, ['a', 'b', 'c'])
    assert absorb(clust, ['a', 'x', 'c']) is True
    assert clust.rendered() == ['a', '<*>', 'c']
    assert clust.size == 2

    assert absorb(clust, ['a', 'b', 'c']) is False
    assert clust.rendered() == ['a', '<*>', 'c']
    assert clust.size == 3
    assert clust.wildcard_positions() == [1]


def test_new_cluster_has_no_wildcards():
    clust = ClusterStore().create_cluster(Node(NodeKind.LEAF), ['value', '<*>', 'seen'])
    assert clust.wildcards == frozenset()
    assert fastMatch([clust], ['value', '<*>', 'seen'], 1.0) is clust
    assert absorb(clust, ['value', '<*>', 'seen']) is False
    assert clust.get_template() == 'value <*> seen'


def test_snapshot_renders_wildcards():
    clust = Logcluster(1, ['a', 'b', 'c'])
    absorb(clust, ['a', 'x', 'c'])
    snap = ClusterStore.snapshot(clust)
    assert snap.template == ('a', '<*>', 'c')
    assert snap.wildcards == {1}
    assert clust.logTemplate == ['a', 'b', 'c']


def test_store_assigns_sequential_ids():
    store = ClusterStore()
    leaf = Node(NodeKind.LEAF)
    other = Node(NodeKind.LEAF)
    c1 = store.create_cluster(leaf, ['a', 'b'])
    c2 = store.create_cluster(other, ['c'])
    c3 = store.create_cluster(leaf, ['a', 'c'])

    assert [c1.cluster_id, c2.cluster_id, c3.cluster_id] == [1, 2, 3]
    assert leaf.clusters == [c1, c3]
    assert other.clusters == [c2]
    assert c1.size == 1
    assert c1.logTemplate == ['a', 'b']
    assert store.get(2) is c2
    assert len(store) == 3


@pytest.mark.parametrize('cluster_id', [0, 4, -1, True, '1'])
def test_store_get_unknown(cluster_id):
    store = ClusterStore()
    leaf = Node(NodeKind.LEAF)
    for seq in (['a'], ['b'], ['c']):
        store.create_cluster(leaf, seq)
    with pytest.raises(KeyError):
        store.get(cluster_id)


def test_created_template_is_a_copy():
    store = ClusterStore()
    seq = ['a', 'b']
    clust = store.create_cluster(Node(NodeKind.LEAF), seq)
    seq[0] = 'changed'
    assert clust.logTemplate == ['a', 'b']


def test_listing_is_lazy_and_restartable():
    store = ClusterStore()
    leaf = Node(NodeKind.LEAF)
    listing = ClusterListing(store, threading.Lock())
    assert list(listing) == []

    store.create_cluster(leaf, ['a', 'b'])
    store.create_cluster(leaf, ['c', 'd'])
    first = list(listing)
    second = list(listing)
    assert first == second
    assert [snap.id for snap in first] == [1, 2]
    assert len(listing) == 2

    snap = first[0]
    assert snap.template == ('a', 'b')
    assert snap.match_count == 1
    assert snap.to_dict() == {'id': 1, 'template': ['a', 'b'], 'match_count': 1}
    with pytest.raises(AttributeError):
        snap.match_count = 5
