"""
Collaboration Kernel — Graph Test Scenarios

Covers:
  - Event aggregation (weights, reply resolution, dropped contributions)
  - Symmetric adjacency
  - Degree metrics + weight conservation
  - Betweenness (tiny graphs, star, path, triangles)
  - Label propagation (seeded reproducibility, dense ids, weighted draw)
  - Cluster summary + top connector ranking
  - Timestamp normalization, event (de)serialisation
  - Isolated-user count in the DEBUG build log

Run:  python -m collab_kernel.test_scenarios
"""

from __future__ import annotations

import logging
import sys
import traceback

from collab_kernel import (
    GraphEdge,
    InteractionEvent,
    RandomSource,
    Reaction,
    aggregate_interactions,
    build_graph,
    build_undirected_adjacency,
    compute_betweenness_centrality,
    compute_degree_metrics,
    detect_communities,
    normalize_timestamp_ms,
    rank_top_connectors,
    summarize_clusters,
)
from collab_kernel.clustering import _weighted_random_choice
from collab_kernel.domain_types import Cluster, GraphNode
from collab_kernel.graph import find_isolated_users


def _header(title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


def _evt(
    eid: str,
    sender: str | None,
    mentions=(),
    reply_to: str | None = None,
    reactors=(),
    channel: str = "general",
) -> InteractionEvent:
    return InteractionEvent(
        id=eid,
        channel=channel,
        sender=sender,
        mentions=tuple(mentions),
        reply_to=reply_to,
        reactions=tuple(Reaction(user=u, emoji=":+1:") for u in reactors),
        timestamp=1_700_000_000,
    )


def _star_events(hub: str = "hub", leaves: int = 5) -> list:
    return [
        _evt(f"m{i}", f"s{i}", mentions=[hub]) for i in range(1, leaves + 1)
    ]


def _triangle_events() -> list:
    return [
        _evt("t1", "ann", mentions=["ben"]),
        _evt("t2", "ben", mentions=["cat"]),
        _evt("t3", "cat", mentions=["ann"]),
        _evt("t4", "xia", mentions=["yan"]),
        _evt("t5", "yan", mentions=["zoe"]),
        _evt("t6", "zoe", mentions=["xia"]),
    ]


class _FixedRNG:
    """Stand-in RandomSource returning a constant draw."""

    def __init__(self, value: float) -> None:
        self._value = value

    def rand_float(self) -> float:
        return self._value

    def shuffle(self, seq: list) -> None:
        pass


# ═══════════════════════════════════════════════════════════════
#  AGGREGATION
# ═══════════════════════════════════════════════════════════════

def test_01_empty_event_set() -> None:
    _header("01 — Empty event set")
    result = build_graph([], rng=RandomSource(1))

    assert result.nodes == ()
    assert result.edges == ()
    assert result.stats.node_count == 0
    assert result.stats.edge_count == 0
    assert result.stats.clusters == ()
    assert result.stats.top_connectors == ()
    assert result.stats.org_health.score == 0


def test_02_mention_reply_reaction_weights() -> None:
    _header("02 — Mention / reply / reaction weights accumulate per pair")
    events = [
        _evt("m1", "alice", mentions=["bob"]),
        _evt("m2", "bob", reply_to="m1"),
        _evt("m3", "carol", reactors=["alice"]),
    ]
    agg = aggregate_interactions(events)

    assert agg.node_ids == ("alice", "bob", "carol"), agg.node_ids
    assert agg.edges == (
        GraphEdge(from_id="alice", to_id="bob", weight=5),
        GraphEdge(from_id="alice", to_id="carol", weight=1),
    ), agg.edges

    result = build_graph(events, rng=RandomSource(3))
    alice = result.node("alice")
    assert alice.degree == 2
    assert alice.weighted_degree == 6
    assert result.node("bob").weighted_degree == 5
    assert result.node("carol").weighted_degree == 1


def test_03_unresolved_reply_is_user_id() -> None:
    _header("03 — Unresolved reply target treated as a user id")
    agg = aggregate_interactions([_evt("m1", "erin", reply_to="dave")])

    assert set(agg.node_ids) == {"erin", "dave"}
    assert agg.edges == (GraphEdge(from_id="erin", to_id="dave", weight=2),)


def test_04_dropped_contributions_keep_nodes() -> None:
    _header("04 — Self-loops and missing counterparts dropped, ids kept")
    events = [
        _evt("m1", "alice", mentions=["alice"]),
        _evt("m2", None, mentions=["bob"]),
        _evt("m3", None, reactors=["carol"]),
        InteractionEvent(id="m4", sender="alice", reactions=(Reaction(user=""),)),
        _evt("m5", "alice", mentions=[""]),
    ]
    result = build_graph(events, rng=RandomSource(5))

    assert result.stats.edge_count == 0
    assert result.stats.node_count == 3
    assert {n.id for n in result.nodes} == {"alice", "bob", "carol"}
    assert sum(c.size for c in result.stats.clusters) == 3
    assert len(result.stats.clusters) == 3


def test_05_reaction_event_does_not_shadow_author() -> None:
    _header("05 — Sender-less reaction reusing a message id keeps reply lookup")
    events = [
        _evt("m1", "alice", mentions=[]),
        _evt("m1", None, reactors=["bob"]),
        _evt("m2", "carol", reply_to="m1"),
    ]
    agg = aggregate_interactions(events)

    assert "m1" not in agg.node_ids
    assert agg.edges == (GraphEdge(from_id="carol", to_id="alice", weight=2),)


# ═══════════════════════════════════════════════════════════════
#  ADJACENCY + DEGREE
# ═══════════════════════════════════════════════════════════════

def test_06_adjacency_is_symmetric_and_skips_non_positive() -> None:
    _header("06 — Adjacency symmetric, weights not doubled")
    adj = build_undirected_adjacency(
        ["a", "b", "c", "d"],
        [
            GraphEdge("a", "b", 3),
            GraphEdge("b", "c", 0),
            GraphEdge("c", "d", -2),
        ],
    )

    assert adj == {"a": {"b": 3}, "b": {"a": 3}, "c": {}, "d": {}}, adj


def test_07_weight_conservation() -> None:
    _header("07 — sum(weighted degree) == 2 * sum(edge weights)")
    events = _triangle_events() + [
        _evt("x1", "ann", mentions=["xia", "ben"], reactors=["zoe", "cat"]),
        _evt("x2", "xia", reply_to="x1", reactors=["ann"]),
        _evt("x3", "ben", reply_to="t5"),
    ]
    result = build_graph(events, rng=RandomSource(11))

    total_weighted = sum(n.weighted_degree for n in result.nodes)
    total_edges = sum(e.weight for e in result.edges)
    assert total_weighted == 2 * total_edges, (total_weighted, total_edges)
    assert all(e.weight > 0 for e in result.edges)
    assert all(e.from_id != e.to_id for e in result.edges)

    adj = build_undirected_adjacency([n.id for n in result.nodes], result.edges)
    degrees = compute_degree_metrics(adj)
    for node in result.nodes:
        assert degrees[node.id].degree == node.degree


# ═══════════════════════════════════════════════════════════════
#  BETWEENNESS
# ═══════════════════════════════════════════════════════════════

def test_08_betweenness_tiny_graphs_are_zero() -> None:
    _header("08 — Betweenness is zero for <= 2 nodes")
    assert compute_betweenness_centrality({}) == {}
    assert compute_betweenness_centrality({"a": {}}) == {"a": 0.0}
    assert compute_betweenness_centrality({"a": {"b": 3}, "b": {"a": 3}}) == {
        "a": 0.0,
        "b": 0.0,
    }


def test_09_star_graph() -> None:
    _header("09 — Star: hub lies on every leaf-to-leaf path")
    result = build_graph(_star_events(), rng=RandomSource(9))

    assert result.stats.node_count == 6
    assert result.stats.edge_count == 5
    hub = result.node("hub")
    assert hub.weighted_degree == 15
    assert hub.degree == 5
    assert hub.betweenness == 10.0, hub.betweenness
    for i in range(1, 6):
        assert result.node(f"s{i}").betweenness == 0.0


def test_10_path_graph() -> None:
    _header("10 — Path a-b-c-d")
    adj = build_undirected_adjacency(
        ["a", "b", "c", "d"],
        [GraphEdge("a", "b", 1), GraphEdge("b", "c", 5), GraphEdge("c", "d", 2)],
    )
    bc = compute_betweenness_centrality(adj)

    assert bc == {"a": 0.0, "b": 2.0, "c": 2.0, "d": 0.0}, bc


def test_11_square_splits_paths() -> None:
    _header("11 — 4-cycle: two shortest paths share the credit")
    adj = build_undirected_adjacency(
        ["a", "b", "c", "d"],
        [
            GraphEdge("a", "b", 1),
            GraphEdge("b", "c", 1),
            GraphEdge("c", "d", 1),
            GraphEdge("d", "a", 1),
        ],
    )
    bc = compute_betweenness_centrality(adj)

    for node in "abcd":
        assert abs(bc[node] - 0.5) < 1e-9, bc


# ═══════════════════════════════════════════════════════════════
#  COMMUNITIES
# ═══════════════════════════════════════════════════════════════

def test_12_two_disjoint_triangles() -> None:
    _header("12 — Two disjoint triangles form two clusters")
    result = build_graph(_triangle_events(), rng=RandomSource(7))

    clusters = result.stats.clusters
    assert len(clusters) == 2, clusters
    assert sorted(c.nodes for c in clusters) == [
        ("ann", "ben", "cat"),
        ("xia", "yan", "zoe"),
    ]
    assert all(c.size == 3 for c in clusters)
    assert all(n.betweenness == 0.0 for n in result.nodes)


def test_13_cluster_coverage() -> None:
    _header("13 — Every node sits in exactly one emitted cluster")
    events = _triangle_events() + _star_events() + [
        _evt("c1", "ann", mentions=["hub"]),
        _evt("c2", "solo"),
    ]
    result = build_graph(events, rng=RandomSource(13))

    by_id = {c.cluster_id: c for c in result.stats.clusters}
    assert sum(c.size for c in by_id.values()) == result.stats.node_count
    assert sorted(by_id) == list(range(len(by_id)))
    for node in result.nodes:
        assert node.id in by_id[node.cluster_id].nodes
        others = [c for cid, c in by_id.items() if cid != node.cluster_id]
        assert all(node.id not in c.nodes for c in others)


def test_14_seeded_reproducibility() -> None:
    _header("14 — Same seed, same cluster assignment")
    events = _triangle_events() + _star_events() + [
        _evt("c1", "ann", mentions=["hub", "xia"]),
        _evt("c2", "s1", mentions=["yan"], reactors=["cat"]),
    ]
    first = build_graph(events, rng=RandomSource(2024))
    second = build_graph(events, rng=RandomSource(2024))

    assert [n.cluster_id for n in first.nodes] == [n.cluster_id for n in second.nodes]
    assert first.stats.clusters == second.stats.clusters


def test_15_trivial_graphs() -> None:
    _header("15 — Zero / one node graphs skip propagation")
    assert detect_communities({}) == {}
    assert detect_communities({"a": {}}) == {"a": 0}


def test_16_isolated_nodes_stay_singletons() -> None:
    _header("16 — Isolated nodes keep their own dense label")
    labels = detect_communities({"a": {}, "b": {}, "c": {}}, rng=RandomSource(1))

    assert labels == {"a": 0, "b": 1, "c": 2}, labels


def test_17_weighted_choice() -> None:
    _header("17 — Weighted draw is proportional to label mass")
    entries = [(1, 1), (2, 3)]

    assert _weighted_random_choice(entries, _FixedRNG(0.0)) == 1
    assert _weighted_random_choice(entries, _FixedRNG(0.2)) == 1
    assert _weighted_random_choice(entries, _FixedRNG(0.3)) == 2
    assert _weighted_random_choice(entries, _FixedRNG(0.99)) == 2
    assert _weighted_random_choice([(4, 0), (5, 0)], _FixedRNG(0.5)) == 4


def test_18_propagation_with_fixed_draw() -> None:
    _header("18 — Fixed draw pulls a pendant node into its neighbour's label")
    adj = {"a": {"b": 2}, "b": {"a": 2}}
    labels = detect_communities(adj, rng=_FixedRNG(0.5))

    assert labels == {"a": 0, "b": 0}, labels


def test_19_summarize_clusters_sorted() -> None:
    _header("19 — Cluster summary sorted by id, members sorted")
    clusters = summarize_clusters({"b": 1, "a": 1, "c": 0})

    assert clusters == [
        Cluster(cluster_id=0, size=1, nodes=("c",)),
        Cluster(cluster_id=1, size=2, nodes=("a", "b")),
    ], clusters


def test_20_top_connectors_ranking() -> None:
    _header("20 — Top connectors: weighted degree, then degree, max 5")
    nodes = [
        GraphNode(id="a", degree=1, weighted_degree=3),
        GraphNode(id="b", degree=3, weighted_degree=9),
        GraphNode(id="c", degree=4, weighted_degree=9),
        GraphNode(id="d", degree=2, weighted_degree=4),
        GraphNode(id="e", degree=2, weighted_degree=4),
        GraphNode(id="f", degree=1, weighted_degree=1),
        GraphNode(id="g", degree=1, weighted_degree=2),
    ]
    ranked = rank_top_connectors(nodes)

    assert [c.id for c in ranked] == ["c", "b", "d", "e", "a"], ranked


# ═══════════════════════════════════════════════════════════════
#  BOUNDARY HELPERS
# ═══════════════════════════════════════════════════════════════

def test_21_timestamp_normalization() -> None:
    _header("21 — Seconds vs milliseconds by magnitude")
    assert normalize_timestamp_ms(1_700_000_000) == 1_700_000_000_000
    assert normalize_timestamp_ms(1_700_000_000_123) == 1_700_000_000_123
    assert normalize_timestamp_ms("1700000000") == 1_700_000_000_000
    assert normalize_timestamp_ms("1700000000.75") == 1_700_000_000_000
    assert normalize_timestamp_ms(999_999_999_999) == 999_999_999_999_000
    assert normalize_timestamp_ms(1_000_000_000_000) == 1_000_000_000_000
    assert normalize_timestamp_ms("not-a-time") is None
    assert normalize_timestamp_ms(None) is None
    assert normalize_timestamp_ms(float("nan")) is None


def test_22_event_dict_roundtrip_skips_malformed() -> None:
    _header("22 — Stored event shape, malformed entries skipped")
    event = InteractionEvent.from_dict({
        "message_id": "m1",
        "channel_id": "c1",
        "sender_id": "alice",
        "mentions": ["bob", "", None],
        "replies_to": None,
        "reactions": [{"user_id": "carol", "emoji": "x"}, {"emoji": "y"}, "bad"],
        "timestamp": "1700000000",
    })

    assert event.mentions == ("bob",)
    assert event.reactions == (Reaction(user="carol", emoji="x"),)
    assert InteractionEvent.from_dict(event.to_dict()) == event


class _RecordingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(logging.DEBUG)
        self.messages: list = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


def test_23_isolated_users_logged_only_at_debug() -> None:
    _header("23 — Isolated-user count is logged only when DEBUG is on")
    assert find_isolated_users({"c": {}, "a": {"b": 1}, "b": {"a": 1}, "d": {}}) == ["c", "d"]

    events = [_evt("e1", "ann", mentions=("ben",)), _evt("e2", "solo")]
    builder_logger = logging.getLogger("collab_kernel.builder")
    handler = _RecordingHandler()
    previous = builder_logger.level
    builder_logger.addHandler(handler)
    try:
        builder_logger.setLevel(logging.INFO)
        quiet = build_graph(events, rng=RandomSource(23))
        assert handler.messages == []

        builder_logger.setLevel(logging.DEBUG)
        loud = build_graph(events, rng=RandomSource(23))
        built = [m for m in handler.messages if m.startswith("Graph built")]
        assert len(built) == 1, handler.messages
        assert "3 nodes, 1 edges" in built[0]
        assert "1 isolated" in built[0]
    finally:
        builder_logger.removeHandler(handler)
        builder_logger.setLevel(previous)

    assert quiet.stats.to_dict() == loud.stats.to_dict()


# ═══════════════════════════════════════════════════════════════
#  RUNNER
# ═══════════════════════════════════════════════════════════════

def main() -> None:
    tests = [
        test_01_empty_event_set,
        test_02_mention_reply_reaction_weights,
        test_03_unresolved_reply_is_user_id,
        test_04_dropped_contributions_keep_nodes,
        test_05_reaction_event_does_not_shadow_author,
        test_06_adjacency_is_symmetric_and_skips_non_positive,
        test_07_weight_conservation,
        test_08_betweenness_tiny_graphs_are_zero,
        test_09_star_graph,
        test_10_path_graph,
        test_11_square_splits_paths,
        test_12_two_disjoint_triangles,
        test_13_cluster_coverage,
        test_14_seeded_reproducibility,
        test_15_trivial_graphs,
        test_16_isolated_nodes_stay_singletons,
        test_17_weighted_choice,
        test_18_propagation_with_fixed_draw,
        test_19_summarize_clusters_sorted,
        test_20_top_connectors_ranking,
        test_21_timestamp_normalization,
        test_22_event_dict_roundtrip_skips_malformed,
        test_23_isolated_users_logged_only_at_debug,
    ]

    passed = 0
    for fn in tests:
        try:
            fn()
            print(f"\n[PASS] {fn.__name__}")
            passed += 1
        except Exception as e:
            print(f"\n[FAIL] {fn.__name__}: {e}")
            traceback.print_exc()

    print(f"\n{'='*60}")
    print(f"  RESULTS: {passed}/{len(tests)} scenarios passed")
    print(f"{'='*60}")
    sys.exit(0 if passed == len(tests) else 1)


if __name__ == "__main__":
    main()
