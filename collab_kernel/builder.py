"""
Collaboration Graph Builder

Orchestrates the pure pipeline:
  events → aggregation → adjacency → {degree, betweenness, communities}
         → nodes + cluster summary → Stats (+ org health)

Every call recomputes from the full event set. Nothing is cached and
no input is mutated.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from .clustering import detect_communities, summarize_clusters
from .constants import TOP_CONNECTOR_LIMIT
from .domain_types import GraphNode, GraphResult, InteractionEvent, Stats, TopConnector
from .graph import aggregate_interactions, build_undirected_adjacency, find_isolated_users
from .health import score_org_health
from .metrics import DegreeMetrics, compute_betweenness_centrality, compute_degree_metrics
from .random_source import RandomSource

logger = logging.getLogger(__name__)


def build_graph(
    events: Sequence[InteractionEvent],
    rng: Optional[RandomSource] = None,
) -> GraphResult:
    """
    Build the collaboration graph and its aggregate stats.

    Deterministic except for community assignment, which depends on
    ``rng``; pass a seeded RandomSource to pin it.
    """
    aggregate = aggregate_interactions(events)
    adj = build_undirected_adjacency(aggregate.node_ids, aggregate.edges)

    degrees = compute_degree_metrics(adj)
    betweenness = compute_betweenness_centrality(adj)
    assignments = detect_communities(adj, rng=rng)

    nodes: List[GraphNode] = []
    for node_id in aggregate.node_ids:
        metrics = degrees.get(node_id) or DegreeMetrics(degree=0, weighted_degree=0)
        nodes.append(GraphNode(
            id=node_id,
            degree=metrics.degree,
            weighted_degree=metrics.weighted_degree,
            betweenness=betweenness.get(node_id, 0.0),
            cluster_id=assignments.get(node_id, 0),
        ))

    stats = Stats(
        node_count=len(nodes),
        edge_count=len(aggregate.edges),
        top_connectors=tuple(rank_top_connectors(nodes)),
        clusters=tuple(summarize_clusters(assignments)),
    )
    health = score_org_health(stats)
    stats = replace(stats, org_health=health.value)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Graph built: %d nodes, %d edges, %d clusters, %d isolated, health=%d (%s)",
            stats.node_count,
            stats.edge_count,
            len(stats.clusters),
            len(find_isolated_users(adj)),
            health.value.score,
            health.status,
        )
    return GraphResult(nodes=tuple(nodes), edges=aggregate.edges, stats=stats)


def rank_top_connectors(
    nodes: Sequence[GraphNode],
    limit: int = TOP_CONNECTOR_LIMIT,
) -> List[TopConnector]:
    """Highest weighted degree first, then degree; stable on ties."""
    ranked = sorted(nodes, key=lambda n: (-n.weighted_degree, -n.degree))
    return [
        TopConnector(id=n.id, degree=n.degree, weighted_degree=n.weighted_degree)
        for n in ranked[:limit]
    ]
