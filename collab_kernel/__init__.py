"""
Collaboration Kernel
Pure, in-memory analytics over workplace chat interactions:
weighted social graph, centrality, communities, org health and insights.
"""

from .domain_types import (
    Reaction,
    InteractionEvent,
    GraphEdge,
    GraphNode,
    TopConnector,
    Cluster,
    HealthComponents,
    HealthScore,
    InsightMeta,
    RuleBasedInsight,
    Stats,
    GraphResult,
    Outcome,
    OUTCOME_COMPUTED,
    OUTCOME_EMPTY,
    OUTCOME_DEGRADED,
)
from .random_source import RandomSource
from .timestamps import normalize_timestamp_ms, parse_timestamp
from .graph import aggregate_interactions, build_undirected_adjacency
from .metrics import compute_degree_metrics, compute_betweenness_centrality
from .clustering import detect_communities, summarize_clusters
from .health import score_org_health, compute_org_health_score
from .insights import evaluate_insights, generate_insights
from .builder import build_graph, rank_top_connectors

__all__ = [
    "Reaction",
    "InteractionEvent",
    "GraphEdge",
    "GraphNode",
    "TopConnector",
    "Cluster",
    "HealthComponents",
    "HealthScore",
    "InsightMeta",
    "RuleBasedInsight",
    "Stats",
    "GraphResult",
    "Outcome",
    "OUTCOME_COMPUTED",
    "OUTCOME_EMPTY",
    "OUTCOME_DEGRADED",
    "RandomSource",
    "normalize_timestamp_ms",
    "parse_timestamp",
    "aggregate_interactions",
    "build_undirected_adjacency",
    "compute_degree_metrics",
    "compute_betweenness_centrality",
    "detect_communities",
    "summarize_clusters",
    "score_org_health",
    "compute_org_health_score",
    "evaluate_insights",
    "generate_insights",
    "build_graph",
    "rank_top_connectors",
]
