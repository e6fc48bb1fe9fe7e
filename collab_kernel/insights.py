"""
Rule-Based Insights

Pure function of aggregate stats. Derives:
  - connector users   (first INSIGHT_CONNECTOR_LIMIT top connectors)
  - overloaded users  (top connector far above the others)
  - large clusters / possible silos (relative to average cluster size)
and turns them into ordered summary points and recommendations.
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Sequence, Tuple

from .constants import (
    GROWTH_MIN_USERS,
    INSIGHT_CONNECTOR_LIMIT,
    LARGE_CLUSTER_AVG_FACTOR,
    LARGE_CLUSTER_MIN_SIZE,
    OVERLOAD_MIN_WEIGHTED_DEGREE,
    SILO_AVG_FACTOR,
    SILO_MAX_SIZE,
)
from .domain_types import (
    OUTCOME_COMPUTED,
    OUTCOME_DEGRADED,
    OUTCOME_EMPTY,
    InsightMeta,
    Outcome,
    RuleBasedInsight,
)
from .stats_view import ConnectorView, read_stats

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA = RuleBasedInsight(
    summary_points=("Insufficient data to compute insights at this time.",),
    recommendations=(),
    meta=InsightMeta(),
)


def evaluate_insights(stats: Any) -> Outcome[RuleBasedInsight]:
    """Generate insights for ``stats``; failures yield INSUFFICIENT_DATA."""
    try:
        insight, node_count = _build_insight(stats)
    except Exception as exc:
        logger.warning("Insight generation degraded: %s", exc)
        return Outcome(value=INSUFFICIENT_DATA, status=OUTCOME_DEGRADED, reason=str(exc))

    status = OUTCOME_EMPTY if node_count == 0 else OUTCOME_COMPUTED
    return Outcome(value=insight, status=status)


def generate_insights(stats: Any) -> RuleBasedInsight:
    return evaluate_insights(stats).value


def _build_insight(stats: Any) -> Tuple[RuleBasedInsight, int]:
    view = read_stats(stats)
    node_count = int(view.node_count)
    edge_count = int(view.edge_count)
    clusters = view.clusters

    connector_users = [c.id for c in view.connectors[:INSIGHT_CONNECTOR_LIMIT]]
    overloaded_users = _overloaded(view.connectors)

    sizes = [c.size for c in clusters]
    avg_size = sum(sizes) / len(sizes) if sizes else 0
    large_threshold = max(LARGE_CLUSTER_MIN_SIZE, math.ceil(LARGE_CLUSTER_AVG_FACTOR * avg_size))
    large_clusters = [c.cluster_id for c in clusters if c.size >= large_threshold]

    possible_silos: List[Any] = []
    if len(clusters) > 1:
        silo_threshold = max(SILO_MAX_SIZE, math.floor(SILO_AVG_FACTOR * avg_size))
        possible_silos = [c.cluster_id for c in clusters if c.size <= silo_threshold]

    summary: List[str] = [
        f"There {_be(node_count)} {node_count} active "
        f"{'user' if node_count == 1 else 'users'} with {edge_count} interaction "
        f"{'link' if edge_count == 1 else 'links'}."
    ]
    if connector_users:
        one = len(connector_users) == 1
        summary.append(
            f"{', '.join(connector_users)} {'is' if one else 'are'} "
            f"key connector{'' if one else 's'} in the network."
        )
    if possible_silos:
        one = len(possible_silos) == 1
        summary.append(
            f"Cluster{'' if one else 's'} {_join(possible_silos)} "
            f"look{'s' if one else ''} relatively isolated compared to the rest."
        )

    recommendations: List[str] = []
    if possible_silos:
        one = len(possible_silos) == 1
        recommendations.append(
            f"Encourage cross-team touchpoints between cluster{'' if one else 's'} "
            f"{_join(possible_silos)} and the main group "
            f"(e.g., a recurring sync or shared channels)."
        )
    if overloaded_users:
        recommendations.append(
            f"Distribute responsibilities from a single overloaded connector "
            f"({', '.join(overloaded_users)}) where possible to avoid bottlenecks."
        )
    if node_count > 0 and len(clusters) > 1 and not recommendations:
        recommendations.append(
            "Promote cross-cluster collaboration via joint updates or informal coffee chats."
        )
    if node_count < GROWTH_MIN_USERS:
        recommendations.append(
            "Invite more team members to use the channel to grow the collaboration graph."
        )

    insight = RuleBasedInsight(
        summary_points=tuple(summary),
        recommendations=tuple(recommendations),
        meta=InsightMeta(
            possible_silos=tuple(possible_silos),
            overloaded_users=tuple(overloaded_users),
            connector_users=tuple(connector_users),
            large_clusters=tuple(large_clusters),
        ),
    )
    return insight, node_count


def _overloaded(connectors: Sequence[ConnectorView]) -> List[str]:
    """
    Flag the top connector when its weighted degree reaches
    max(OVERLOAD_MIN_WEIGHTED_DEGREE, 2 * median of the others).
    The median is the upper-middle element for even counts.
    """
    if not connectors:
        return []
    ranked = sorted(connectors, key=lambda c: c.weighted_degree, reverse=True)
    top = ranked[0]
    others = sorted(c.weighted_degree for c in ranked[1:])
    median_others = others[len(others) // 2] if others else 0
    if top.weighted_degree >= max(OVERLOAD_MIN_WEIGHTED_DEGREE, 2 * median_others):
        return [top.id]
    return []


def _be(count: int) -> str:
    return "is" if count == 1 else "are"


def _join(values: Sequence[Any]) -> str:
    return ", ".join(str(v) for v in values)
