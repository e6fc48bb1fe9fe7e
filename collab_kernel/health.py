"""
Org Health Score

Four independent 0..25 components, summed and clamped to 0..100:

  A. Connectivity  — edges per user, saturating at 2 edges/user
  B. Balance       — penalizes a top connector far above the median
                     of the other top connectors
  C. Anti-Silo     — fewer clusters relative to users is better
  D. Cross-Team    — balanced cluster sizes, no single dominant cluster

The score is informational and must never break a request path: any
internal failure is absorbed into a degraded zero score. An empty graph
short-circuits to a zero score with status ``empty``.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from .constants import (
    CLUSTER_FACTOR_FLOOR,
    CLUSTER_FACTOR_STEPS,
    COMPONENT_MAX,
    OVERLOAD_RATIO_NO_MEDIAN,
    SINGLE_CONNECTOR_BALANCE,
)
from .domain_types import (
    OUTCOME_DEGRADED,
    OUTCOME_EMPTY,
    HealthComponents,
    HealthScore,
    Outcome,
)
from .stats_view import StatsView, clamp, median, read_stats, round_half_up

logger = logging.getLogger(__name__)

ZERO_HEALTH = HealthScore(score=0, components=HealthComponents())


def score_org_health(stats: Any) -> Outcome[HealthScore]:
    """Score ``stats`` (a Stats or its dict form), never raising."""
    try:
        view = read_stats(stats)
        if view.node_count == 0:
            return Outcome(value=ZERO_HEALTH, status=OUTCOME_EMPTY, reason="no users")

        a = _connectivity(view)
        b = _balance(view)
        c = _anti_silo(view)
        d = _cross_team(view)

        score = round_half_up(clamp(a + b + c + d, 0, 100))
        health = HealthScore(
            score=score,
            components=HealthComponents(
                connectivity=round_half_up(a),
                balance=round_half_up(b),
                anti_silo=round_half_up(c),
                cross_team=round_half_up(d),
            ),
        )
        logger.debug("Org health score computed: %s", score)
        return Outcome(value=health)
    except Exception as exc:
        logger.warning("Org health scoring degraded: %s", exc)
        return Outcome(value=ZERO_HEALTH, status=OUTCOME_DEGRADED, reason=str(exc))


def compute_org_health_score(stats: Any) -> HealthScore:
    return score_org_health(stats).value


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

def _connectivity(view: StatsView) -> float:
    denom = max(1, view.node_count * 2)
    return COMPONENT_MAX * clamp(view.edge_count / denom, 0, 1)


def _balance(view: StatsView) -> float:
    connectors = view.connectors
    if len(connectors) == 1:
        return SINGLE_CONNECTOR_BALANCE
    if not connectors:
        return COMPONENT_MAX

    top = max(0, connectors[0].weighted_degree)
    others = [max(0, c.weighted_degree) for c in connectors[1:]]
    med = median(others)
    if med > 0:
        ratio = top / med
    else:
        ratio = OVERLOAD_RATIO_NO_MEDIAN if top > 0 else 1
    # ratio 1 -> no penalty, ratio 3 -> full penalty
    overload = clamp((ratio - 1) / 2, 0, 1)
    return COMPONENT_MAX * (1 - overload)


def _anti_silo(view: StatsView) -> float:
    cluster_count = len(view.clusters)
    if view.node_count == 0:
        return 0
    if cluster_count <= 1:
        return COMPONENT_MAX
    frag_ref = max(1, math.floor(view.node_count / 4))
    fragmentation = clamp((cluster_count - 1) / frag_ref, 0, 1)
    return COMPONENT_MAX * (1 - fragmentation)


def _cross_team(view: StatsView) -> float:
    cluster_count = len(view.clusters)
    if cluster_count <= 1 or view.node_count == 0:
        return COMPONENT_MAX if cluster_count <= 1 else 0

    sizes = [max(0, c.size) for c in view.clusters]
    total = sum(sizes) or view.node_count
    mean = total / cluster_count
    variance = sum((s - mean) ** 2 for s in sizes) / cluster_count
    cv = math.sqrt(variance) / mean if mean > 0 else 1
    size_balance = clamp(1 - cv, 0, 1)

    largest_share = max(sizes) / total if total > 0 else 1
    # more than half of all users in one cluster starts the penalty
    dominance = clamp((largest_share - 0.5) / 0.5, 0, 1)

    factor = _cluster_factor(cluster_count)
    index = clamp(size_balance * (1 - 0.5 * dominance) * factor, 0, 1)
    return COMPONENT_MAX * index


def _cluster_factor(cluster_count: int) -> float:
    for limit, factor in CLUSTER_FACTOR_STEPS:
        if cluster_count <= limit:
            return factor
    return CLUSTER_FACTOR_FLOOR
