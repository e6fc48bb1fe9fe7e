"""
Stats View — tolerant read access to aggregate stats.

HealthScorer and InsightGenerator receive either a ``Stats`` instance
or its serialized dict (as passed around by HTTP handlers and digest
builders). Both shapes are flattened into a StatsView here. Missing
fields read as empty; a stats value or connector / cluster entry that
is neither a mapping nor a dataclass, and wrongly-typed numbers, raise
TypeError and are absorbed by the callers' degradation path.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, is_dataclass
from typing import Any, List, Mapping, Sequence, Tuple


@dataclass(frozen=True)
class ConnectorView:
    id: str
    degree: float
    weighted_degree: float


@dataclass(frozen=True)
class ClusterView:
    cluster_id: Any
    size: float


@dataclass(frozen=True)
class StatsView:
    node_count: float
    edge_count: float
    connectors: Tuple[ConnectorView, ...]
    clusters: Tuple[ClusterView, ...]


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)


def read_field(obj: Any, key: str) -> Any:
    """Field ``key`` of a mapping or attribute holder; None when absent."""
    return _get(obj, key)


def _record(obj: Any, what: str) -> Any:
    if isinstance(obj, Mapping) or (is_dataclass(obj) and not isinstance(obj, type)):
        return obj
    raise TypeError(f"Expected {what} to be a mapping, got {obj!r}")


def _number(value: Any) -> float:
    """Falsy → 0; numbers pass through; anything else raises TypeError."""
    if not value:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected a number, got {value!r}")
    return value


def _sequence(value: Any) -> Sequence[Any]:
    if isinstance(value, (list, tuple)):
        return value
    return ()


def read_stats(stats: Any) -> StatsView:
    """``None`` reads as empty stats; other non-record values raise TypeError."""
    if stats is not None:
        _record(stats, "stats")

    connectors: List[ConnectorView] = []
    for raw in _sequence(_get(stats, "top_connectors")):
        raw = _record(raw, "connector")
        connectors.append(ConnectorView(
            id=str(_get(raw, "id", "")),
            degree=_number(_get(raw, "degree", 0)),
            weighted_degree=_number(_get(raw, "weighted_degree", 0)),
        ))

    clusters: List[ClusterView] = []
    for raw in _sequence(_get(stats, "clusters")):
        raw = _record(raw, "cluster")
        clusters.append(ClusterView(
            cluster_id=_get(raw, "cluster_id"),
            size=_number(_get(raw, "size", 0)),
        ))

    return StatsView(
        node_count=_number(_get(stats, "node_count", 0)),
        edge_count=_number(_get(stats, "edge_count", 0)),
        connectors=tuple(connectors),
        clusters=tuple(clusters),
    )


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def median(values: Sequence[float]) -> float:
    """Classic median; average of the two middle values on even counts."""
    if not values:
        return 0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def round_half_up(value: float) -> int:
    """0.5 rounds away from zero for non-negative values (2.5 -> 3)."""
    return int(math.floor(value + 0.5))
