"""
Observability — logging setup + in-process pipeline metrics.

No external dependencies. Uses the standard logging module and
perf_counter timing around a full snapshot rebuild.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from collab_kernel.domain_types import OUTCOME_DEGRADED
from collab_kernel.health import score_org_health

if TYPE_CHECKING:
    from .session import AnalysisSession

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SILENT = "silent"


def configure_logging(level_name: Optional[str] = None) -> None:
    """
    Configure root logging from ``level_name`` (default: $LOG_LEVEL, then INFO).

    ``silent`` disables all log output.
    """
    name = (level_name or os.environ.get("LOG_LEVEL") or "INFO").strip()
    if name.lower() == SILENT:
        logging.disable(logging.CRITICAL)
        return

    logging.disable(logging.NOTSET)
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


@dataclass(frozen=True)
class PipelineMetrics:
    """Snapshot of observable pipeline metrics."""

    build_latency_ms: float
    event_count: int
    analyzed_event_count: int
    node_count: int
    edge_count: int
    cluster_count: int
    health_score: int
    health_status: str
    insight_status: str

    @property
    def degraded(self) -> bool:
        return OUTCOME_DEGRADED in (self.health_status, self.insight_status)

    def to_dict(self) -> dict:
        return {
            "build_latency_ms": self.build_latency_ms,
            "event_count": self.event_count,
            "analyzed_event_count": self.analyzed_event_count,
            "node_count": self.node_count,
            "edge_count": self.edge_count,
            "cluster_count": self.cluster_count,
            "health_score": self.health_score,
            "health_status": self.health_status,
            "insight_status": self.insight_status,
            "degraded": self.degraded,
        }


def collect_metrics(session: "AnalysisSession") -> PipelineMetrics:
    """
    Collect metrics from a live session.

    Performs a full snapshot rebuild to measure latency.
    """
    start = time.perf_counter()
    snapshot = session.snapshot()
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    stats = snapshot.graph.stats
    health = score_org_health(stats)

    return PipelineMetrics(
        build_latency_ms=round(elapsed_ms, 2),
        event_count=snapshot.total_event_count,
        analyzed_event_count=snapshot.event_count,
        node_count=stats.node_count,
        edge_count=stats.edge_count,
        cluster_count=len(stats.clusters),
        health_score=health.value.score,
        health_status=health.status,
        insight_status=snapshot.insight_outcome.status,
    )
