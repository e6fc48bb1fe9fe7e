"""
Weekly Digest — human-readable summary of the current snapshot.

Built from Stats (or its dict form) plus a RuleBasedInsight (or its
dict form). Highlights:
  - up to 3 key connectors
  - possible silo clusters, or otherwise the cluster count
Recommendations come from the insight (max 5), else two defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple

from collab_kernel.stats_view import read_field, read_stats

DIGEST_TITLE = "Weekly Org Health Digest"
DEFAULT_RECOMMENDATIONS = (
    "Encourage cross-team touchpoints via recurring syncs.",
    "Distribute responsibilities away from single overloaded connectors when possible.",
)
_MAX_CONNECTORS = 3
_MAX_RECOMMENDATIONS = 5


@dataclass(frozen=True)
class WeeklyDigest:
    title: str
    summary_line: str
    key_highlights: Tuple[str, ...]
    recommendations: Tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "summary_line": self.summary_line,
            "key_highlights": list(self.key_highlights),
            "recommendations": list(self.recommendations),
        }


def build_weekly_digest(stats: Any, insight: Any) -> WeeklyDigest:
    view = read_stats(stats)
    node_count = int(view.node_count)
    edge_count = int(view.edge_count)
    connector_ids = [c.id for c in view.connectors]

    summary_line = (
        f"Collaboration snapshot shows {node_count} "
        f"{'user' if node_count == 1 else 'users'} and {edge_count} interaction "
        f"{'link' if edge_count == 1 else 'links'}."
    )

    highlights: List[str] = []
    if connector_ids:
        one = len(connector_ids) == 1
        highlights.append(
            f"{', '.join(connector_ids[:_MAX_CONNECTORS])} {'acts' if one else 'act'} "
            f"as key connector{'' if one else 's'}."
        )

    silos = list(read_field(read_field(insight, "meta"), "possible_silos") or [])
    if silos:
        one = len(silos) == 1
        highlights.append(
            f"Cluster{'' if one else 's'} {', '.join(str(s) for s in silos)} "
            f"{'appears' if one else 'appear'} relatively isolated."
        )
    else:
        cluster_count = len(view.clusters)
        highlights.append(
            "Single main cluster observed."
            if cluster_count <= 1
            else f"Multiple clusters observed ({cluster_count})."
        )

    recommendations = list(read_field(insight, "recommendations") or [])
    if recommendations:
        chosen = tuple(recommendations[:_MAX_RECOMMENDATIONS])
    else:
        chosen = DEFAULT_RECOMMENDATIONS

    return WeeklyDigest(
        title=DIGEST_TITLE,
        summary_line=summary_line,
        key_highlights=tuple(highlights),
        recommendations=chosen,
    )
