"""
Chat Slash Commands.

  /socialgraph — snapshot: user / link counts, top connectors,
                 cluster count, possible silos, visualizer link
  /insights    — rule-based summary points as bullets

Any other command yields a help text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from collab_kernel.stats_view import read_field, read_stats

logger = logging.getLogger(__name__)

SOCIALGRAPH_COMMAND = "/socialgraph"
INSIGHTS_COMMAND = "/insights"
HELP_TEXT = "Unknown command. Available commands: /socialgraph, /insights."
NO_INSIGHTS_TEXT = "No insights available yet."


@dataclass(frozen=True)
class CommandReply:
    text: str
    title: Optional[str] = None
    subtitle: Optional[str] = None
    link: Optional[str] = None
    bullets: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> dict:
        out: dict = {}
        if self.title is not None:
            out["title"] = self.title
        if self.subtitle is not None:
            out["subtitle"] = self.subtitle
        out["text"] = self.text
        if self.link is not None:
            out["link"] = self.link
        if self.bullets is not None:
            out["bullets"] = list(self.bullets)
        return out


def handle_command(
    command: Any,
    stats: Any,
    insight: Any,
    base_url: str,
) -> CommandReply:
    """
    ``stats`` and ``insight`` may be dataclasses or their serialized
    dicts (anonymized payloads are dicts).
    """
    cmd = str(command or "").strip()
    logger.debug("Handling chat command %r", cmd)

    if cmd == SOCIALGRAPH_COMMAND:
        return _socialgraph(stats, insight, base_url)
    if cmd == INSIGHTS_COMMAND:
        return _insights(insight)
    return CommandReply(text=HELP_TEXT)


def _socialgraph(stats: Any, insight: Any, base_url: str) -> CommandReply:
    view = read_stats(stats)
    n = int(view.node_count)
    m = int(view.edge_count)
    cluster_count = len(view.clusters)
    top = ", ".join(c.id for c in view.connectors[:3])
    silos = list(read_field(read_field(insight, "meta"), "possible_silos") or [])

    parts: List[str] = [
        f"There {'is' if n == 1 else 'are'} {n} active {'user' if n == 1 else 'users'} "
        f"and {m} interaction {'link' if m == 1 else 'links'}."
    ]
    if top:
        parts.append(f"Top connectors: {top}.")
    if cluster_count > 0:
        parts.append(
            f"Detected {cluster_count} {'cluster' if cluster_count == 1 else 'clusters'}."
        )
    if silos:
        parts.append(
            f"Possible silo in cluster{'' if len(silos) == 1 else 's'} "
            f"{', '.join(str(s) for s in silos)}."
        )

    return CommandReply(
        title="Workplace Social Graph Snapshot",
        subtitle="Quick view of current collaboration patterns",
        text=" ".join(parts),
        link=f"{base_url.rstrip('/')}/visualizer",
    )


def _insights(insight: Any) -> CommandReply:
    bullets = tuple(read_field(insight, "summary_points") or ())
    text = "\n".join(f"- {b}" for b in bullets) if bullets else NO_INSIGHTS_TEXT
    return CommandReply(
        title="Org Health Insights",
        subtitle="Summary of collaboration patterns",
        text=text,
        bullets=bullets,
    )
