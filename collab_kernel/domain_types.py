"""
Collaboration Kernel — Core Domain Types

Pure data. No behaviour beyond (de)serialisation helpers.

────────────────────────────────────────────────
DOMAIN GLOSSARY
────────────────────────────────────────────────

Weighted degree:
    Sum of a user's incident edge weights.

Connector:
    A user with high weighted degree, mediating a large share of
    interactions.

Silo:
    A cluster that is small relative to the average cluster size.

────────────────────────────────────────────────
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar, Union

T = TypeVar("T")

Timestamp = Union[int, float, str, None]


# ── Input Events ──────────────────────────────────────────────

@dataclass(frozen=True)
class Reaction:
    """A single emoji reaction left by ``user`` on an event."""

    user: str
    emoji: str = ""


@dataclass(frozen=True)
class InteractionEvent:
    """
    One normalized unit of chat activity.

    ``sender`` is None for reaction-only events.
    ``reply_to`` references a prior event id (or, when unresolved,
    a user identifier directly).
    ``timestamp`` is kept as received: seconds or milliseconds.
    """

    id: str
    channel: str = ""
    sender: Optional[str] = None
    mentions: Tuple[str, ...] = ()
    reply_to: Optional[str] = None
    reactions: Tuple[Reaction, ...] = ()
    timestamp: Timestamp = None

    def to_dict(self) -> dict:
        """Stored / wire shape used by repositories and the HTTP layer."""
        return {
            "message_id": self.id,
            "channel_id": self.channel,
            "sender_id": self.sender,
            "mentions": list(self.mentions),
            "replies_to": self.reply_to,
            "reactions": [
                {"user_id": r.user, "emoji": r.emoji} for r in self.reactions
            ],
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InteractionEvent":
        """
        Build an event from its stored shape.

        Malformed sub-entries (non-string mentions, reactions without
        a user) are skipped rather than rejected.
        """
        mentions = tuple(
            str(m) for m in (data.get("mentions") or []) if m
        )
        reactions: List[Reaction] = []
        for raw in data.get("reactions") or []:
            if not isinstance(raw, Mapping) or not raw.get("user_id"):
                continue
            reactions.append(
                Reaction(user=str(raw["user_id"]), emoji=str(raw.get("emoji") or ""))
            )
        sender = data.get("sender_id")
        reply_to = data.get("replies_to")
        return cls(
            id=str(data.get("message_id") or ""),
            channel=str(data.get("channel_id") or ""),
            sender=str(sender) if sender else None,
            mentions=mentions,
            reply_to=str(reply_to) if reply_to else None,
            reactions=tuple(reactions),
            timestamp=data.get("timestamp"),
        )


# ── Graph Types ───────────────────────────────────────────────

@dataclass(frozen=True)
class GraphEdge:
    """Undirected, accumulated interaction edge. weight >= 1, no self-loops."""

    from_id: str
    to_id: str
    weight: int

    def to_dict(self) -> dict:
        return {"from": self.from_id, "to": self.to_id, "weight": self.weight}


@dataclass(frozen=True)
class GraphNode:
    """A user with all computed structural attributes."""

    id: str
    degree: int = 0
    weighted_degree: int = 0
    betweenness: float = 0.0
    cluster_id: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "degree": self.degree,
            "weighted_degree": self.weighted_degree,
            "betweenness": self.betweenness,
            "cluster_id": self.cluster_id,
        }


@dataclass(frozen=True)
class TopConnector:
    id: str
    degree: int
    weighted_degree: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "degree": self.degree,
            "weighted_degree": self.weighted_degree,
        }


@dataclass(frozen=True)
class Cluster:
    """
    Reportable community.

    cluster_id: dense id in 0..k-1.
    nodes: member identifiers, lexicographically sorted.
    """

    cluster_id: int
    size: int
    nodes: Tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "cluster_id": self.cluster_id,
            "size": self.size,
            "nodes": list(self.nodes),
        }


# ── Scores & Insights ─────────────────────────────────────────

@dataclass(frozen=True)
class HealthComponents:
    """Four sub-scores, each an integer in 0..25."""

    connectivity: int = 0
    balance: int = 0
    anti_silo: int = 0
    cross_team: int = 0

    def to_dict(self) -> dict:
        return {
            "connectivity": self.connectivity,
            "balance": self.balance,
            "anti_silo": self.anti_silo,
            "cross_team": self.cross_team,
        }


@dataclass(frozen=True)
class HealthScore:
    score: int = 0
    components: HealthComponents = field(default_factory=HealthComponents)

    def to_dict(self) -> dict:
        return {"score": self.score, "components": self.components.to_dict()}


@dataclass(frozen=True)
class InsightMeta:
    possible_silos: Tuple[int, ...] = ()
    overloaded_users: Tuple[str, ...] = ()
    connector_users: Tuple[str, ...] = ()
    large_clusters: Tuple[int, ...] = ()

    def to_dict(self) -> dict:
        return {
            "possible_silos": list(self.possible_silos),
            "overloaded_users": list(self.overloaded_users),
            "connector_users": list(self.connector_users),
            "large_clusters": list(self.large_clusters),
        }


@dataclass(frozen=True)
class RuleBasedInsight:
    summary_points: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    meta: InsightMeta = field(default_factory=InsightMeta)

    def to_dict(self) -> dict:
        return {
            "summary_points": list(self.summary_points),
            "recommendations": list(self.recommendations),
            "meta": self.meta.to_dict(),
        }


# ── Aggregate ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Stats:
    """
    Canonical aggregate handed to HealthScorer, InsightGenerator and
    every downstream collaborator.
    """

    node_count: int = 0
    edge_count: int = 0
    top_connectors: Tuple[TopConnector, ...] = ()
    clusters: Tuple[Cluster, ...] = ()
    org_health: HealthScore = field(default_factory=HealthScore)

    def to_dict(self) -> dict:
        return {
            "node_count": self.node_count,
            "edge_count": self.edge_count,
            "top_connectors": [c.to_dict() for c in self.top_connectors],
            "clusters": [c.to_dict() for c in self.clusters],
            "org_health": self.org_health.to_dict(),
        }


@dataclass(frozen=True)
class GraphResult:
    nodes: Tuple[GraphNode, ...]
    edges: Tuple[GraphEdge, ...]
    stats: Stats

    def node(self, node_id: str) -> Optional[GraphNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "stats": self.stats.to_dict(),
        }


# ── Outcome ───────────────────────────────────────────────────

OUTCOME_COMPUTED = "computed"
OUTCOME_EMPTY = "empty"
OUTCOME_DEGRADED = "degraded"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of an informational computation that must never raise.

    status:
      computed — normal result
      empty    — input graph had no nodes; value is the zero result
      degraded — an internal failure was absorbed; value is a safe default
    """

    value: T
    status: str = OUTCOME_COMPUTED
    reason: str = ""

    @property
    def degraded(self) -> bool:
        return self.status == OUTCOME_DEGRADED

    @property
    def empty(self) -> bool:
        return self.status == OUTCOME_EMPTY


# Adjacency: node -> {neighbour -> accumulated weight}
Adjacency = Dict[str, Dict[str, int]]
