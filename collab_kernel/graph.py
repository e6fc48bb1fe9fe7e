"""
Collaboration Kernel — Graph Construction

Pure dict-based aggregation of interaction events into a weighted,
undirected user graph. No external dependencies.

Weights:
  mention   (sender -> mentioned)      MENTION_WEIGHT
  reply     (sender -> replied author) REPLY_WEIGHT
  reaction  (reactor -> sender)        REACTION_WEIGHT
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import MENTION_WEIGHT, REACTION_WEIGHT, REPLY_WEIGHT
from .domain_types import Adjacency, GraphEdge, InteractionEvent


@dataclass(frozen=True)
class InteractionAggregate:
    """Output of event aggregation: node ids in first-seen order + edges."""

    node_ids: Tuple[str, ...]
    edges: Tuple[GraphEdge, ...]


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

class _EdgeAccumulator:
    """Accumulates weights per unordered user pair, remembering first orientation."""

    def __init__(self) -> None:
        self._nodes: Dict[str, None] = {}
        self._orientation: Dict[Tuple[str, str], Tuple[str, str]] = {}
        self._weights: Dict[Tuple[str, str], int] = {}

    def add_node(self, node_id: Optional[str]) -> None:
        if node_id:
            self._nodes.setdefault(node_id, None)

    def add(self, from_id: Optional[str], to_id: Optional[str], amount: int) -> None:
        self.add_node(from_id)
        self.add_node(to_id)
        if not from_id or not to_id or from_id == to_id:
            return
        key = (from_id, to_id) if from_id < to_id else (to_id, from_id)
        self._orientation.setdefault(key, (from_id, to_id))
        self._weights[key] = self._weights.get(key, 0) + amount

    def result(self) -> InteractionAggregate:
        edges = tuple(
            GraphEdge(from_id=a, to_id=b, weight=self._weights[key])
            for key, (a, b) in self._orientation.items()
        )
        return InteractionAggregate(node_ids=tuple(self._nodes), edges=edges)


def build_sender_lookup(events: Iterable[InteractionEvent]) -> Dict[str, str]:
    """
    message id -> sender, over events that carry a sender.

    Sender-less reaction events reuse the reacted message's id and must
    not shadow the original author.
    """
    lookup: Dict[str, str] = {}
    for event in events:
        if event is None or not event.id or not event.sender:
            continue
        lookup[event.id] = event.sender
    return lookup


def aggregate_interactions(events: Sequence[InteractionEvent]) -> InteractionAggregate:
    """
    Fold events into node ids and accumulated undirected edges.

    Missing senders, empty mentions and reactions without a user are
    skipped individually; they never abort the build.
    """
    sender_by_id = build_sender_lookup(events)
    acc = _EdgeAccumulator()

    for event in events:
        if event is None:
            continue
        sender = event.sender
        acc.add_node(sender)

        for mentioned in event.mentions:
            if not mentioned:
                continue
            acc.add(sender, mentioned, MENTION_WEIGHT)

        if event.reply_to:
            target = sender_by_id.get(event.reply_to, event.reply_to)
            acc.add(sender, target, REPLY_WEIGHT)

        for reaction in event.reactions:
            if reaction is None or not reaction.user:
                continue
            acc.add(reaction.user, sender, REACTION_WEIGHT)

    return acc.result()


# ---------------------------------------------------------------------------
# Adjacency
# ---------------------------------------------------------------------------

def build_undirected_adjacency(
    node_ids: Iterable[str],
    edges: Iterable[GraphEdge],
) -> Adjacency:
    """
    Symmetric adjacency map: node -> {neighbour -> weight}.

    Each edge (a, b, w) with w > 0 adds w to a->b and w to b->a.
    Every node id gets an entry, isolated ones included.
    """
    adj: Adjacency = {nid: {} for nid in node_ids}

    def _add(a: str, b: str, weight: int) -> None:
        if not a or not b or a == b:
            return
        neighbours = adj.setdefault(a, {})
        neighbours[b] = neighbours.get(b, 0) + weight

    for edge in edges:
        if edge is None or edge.weight <= 0:
            continue
        _add(edge.from_id, edge.to_id, edge.weight)
        _add(edge.to_id, edge.from_id, edge.weight)

    return adj


def find_isolated_users(adj: Adjacency) -> List[str]:
    """Return user ids with no neighbours, sorted."""
    return sorted(nid for nid, neighbours in adj.items() if not neighbours)
