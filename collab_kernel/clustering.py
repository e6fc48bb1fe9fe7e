"""
Community Detection — Weighted Label Propagation

Algorithm:
  1. Every node starts with a unique integer label (its enumeration index)
  2. Up to MAX_LABEL_PROPAGATION_ITERATIONS passes:
     - shuffle visiting order
     - each node with neighbours sums edge weight per neighbour label
       and draws a label with probability proportional to that mass
     - a differing draw is applied immediately and counted as a change
  3. A pass with zero changes ends the loop early
  4. Surviving labels are remapped to a dense 0..k-1 in sorted order

Not reproducible across runs unless the caller pins the RandomSource
seed. Isolated nodes keep their own label and form singleton clusters.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .constants import MAX_LABEL_PROPAGATION_ITERATIONS
from .domain_types import Adjacency, Cluster
from .random_source import RandomSource


def detect_communities(
    adj: Adjacency,
    rng: Optional[RandomSource] = None,
    max_iterations: int = MAX_LABEL_PROPAGATION_ITERATIONS,
) -> Dict[str, int]:
    """Return node -> dense cluster id. Insertion order follows ``adj``."""
    nodes = list(adj)
    if len(nodes) <= 1:
        return {node: 0 for node in nodes}

    rng = rng or RandomSource()
    labels: Dict[str, int] = {node: idx for idx, node in enumerate(nodes)}

    for _ in range(max_iterations):
        changes = 0
        order = list(nodes)
        rng.shuffle(order)

        for node in order:
            neighbours = adj.get(node)
            if not neighbours:
                continue

            label_weights: Dict[int, int] = {}
            for neighbour, weight in neighbours.items():
                label = labels[neighbour]
                label_weights[label] = label_weights.get(label, 0) + weight

            chosen = _weighted_random_choice(list(label_weights.items()), rng)
            if chosen != labels[node]:
                labels[node] = chosen
                changes += 1

        if changes == 0:
            break

    dense = {label: idx for idx, label in enumerate(sorted(set(labels.values())))}
    return {node: dense[labels[node]] for node in nodes}


def _weighted_random_choice(
    entries: List[Tuple[int, int]],
    rng: RandomSource,
) -> int:
    """Draw a label with probability proportional to its weight mass."""
    total = sum(weight for _, weight in entries)
    if total == 0:
        return entries[0][0] if entries else 0

    threshold = rng.rand_float() * total
    for label, weight in entries:
        threshold -= weight
        if threshold <= 0:
            return label
    return entries[-1][0]


def summarize_clusters(assignments: Dict[str, int]) -> List[Cluster]:
    """
    Group nodes by cluster id.

    Members are sorted lexicographically; clusters are ordered by id.
    """
    groups: Dict[int, List[str]] = {}
    for node, cluster_id in assignments.items():
        groups.setdefault(cluster_id, []).append(node)

    return [
        Cluster(cluster_id=cid, size=len(members), nodes=tuple(sorted(members)))
        for cid, members in sorted(groups.items())
    ]
