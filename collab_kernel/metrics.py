"""
Collaboration Kernel — Centrality Metrics

Degree metrics and Brandes betweenness centrality over the symmetric
adjacency map. Betweenness uses unweighted shortest paths: edge weights
only signal presence of a connection, never distance.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List

from .domain_types import Adjacency


@dataclass(frozen=True)
class DegreeMetrics:
    degree: int
    weighted_degree: int


def compute_degree_metrics(adj: Adjacency) -> Dict[str, DegreeMetrics]:
    """Neighbour count and summed neighbour weight per node. O(V+E)."""
    return {
        node: DegreeMetrics(
            degree=len(neighbours),
            weighted_degree=sum(neighbours.values()),
        )
        for node, neighbours in adj.items()
    }


def compute_betweenness_centrality(adj: Adjacency) -> Dict[str, float]:
    """
    Brandes' algorithm for undirected, unweighted graphs.

    For every source: BFS recording distance, shortest-path counts
    (sigma) and predecessor lists, then dependency accumulation in
    reverse BFS order. Each undirected path is found once from each
    endpoint, so the totals are halved at the end.

    Graphs with <= 2 nodes have no intermediaries: all zeros.
    """
    nodes = list(adj)
    betweenness: Dict[str, float] = {node: 0.0 for node in nodes}
    if len(nodes) <= 2:
        return betweenness

    for source in nodes:
        stack: List[str] = []
        predecessors: Dict[str, List[str]] = {node: [] for node in nodes}
        sigma: Dict[str, int] = {node: 0 for node in nodes}
        distance: Dict[str, int] = {node: -1 for node in nodes}
        sigma[source] = 1
        distance[source] = 0

        queue: Deque[str] = deque([source])
        while queue:
            v = queue.popleft()
            stack.append(v)
            for w in adj.get(v, {}):
                if distance[w] < 0:
                    distance[w] = distance[v] + 1
                    queue.append(w)
                if distance[w] == distance[v] + 1:
                    sigma[w] += sigma[v]
                    predecessors[w].append(v)

        delta: Dict[str, float] = {node: 0.0 for node in nodes}
        while stack:
            w = stack.pop()
            sigma_w = sigma[w]
            for v in predecessors[w]:
                if sigma_w == 0:
                    continue
                delta[v] += (sigma[v] / sigma_w) * (1.0 + delta[w])
            if w != source:
                betweenness[w] += delta[w]

    for node in nodes:
        betweenness[node] /= 2.0
    return betweenness
