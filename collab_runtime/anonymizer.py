"""
Anonymization — replace user ids with stable user_N labels.

The map is deterministic: distinct ids sorted, then numbered from 1.
All functions operate on serialized (dict) payloads and return new
dicts; ids missing from the map are left unchanged.

Free text is rewritten in a single regex pass over whole-word
occurrences, longest ids first, so a label produced for one id is
never rewritten again by another.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern

AnonymizationMap = Dict[str, str]


def build_anonymization_map(user_ids: Iterable[str]) -> AnonymizationMap:
    unique = sorted({str(u) for u in user_ids if u})
    return {user_id: f"user_{idx}" for idx, user_id in enumerate(unique, 1)}


# ---------------------------------------------------------------------------
# Payload rewriting
# ---------------------------------------------------------------------------

def anonymize_graph(graph: Optional[Mapping[str, Any]], anon_map: AnonymizationMap) -> Any:
    """Rewrite node ids and edge endpoints of a {"nodes", "edges"} payload."""
    if not graph or not anon_map:
        return graph

    result = dict(graph)
    result["nodes"] = [
        {**node, "id": _lookup(anon_map, node.get("id"))}
        for node in graph.get("nodes") or []
    ]
    result["edges"] = [
        {
            **edge,
            "from": _lookup(anon_map, edge.get("from")),
            "to": _lookup(anon_map, edge.get("to")),
        }
        for edge in graph.get("edges") or []
    ]
    return result


def anonymize_stats(stats: Optional[Mapping[str, Any]], anon_map: AnonymizationMap) -> Any:
    """Rewrite top connector ids and cluster member lists."""
    if not stats or not anon_map:
        return stats

    result = dict(stats)
    if isinstance(stats.get("top_connectors"), list):
        result["top_connectors"] = [
            {**connector, "id": _lookup(anon_map, connector.get("id"))}
            for connector in stats["top_connectors"]
        ]
    if isinstance(stats.get("clusters"), list):
        result["clusters"] = [
            {
                **cluster,
                "nodes": [_lookup(anon_map, n) for n in cluster.get("nodes") or []],
            }
            for cluster in stats["clusters"]
        ]
    return result


def anonymize_insights(insights: Optional[Mapping[str, Any]], anon_map: AnonymizationMap) -> Any:
    """Rewrite meta user lists and user ids inside summary / recommendation text."""
    if not insights or not anon_map:
        return insights

    pattern = _id_pattern(anon_map)
    result = dict(insights)

    meta = insights.get("meta")
    if isinstance(meta, Mapping):
        meta = dict(meta)
        for key in ("connector_users", "overloaded_users"):
            if isinstance(meta.get(key), list):
                meta[key] = [_lookup(anon_map, u) for u in meta[key]]
        result["meta"] = meta

    for key in ("summary_points", "recommendations"):
        if isinstance(insights.get(key), list):
            result[key] = _replace_all(insights[key], anon_map, pattern)
    return result


def anonymize_digest(digest: Optional[Mapping[str, Any]], anon_map: AnonymizationMap) -> Any:
    if not digest or not anon_map:
        return digest

    pattern = _id_pattern(anon_map)
    result = dict(digest)
    if digest.get("summary_line"):
        result["summary_line"] = replace_user_ids(digest["summary_line"], anon_map, pattern)
    for key in ("key_highlights", "recommendations"):
        if isinstance(digest.get(key), list):
            result[key] = _replace_all(digest[key], anon_map, pattern)
    return result


# ---------------------------------------------------------------------------
# Text replacement
# ---------------------------------------------------------------------------

def replace_user_ids(
    text: Any,
    anon_map: AnonymizationMap,
    pattern: Optional[Pattern[str]] = None,
) -> Any:
    """Replace whole-word user ids in ``text``. Non-strings pass through."""
    if not isinstance(text, str) or not anon_map:
        return text
    pattern = pattern or _id_pattern(anon_map)
    return pattern.sub(lambda m: anon_map[m.group(0)], text)


def _id_pattern(anon_map: AnonymizationMap) -> Pattern[str]:
    ordered = sorted(anon_map, key=len, reverse=True)
    alternatives = "|".join(re.escape(user_id) for user_id in ordered)
    return re.compile(rf"\b(?:{alternatives})\b")


def _replace_all(
    texts: List[Any],
    anon_map: AnonymizationMap,
    pattern: Pattern[str],
) -> List[Any]:
    return [replace_user_ids(t, anon_map, pattern) for t in texts]


def _lookup(anon_map: AnonymizationMap, user_id: Any) -> Any:
    return anon_map.get(user_id, user_id) if isinstance(user_id, str) else user_id
