"""
Tests for the Seeded Demo Scenario Generator.

Covers:
  - Scenario catalogue and name normalisation
  - Unknown scenario rejection
  - Determinism (same seed → same events)
  - Different seeds → different events
  - Scenario sizes and user / channel vocabularies
  - Timestamps within the requested window
  - Healthy vs overloaded balance component
  - Siloed: marketing team fully isolated, at least two clusters
  - Overloaded: hub flagged by the insight rules
  - JSON export round-trip

Run:  python test_generator.py
"""

from __future__ import annotations

import json
import os
import sys
import tempfile

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from collab_kernel import build_graph, generate_insights
from collab_kernel.constants import MS_PER_DAY
from collab_kernel.random_source import RandomSource

from demo_generator import (
    UnknownScenarioError,
    export_scenario,
    list_available_scenarios,
    load_exported_events,
    seed_scenario,
)


NOW_MS = 1_700_000_000_000

_pass = 0
_fail = 0


def _test(name, fn):
    global _pass, _fail
    try:
        fn()
        print(f"  [PASS] {name}")
        _pass += 1
    except Exception as exc:
        print(f"  [FAIL] {name}: {exc}")
        _fail += 1


def _seed(name, seed=42):
    return seed_scenario(name, RandomSource(seed), now_ms=NOW_MS)


def _graph_users(seeded):
    users = set()
    for e in seeded.events:
        if e.sender:
            users.add(e.sender)
        users.update(e.mentions)
        users.update(r.user for r in e.reactions)
    return users


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

def test_available_scenarios():
    assert list_available_scenarios() == ["healthy", "siloed", "overloaded"]


def test_name_normalised():
    seeded = _seed("  OverLoaded ")
    assert seeded.scenario == "overloaded"
    assert seeded.hub_user == "alex"


def test_unknown_scenario_rejected():
    try:
        _seed("chaotic")
    except UnknownScenarioError as exc:
        msg = str(exc)
        assert msg == (
            "Unknown scenario: chaotic. "
            "Available scenarios: healthy, siloed, overloaded"
        ), msg
        assert isinstance(exc, ValueError)
        return
    raise AssertionError("Should have raised UnknownScenarioError")


def test_empty_name_rejected():
    try:
        _seed("")
    except UnknownScenarioError:
        return
    raise AssertionError("Should have raised UnknownScenarioError")


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------

def test_determinism_same_seed():
    for name in list_available_scenarios():
        a = _seed(name, seed=7)
        b = _seed(name, seed=7)
        assert a.events == b.events, f"{name} not reproducible"


def test_different_seeds():
    a = _seed("healthy", seed=1)
    b = _seed("healthy", seed=2)
    assert a.events != b.events


def test_message_ids_unique():
    for name in list_available_scenarios():
        seeded = _seed(name)
        ids = [e.id for e in seeded.events]
        assert len(ids) == len(set(ids)), name
        assert all(i.startswith("demo_msg_") for i in ids)


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

def test_healthy_shape():
    seeded = _seed("healthy")
    assert 60 <= len(seeded.events) <= 80, len(seeded.events)
    assert len(seeded.users) == 10
    assert set(seeded.channels) == {"general", "team_sales", "team_eng"}
    assert _graph_users(seeded) <= set(seeded.users)
    assert all(e.reply_to is None for e in seeded.events)


def test_siloed_shape():
    seeded = _seed("siloed")
    # 3 teams x 80 internal + 5 bridge messages
    assert len(seeded.events) == 245, len(seeded.events)
    assert len(seeded.users) == 12
    assert seeded.channels == ("sales", "engineering", "marketing")
    sales_team = {"alice", "bob", "charlie", "diana"}
    for e in seeded.events:
        if e.sender == "eve" and sales_team & set(e.mentions):
            assert e.channel == "sales", e


def test_overloaded_shape():
    seeded = _seed("overloaded")
    # 25 reaction posts + 5 peer messages always emitted
    assert 30 <= len(seeded.events) <= 80, len(seeded.events)
    reaction_posts = [e for e in seeded.events if e.reactions]
    assert len(reaction_posts) == 25
    for e in reaction_posts:
        assert e.sender == "alex"
        assert 1 <= len(e.reactions) <= 2
        assert "alex" not in {r.user for r in e.reactions}
        assert len({r.user for r in e.reactions}) == len(e.reactions)


def test_timestamps_in_window():
    for name, max_days in (("healthy", 2), ("siloed", 3), ("overloaded", 2)):
        seeded = _seed(name)
        earliest = (NOW_MS - (max_days + 1) * MS_PER_DAY) // 1000
        for e in seeded.events:
            assert isinstance(e.timestamp, str)
            ts = int(e.timestamp)
            assert earliest <= ts <= NOW_MS // 1000, (name, ts)


def test_to_dict():
    seeded = _seed("overloaded")
    d = seeded.to_dict()
    assert d["scenario"] == "overloaded"
    assert d["message_count"] == len(seeded.events)
    assert d["hub_user"] == "alex"
    assert "hub_user" not in _seed("healthy").to_dict()


# ---------------------------------------------------------------------------
# Scenario semantics through the graph
# ---------------------------------------------------------------------------

def test_siloed_clusters():
    seeded = _seed("siloed")
    result = build_graph(seeded.events, rng=RandomSource(3))
    clusters = result.stats.clusters
    assert len(clusters) >= 2, len(clusters)

    marketing = {"ivy", "jack", "kate", "lucas"}
    for edge in result.edges:
        inside = (edge.from_id in marketing) + (edge.to_id in marketing)
        assert inside != 1, f"marketing edge leaks: {edge}"


def test_overloaded_hub_flagged():
    seeded = _seed("overloaded")
    result = build_graph(seeded.events, rng=RandomSource(3))
    assert result.stats.top_connectors[0].id == "alex"
    insight = generate_insights(result.stats)
    assert insight.meta.overloaded_users == ("alex",)
    assert any("(alex)" in r for r in insight.recommendations)


def test_healthy_score_beats_overloaded():
    healthy = build_graph(_seed("healthy").events, rng=RandomSource(3))
    overloaded = build_graph(_seed("overloaded").events, rng=RandomSource(3))
    assert 8 <= healthy.stats.node_count <= 10
    assert healthy.stats.org_health.components.connectivity > 0
    assert (healthy.stats.org_health.components.balance
            > overloaded.stats.org_health.components.balance)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def test_json_export():
    seeded = _seed("siloed", seed=11)
    with tempfile.NamedTemporaryFile(suffix=".json", delete=False) as f:
        path = f.name
    try:
        export_scenario(seeded, path, seed=11)
        with open(path, "r", encoding="utf-8") as f:
            doc = json.load(f)
        assert doc["metadata"]["seed"] == 11
        assert doc["metadata"]["scenario"]["message_count"] == 245
        assert doc["events"][0]["message_id"] == seeded.events[0].id
        assert load_exported_events(path) == list(seeded.events)
    finally:
        os.unlink(path)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def main():
    tests = [
        ("Catalogue: available scenarios", test_available_scenarios),
        ("Catalogue: name normalised", test_name_normalised),
        ("Catalogue: unknown rejected", test_unknown_scenario_rejected),
        ("Catalogue: empty name rejected", test_empty_name_rejected),
        ("Determinism: same seed", test_determinism_same_seed),
        ("Determinism: different seeds", test_different_seeds),
        ("Determinism: unique message ids", test_message_ids_unique),
        ("Shape: healthy", test_healthy_shape),
        ("Shape: siloed", test_siloed_shape),
        ("Shape: overloaded", test_overloaded_shape),
        ("Shape: timestamps in window", test_timestamps_in_window),
        ("Shape: to_dict", test_to_dict),
        ("Graph: siloed clusters", test_siloed_clusters),
        ("Graph: overloaded hub flagged", test_overloaded_hub_flagged),
        ("Graph: healthy vs overloaded balance", test_healthy_score_beats_overloaded),
        ("JSON export", test_json_export),
    ]

    print(f"\nRunning {len(tests)} tests...\n")
    for name, fn in tests:
        _test(name, fn)

    print(f"\n{'='*60}")
    print(f"  {_pass} passed, {_fail} failed out of {_pass + _fail}")
    print(f"{'='*60}")

    if _fail > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
