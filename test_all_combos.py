"""Test all scenario × seed combinations build a well-formed graph."""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from collab_kernel import build_graph, evaluate_insights
from collab_kernel.random_source import RandomSource
from demo_generator import list_available_scenarios, seed_scenario

NOW_MS = 1_700_000_000_000
SEEDS = [1, 7, 42, 99, 123]


def _check(result):
    stats = result.stats
    node_ids = {n.id for n in result.nodes}
    assert stats.node_count == len(result.nodes)
    assert stats.edge_count == len(result.edges)

    for edge in result.edges:
        assert edge.from_id != edge.to_id, f"self-loop {edge}"
        assert edge.weight >= 1
        assert {edge.from_id, edge.to_id} <= node_ids

    for node in result.nodes:
        assert node.betweenness >= 0
        incident = sum(e.weight for e in result.edges if node.id in (e.from_id, e.to_id))
        assert node.weighted_degree == incident, node.id

    covered = sorted(n for c in stats.clusters for n in c.nodes)
    assert covered == sorted(node_ids), "clusters must cover every node exactly once"
    assert [c.cluster_id for c in stats.clusters] == list(range(len(stats.clusters)))

    health = stats.org_health
    assert 0 <= health.score <= 100
    for value in health.components.to_dict().values():
        assert 0 <= value <= 25

    outcome = evaluate_insights(stats)
    assert outcome.status == "computed", outcome.reason


def run_all_combos(verbose=False):
    passed = 0
    failed = []
    for scenario in list_available_scenarios():
        for seed in SEEDS:
            try:
                seeded = seed_scenario(scenario, RandomSource(seed), now_ms=NOW_MS)
                result = build_graph(seeded.events, rng=RandomSource(seed))
                _check(result)
                if verbose:
                    print(
                        f"  OK  {scenario:12s} seed={seed:3d}  "
                        f"events={len(seeded.events):3d}  nodes={result.stats.node_count:2d}  "
                        f"clusters={len(result.stats.clusters)}  "
                        f"health={result.stats.org_health.score:3d}"
                    )
                passed += 1
            except Exception as e:
                if verbose:
                    print(f"  FAIL {scenario:12s} seed={seed:3d}  {e}")
                failed.append((scenario, seed, str(e)))
    return passed, failed


def test_all_combos():
    _, failed = run_all_combos()
    assert not failed, failed


if __name__ == "__main__":
    passed, failed = run_all_combos(verbose=True)
    print(f"\n{passed} passed, {len(failed)} failed out of {passed + len(failed)}")
    if failed:
        sys.exit(1)
