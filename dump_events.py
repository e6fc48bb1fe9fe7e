"""Dump seeded demo scenarios with their expected graph stats as JSON fixtures."""
import json
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from collab_kernel import build_graph
from collab_kernel.random_source import RandomSource
from demo_generator import list_available_scenarios, seed_scenario

NOW_MS = 1_700_000_000_000
SEEDS = [42, 99, 123]


def dump_fixtures(out_path):
    results = []
    for scenario in list_available_scenarios():
        for seed in SEEDS:
            seeded = seed_scenario(scenario, RandomSource(seed), now_ms=NOW_MS)
            graph = build_graph(seeded.events, rng=RandomSource(seed))
            stats = graph.stats
            results.append({
                "scenario": scenario,
                "seed": seed,
                "now_ms": NOW_MS,
                "events": [e.to_dict() for e in seeded.events],
                "expected_node_count": stats.node_count,
                "expected_edge_count": stats.edge_count,
                "expected_cluster_count": len(stats.clusters),
                "expected_health": stats.org_health.to_dict(),
            })
            print(
                f"{scenario}, seed={seed}: nodes={stats.node_count}, "
                f"edges={stats.edge_count}, health={stats.org_health.score}"
            )

    os.makedirs(os.path.dirname(out_path), exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(results, f, ensure_ascii=True, separators=(",", ":"))
    return results


if __name__ == "__main__":
    default_path = os.path.join(
        os.path.dirname(os.path.abspath(__file__)), "fixtures", "demo_scenarios.json"
    )
    out = sys.argv[1] if len(sys.argv) > 1 else default_path
    dumped = dump_fixtures(out)
    print(f"\nDumped {len(dumped)} fixtures to {out}")
