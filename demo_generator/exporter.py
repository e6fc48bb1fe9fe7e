"""
JSON Scenario Exporter.

Exports a seeded scenario's events + metadata to a JSON file in the
stored event shape, so it can be replayed into any repository.
"""

from __future__ import annotations

import json
from typing import List, Optional

from collab_kernel.domain_types import InteractionEvent

from .scenario_seeder import SeededScenario


def export_scenario(
    seeded: SeededScenario,
    path: str,
    seed: Optional[int],
) -> None:
    """
    Write scenario events + metadata to a JSON file.

    Output format:
    {
        "metadata": {"seed": int | null, "scenario": {...}},
        "events": [event.to_dict(), ...]
    }
    """
    doc = {
        "metadata": {
            "seed": seed,
            "scenario": seeded.to_dict(),
        },
        "events": [e.to_dict() for e in seeded.events],
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(doc, f, ensure_ascii=True, indent=2)


def load_exported_events(path: str) -> List[InteractionEvent]:
    """Read back the events of a file written by export_scenario."""
    with open(path, "r", encoding="utf-8") as f:
        doc = json.load(f)
    return [InteractionEvent.from_dict(e) for e in doc.get("events", [])]
