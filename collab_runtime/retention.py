"""
Retention Policy — drop events older than a configured window.

Events without a timestamp, or with one that cannot be parsed, are
kept. The cutoff is inclusive: an event exactly at now - days is kept.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from collab_kernel.constants import MS_PER_DAY
from collab_kernel.domain_types import InteractionEvent
from collab_kernel.timestamps import normalize_timestamp_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionResult:
    kept: Tuple[InteractionEvent, ...]
    removed_count: int

    def to_dict(self) -> dict:
        return {"removed": self.removed_count, "remaining": len(self.kept)}


def current_time_ms() -> int:
    return int(time.time() * 1000)


def apply_retention_policy(
    events: Iterable[InteractionEvent],
    retention_days: Any,
    now_ms: Optional[int] = None,
) -> RetentionResult:
    events = list(events)

    if retention_days is None:
        return RetentionResult(kept=tuple(events), removed_count=0)

    if (
        isinstance(retention_days, bool)
        or not isinstance(retention_days, (int, float))
        or not math.isfinite(retention_days)
        or retention_days < 1
    ):
        logger.warning("Retention: invalid retention_days value %r, keeping all", retention_days)
        return RetentionResult(kept=tuple(events), removed_count=0)

    current = current_time_ms() if now_ms is None else now_ms
    cutoff = current - retention_days * MS_PER_DAY

    kept: List[InteractionEvent] = []
    removed = 0
    for event in events:
        if not event.timestamp:
            kept.append(event)
            continue

        event_ms = normalize_timestamp_ms(event.timestamp)
        if event_ms is None:
            logger.warning(
                "Retention: event %r has invalid timestamp %r, keeping it",
                event.id, event.timestamp,
            )
            kept.append(event)
            continue

        if event_ms >= cutoff:
            kept.append(event)
        else:
            removed += 1

    logger.info(
        "Retention applied: days=%s total=%d removed=%d remaining=%d",
        retention_days, len(events), removed, len(kept),
    )
    return RetentionResult(kept=tuple(kept), removed_count=removed)
