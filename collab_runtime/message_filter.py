"""
Message Filter — admin-config driven event selection.

get_filtered_events applies, in order:
  1. retention policy (when retention_days is configured)
  2. ignored-channel filter

Always returns a new list; inputs are never mutated.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from collab_kernel.domain_types import InteractionEvent

from .admin_config import AdminConfig
from .retention import apply_retention_policy

logger = logging.getLogger(__name__)


def filter_ignored_channels(
    events: Iterable[InteractionEvent],
    ignored_channels: Iterable[str],
) -> List[InteractionEvent]:
    """Drop events posted in an ignored channel. Channel-less events are kept."""
    events = list(events)
    ignored = {str(c) for c in ignored_channels}
    if not ignored:
        return events

    filtered = [e for e in events if not e.channel or e.channel not in ignored]
    removed = len(events) - len(filtered)
    if removed:
        logger.info(
            "Filtered %d event(s) from %d ignored channel(s), %d remaining",
            removed, len(ignored), len(filtered),
        )
    return filtered


def get_filtered_events(
    events: Iterable[InteractionEvent],
    config: AdminConfig,
    now_ms: Optional[int] = None,
) -> List[InteractionEvent]:
    processed = list(events)
    if config.retention_days is not None:
        processed = list(
            apply_retention_policy(processed, config.retention_days, now_ms=now_ms).kept
        )
    return filter_ignored_channels(processed, config.ignored_channels)


def extract_user_ids(events: Iterable[InteractionEvent]) -> List[str]:
    """Distinct senders, mentioned users and reactors in first-seen order."""
    seen: dict = {}
    for event in events:
        if event is None:
            continue
        if event.sender:
            seen.setdefault(event.sender, None)
        for mention in event.mentions:
            if mention:
                seen.setdefault(mention, None)
        for reaction in event.reactions:
            if reaction is not None and reaction.user:
                seen.setdefault(reaction.user, None)
    return list(seen)
