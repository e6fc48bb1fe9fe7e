"""
Demo Scenario Seeder — seeded synthetic chat activity.

seed_scenario(name, rng) → SeededScenario

Scenarios:
  healthy     — 10 users, 3 channels, dense random mentions / reactions
  siloed      — three 4-person teams talking almost only internally,
                a handful of bridge mentions between the first two
  overloaded  — 7 users, everything routed through one hub ("alex")

All randomness flows through the injected RandomSource: identical
seed (and now_ms) → identical events. Timestamps are unix seconds
(as strings) within the last few days.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from collab_kernel.constants import MS_PER_DAY
from collab_kernel.domain_types import InteractionEvent, Reaction
from collab_kernel.random_source import RandomSource

logger = logging.getLogger(__name__)

DEMO_EMOJI = "\U0001F44D"

HEALTHY = "healthy"
SILOED = "siloed"
OVERLOADED = "overloaded"


class UnknownScenarioError(ValueError):
    """Raised when a scenario name is not one of list_available_scenarios()."""

    def __init__(self, name: object) -> None:
        self.name = name
        super().__init__(
            f"Unknown scenario: {name}. "
            f"Available scenarios: {', '.join(list_available_scenarios())}"
        )


@dataclass(frozen=True)
class SeededScenario:
    scenario: str
    events: Tuple[InteractionEvent, ...]
    users: Tuple[str, ...]
    channels: Tuple[str, ...]
    hub_user: Optional[str] = None

    def to_dict(self) -> dict:
        out = {
            "scenario": self.scenario,
            "message_count": len(self.events),
            "users": list(self.users),
            "channels": list(self.channels),
        }
        if self.hub_user is not None:
            out["hub_user"] = self.hub_user
        return out


def list_available_scenarios() -> List[str]:
    return [HEALTHY, SILOED, OVERLOADED]


def seed_scenario(
    name: object,
    rng: RandomSource,
    now_ms: Optional[int] = None,
) -> SeededScenario:
    """
    Generate the events of scenario ``name`` (trimmed, case-insensitive).

    Raises UnknownScenarioError for any other name.
    """
    key = str(name or "").strip().lower()
    builder = _SCENARIOS.get(key)
    if builder is None:
        raise UnknownScenarioError(name)

    now = int(time.time() * 1000) if now_ms is None else now_ms
    seeded = builder(_MessageFactory(rng, now))
    logger.info(
        "Seeded %s scenario: %d messages, %d users, %d channels",
        seeded.scenario, len(seeded.events), len(seeded.users), len(seeded.channels),
    )
    return seeded


# ---------------------------------------------------------------------------
# Message factory
# ---------------------------------------------------------------------------

class _MessageFactory:
    """Builds demo events, drawing ids and timestamps from the shared rng."""

    def __init__(self, rng: RandomSource, now_ms: int) -> None:
        self.rng = rng
        self._now_ms = now_ms
        self._counter = 0

    def chance(self, probability: float) -> bool:
        return self.rng.rand_float() < probability

    def pick(self, seq: Sequence[str]) -> str:
        return self.rng.rand_choice(seq)

    def message(
        self,
        channel: str,
        sender: str,
        max_days_ago: int,
        mentions: Sequence[str] = (),
        reactors: Sequence[str] = (),
    ) -> InteractionEvent:
        self._counter += 1
        suffix = f"{self.rng.rand_int(0, 0xFFFFFF):06x}"
        return InteractionEvent(
            id=f"demo_msg_{self._counter}_{suffix}",
            channel=channel,
            sender=sender,
            mentions=tuple(mentions),
            reply_to=None,
            reactions=tuple(Reaction(user=u, emoji=DEMO_EMOJI) for u in reactors),
            timestamp=self._timestamp(self.rng.rand_int(0, max_days_ago)),
        )

    def _timestamp(self, days_ago: int) -> str:
        # random time within the chosen day
        offset = self.rng.rand_float() * MS_PER_DAY
        ts_ms = self._now_ms - days_ago * MS_PER_DAY - offset
        return str(int(ts_ms // 1000))


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

def _healthy(f: _MessageFactory) -> SeededScenario:
    users = ("alice", "bob", "charlie", "diana", "eve",
             "frank", "grace", "henry", "ivy", "jack")
    channels = ("general", "team_sales", "team_eng")
    events: List[InteractionEvent] = []

    for _ in range(60):
        sender = f.pick(users)
        channel = f.pick(channels)
        mentions: List[str] = []
        if f.chance(0.4):
            target = f.pick(users)
            if target != sender:
                mentions.append(target)
        reactors = [f.pick(users)] if f.chance(0.3) else []
        events.append(f.message(channel, sender, 2, mentions=mentions, reactors=reactors))

    # cross-channel conversations
    for _ in range(20):
        sender = f.pick(users)
        channel = f.pick(channels)
        mentioned = f.pick(users)
        if sender != mentioned:
            events.append(f.message(channel, sender, 1, mentions=[mentioned]))

    return SeededScenario(HEALTHY, tuple(events), users, channels)


def _siloed(f: _MessageFactory) -> SeededScenario:
    teams = (
        (("alice", "bob", "charlie", "diana"), "sales"),
        (("eve", "frank", "grace", "henry"), "engineering"),
        (("ivy", "jack", "kate", "lucas"), "marketing"),
    )
    events: List[InteractionEvent] = []

    for members, channel in teams:
        for _ in range(80):
            sender = f.pick(members)
            mentioned = f.pick(members) if f.chance(0.5) else None
            mentions = [mentioned] if mentioned and mentioned != sender else []
            reactors = [f.pick(members)] if f.chance(0.3) else []
            events.append(f.message(channel, sender, 3, mentions=mentions, reactors=reactors))

    (team_a, channel_a), (team_b, channel_b), _ = teams
    bridges = (team_a[0], team_b[0])
    for _ in range(5):
        bridge = f.pick(bridges)
        if bridge == team_a[0]:
            target_team, target_channel = team_b, channel_b
        else:
            target_team, target_channel = team_a, channel_a
        events.append(f.message(target_channel, bridge, 3, mentions=[f.pick(target_team)]))

    users = tuple(u for members, _ in teams for u in members)
    channels = tuple(channel for _, channel in teams)
    return SeededScenario(SILOED, tuple(events), users, channels)


def _overloaded(f: _MessageFactory) -> SeededScenario:
    hub = "alex"
    users = (hub, "bob", "charlie", "diana", "eve", "frank", "grace")
    others = tuple(u for u in users if u != hub)
    channels = ("general", "team_discussions")
    events: List[InteractionEvent] = []

    for _ in range(30):
        target = f.pick(users)
        if target != hub:
            events.append(f.message(f.pick(channels), hub, 2, mentions=[target]))

    for _ in range(20):
        sender = f.pick(users)
        if sender != hub:
            events.append(f.message(f.pick(channels), sender, 2, mentions=[hub]))

    # hub messages collecting reactions
    for _ in range(25):
        count = 2 if f.chance(0.3) else 1
        reactors: List[str] = []
        for _ in range(count):
            reactor = f.pick(others)
            if reactor not in reactors:
                reactors.append(reactor)
        events.append(f.message(f.pick(channels), hub, 2, reactors=reactors))

    for _ in range(5):
        sender = f.pick(others)
        receivers = tuple(u for u in others if u != sender)
        events.append(f.message(f.pick(channels), sender, 2, mentions=[f.pick(receivers)]))

    return SeededScenario(OVERLOADED, tuple(events), users, channels, hub_user=hub)


_SCENARIOS: Dict[str, Callable[[_MessageFactory], SeededScenario]] = {
    HEALTHY: _healthy,
    SILOED: _siloed,
    OVERLOADED: _overloaded,
}
