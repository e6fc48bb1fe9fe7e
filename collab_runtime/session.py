"""
Analysis Session — orchestrates repository + config + kernel.

Stateless between calls: every payload is recomputed from the full
persisted event set.

Snapshot order:
  1. repository.load_events(workspace_id)
  2. get_filtered_events(events, config)     — retention, ignored channels
  3. build_graph(filtered, rng)              — nodes, edges, stats, health
  4. evaluate_insights(stats)                — never raises
  5. anonymization map (only when config.anonymize_users)

Payload methods return plain dicts, anonymized when configured.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

from collab_kernel.builder import build_graph
from collab_kernel.domain_types import GraphResult, InteractionEvent, Outcome, RuleBasedInsight
from collab_kernel.insights import evaluate_insights
from collab_kernel.random_source import RandomSource

from .admin_config import AdminConfig
from .anonymizer import (
    AnonymizationMap,
    anonymize_digest,
    anonymize_graph,
    anonymize_insights,
    anonymize_stats,
    build_anonymization_map,
)
from .commands import CommandReply, handle_command
from .digest import build_weekly_digest
from .message_filter import extract_user_ids, get_filtered_events
from .retention import RetentionResult, apply_retention_policy

if TYPE_CHECKING:
    from .observability import PipelineMetrics

logger = logging.getLogger(__name__)

RngFactory = Callable[[], RandomSource]


@dataclass(frozen=True)
class AnalysisSnapshot:
    graph: GraphResult
    insight_outcome: Outcome[RuleBasedInsight]
    event_count: int
    total_event_count: int
    anon_map: AnonymizationMap = field(default_factory=dict)

    @property
    def insight(self) -> RuleBasedInsight:
        return self.insight_outcome.value


class AnalysisSession:
    """
    Runs the analysis pipeline for one workspace.

    ``rng_factory`` creates the RandomSource handed to community
    detection on every build; pass ``lambda: RandomSource(seed)`` to pin
    cluster assignment across calls.
    """

    def __init__(
        self,
        repository,
        workspace_id: str,
        config: AdminConfig,
        rng_factory: Optional[RngFactory] = None,
    ) -> None:
        self._repository = repository
        self._workspace_id = workspace_id
        self._config = config
        self._rng_factory = rng_factory or RandomSource

    @property
    def workspace_id(self) -> str:
        return self._workspace_id

    @property
    def config(self) -> AdminConfig:
        return self._config

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def record_event(self, event: InteractionEvent) -> int:
        seq = self._repository.append_event(self._workspace_id, event)
        logger.info("Stored event %r as seq %d", event.id, seq)
        return seq

    def record_events(self, events) -> int:
        sequences = self._repository.append_batch(self._workspace_id, list(events))
        logger.info("Stored %d event(s) for workspace %r", len(sequences), self._workspace_id)
        return len(sequences)

    def clear(self) -> int:
        removed = self._repository.clear(self._workspace_id)
        logger.info("Cleared %d event(s) for workspace %r", removed, self._workspace_id)
        return removed

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def snapshot(self, now_ms: Optional[int] = None) -> AnalysisSnapshot:
        events = self._repository.load_events(self._workspace_id)
        filtered = get_filtered_events(events, self._config, now_ms=now_ms)

        graph = build_graph(filtered, rng=self._rng_factory())
        insight_outcome = evaluate_insights(graph.stats)

        anon_map: AnonymizationMap = {}
        if self._config.anonymize_users:
            # unresolved reply targets become nodes without being senders,
            # mentions or reactors
            user_ids = extract_user_ids(filtered) + [n.id for n in graph.nodes]
            anon_map = build_anonymization_map(user_ids)

        logger.debug(
            "Snapshot for %r: %d/%d events analyzed, insight=%s",
            self._workspace_id, len(filtered), len(events), insight_outcome.status,
        )
        return AnalysisSnapshot(
            graph=graph,
            insight_outcome=insight_outcome,
            event_count=len(filtered),
            total_event_count=len(events),
            anon_map=anon_map,
        )

    # ------------------------------------------------------------------
    # Payloads
    # ------------------------------------------------------------------

    def graph_payload(self, snapshot: Optional[AnalysisSnapshot] = None) -> dict:
        snap = snapshot or self.snapshot()
        data = snap.graph.to_dict()
        graph = {"nodes": data["nodes"], "edges": data["edges"]}
        return {
            "graph": self._anonymized(anonymize_graph, graph, snap),
            "stats": self.stats_payload(snap),
        }

    def stats_payload(self, snapshot: Optional[AnalysisSnapshot] = None) -> dict:
        snap = snapshot or self.snapshot()
        return self._anonymized(anonymize_stats, snap.graph.stats.to_dict(), snap)

    def insights_payload(self, snapshot: Optional[AnalysisSnapshot] = None) -> dict:
        snap = snapshot or self.snapshot()
        return {
            "stats": self.stats_payload(snap),
            "insights": {
                "rule_based": self._anonymized(
                    anonymize_insights, snap.insight.to_dict(), snap,
                ),
                "status": snap.insight_outcome.status,
            },
        }

    def digest_payload(self, snapshot: Optional[AnalysisSnapshot] = None) -> dict:
        snap = snapshot or self.snapshot()
        digest = build_weekly_digest(snap.graph.stats, snap.insight)
        return self._anonymized(anonymize_digest, digest.to_dict(), snap)

    def command_reply(self, command: str, base_url: str) -> CommandReply:
        snap = self.snapshot()
        stats = self.stats_payload(snap)
        insight = self._anonymized(anonymize_insights, snap.insight.to_dict(), snap)
        return handle_command(command, stats, insight, base_url)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def apply_retention(self, now_ms: Optional[int] = None) -> RetentionResult:
        """
        Rewrite the repository keeping only in-window events.

        Without a configured retention_days nothing is rewritten.
        """
        events = self._repository.load_events(self._workspace_id)
        if self._config.retention_days is None:
            return RetentionResult(kept=tuple(events), removed_count=0)

        result = apply_retention_policy(events, self._config.retention_days, now_ms=now_ms)
        if result.removed_count:
            self._repository.replace_events(self._workspace_id, result.kept)
        logger.info(
            "Retention rewrite for %r: removed=%d remaining=%d",
            self._workspace_id, result.removed_count, len(result.kept),
        )
        return result

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def get_metrics(self) -> "PipelineMetrics":
        """Collect metrics from the current session."""
        from .observability import collect_metrics
        return collect_metrics(self)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _anonymized(self, fn, payload: dict, snapshot: AnalysisSnapshot) -> dict:
        if not self._config.anonymize_users:
            return payload
        return fn(payload, snapshot.anon_map)
