"""
Collaboration Runtime

Collaborators around the pure Collaboration Kernel: webhook
normalization, event repositories, admin config, filtering and
retention, anonymization, weekly digest, chat commands and the
analysis session that ties them together.
"""

from .admin_config import AdminConfig, ConfigValidationError, apply_config_patch
from .anonymizer import (
    anonymize_digest,
    anonymize_graph,
    anonymize_insights,
    anonymize_stats,
    build_anonymization_map,
)
from .commands import CommandReply, handle_command
from .digest import WeeklyDigest, build_weekly_digest
from .event_repository import InMemoryEventRepository, SqliteEventRepository, reconstruct_event
from .message_filter import extract_user_ids, filter_ignored_channels, get_filtered_events
from .normalize import normalize_cliq_event
from .observability import PipelineMetrics, collect_metrics, configure_logging
from .retention import RetentionResult, apply_retention_policy
from .session import AnalysisSession, AnalysisSnapshot

__all__ = [
    "AdminConfig",
    "ConfigValidationError",
    "apply_config_patch",
    "anonymize_digest",
    "anonymize_graph",
    "anonymize_insights",
    "anonymize_stats",
    "build_anonymization_map",
    "CommandReply",
    "handle_command",
    "WeeklyDigest",
    "build_weekly_digest",
    "InMemoryEventRepository",
    "SqliteEventRepository",
    "reconstruct_event",
    "extract_user_ids",
    "filter_ignored_channels",
    "get_filtered_events",
    "normalize_cliq_event",
    "PipelineMetrics",
    "collect_metrics",
    "configure_logging",
    "RetentionResult",
    "apply_retention_policy",
    "AnalysisSession",
    "AnalysisSnapshot",
]
