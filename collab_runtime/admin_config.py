"""
Admin Configuration — immutable analysis settings.

  ignored_channels — channel ids excluded from analysis
  anonymize_users  — replace user ids with user_N labels in payloads
  retention_days   — drop events older than this many days (None = keep all)

Updates never mutate: apply_config_patch returns a new AdminConfig.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes")

RetentionDays = Union[int, float, None]


class ConfigValidationError(ValueError):
    """Raised when a config patch or environment value is invalid."""


@dataclass(frozen=True)
class AdminConfig:
    ignored_channels: Tuple[str, ...] = ()
    anonymize_users: bool = False
    retention_days: RetentionDays = None

    def to_dict(self) -> dict:
        return {
            "ignored_channels": list(self.ignored_channels),
            "anonymize_users": self.anonymize_users,
            "retention_days": self.retention_days,
        }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AdminConfig":
        """
        Build the startup config from IGNORED_CHANNELS (comma separated),
        ANONYMIZE_USERS (1/true/yes) and RETENTION_DAYS.
        """
        env = os.environ if environ is None else environ

        channels = tuple(
            c.strip() for c in env.get("IGNORED_CHANNELS", "").split(",") if c.strip()
        )
        anonymize = env.get("ANONYMIZE_USERS", "").strip().lower() in _TRUTHY

        raw_days = env.get("RETENTION_DAYS", "").strip()
        days: RetentionDays = None
        if raw_days:
            try:
                days = int(raw_days)
            except ValueError:
                try:
                    days = float(raw_days)
                except ValueError:
                    raise ConfigValidationError(
                        f"RETENTION_DAYS must be a number, got {raw_days!r}"
                    ) from None
            _validate_retention_days(days)

        return cls(ignored_channels=channels, anonymize_users=anonymize, retention_days=days)


def apply_config_patch(config: AdminConfig, patch: Any) -> AdminConfig:
    """
    Return a new AdminConfig with the known keys of ``patch`` applied.

    Unknown keys are ignored. Raises ConfigValidationError on the
    first invalid value; ``config`` is left untouched either way.
    """
    if not isinstance(patch, Mapping):
        raise ConfigValidationError("Invalid config payload: must be an object")

    changes: Dict[str, Any] = {}

    if "ignored_channels" in patch:
        channels = patch["ignored_channels"]
        if not isinstance(channels, (list, tuple)):
            raise ConfigValidationError("Invalid config: ignored_channels must be an array")
        if not all(isinstance(c, str) for c in channels):
            raise ConfigValidationError(
                "Invalid config: ignored_channels must be an array of strings"
            )
        changes["ignored_channels"] = tuple(channels)

    if "anonymize_users" in patch:
        anonymize = patch["anonymize_users"]
        if not isinstance(anonymize, bool):
            raise ConfigValidationError("Invalid config: anonymize_users must be a boolean")
        changes["anonymize_users"] = anonymize

    if "retention_days" in patch:
        days = patch["retention_days"]
        _validate_retention_days(days)
        changes["retention_days"] = days

    updated = replace(config, **changes)
    logger.info("Admin config updated: %s", updated.to_dict())
    return updated


def _validate_retention_days(days: Any) -> None:
    if days is None:
        return
    if (
        isinstance(days, bool)
        or not isinstance(days, (int, float))
        or not math.isfinite(days)
        or days < 1
    ):
        raise ConfigValidationError(
            "Invalid config: retention_days must be null or a positive number"
        )
