"""
Webhook Normalization — chat platform payload → InteractionEvent.

Supported event types:
  message_created  — a message with optional mentions / reply reference
  reaction_added   — a reaction on an existing message (no sender)

Anything else, or a payload missing a required field, yields None.
Timestamps are kept as received (string form).
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from collab_kernel.domain_types import InteractionEvent, Reaction

MESSAGE_CREATED = "message_created"
REACTION_ADDED = "reaction_added"
SUPPORTED_EVENT_TYPES = (MESSAGE_CREATED, REACTION_ADDED)


def normalize_cliq_event(payload: Any) -> Optional[InteractionEvent]:
    if not isinstance(payload, Mapping):
        return None

    event_type = payload.get("event_type")
    data = payload.get("data")
    if not event_type or not isinstance(data, Mapping):
        return None

    if event_type == MESSAGE_CREATED:
        return _normalize_message(data)
    if event_type == REACTION_ADDED:
        return _normalize_reaction(data)
    return None


def _normalize_message(data: Mapping[str, Any]) -> Optional[InteractionEvent]:
    message = data.get("message")
    if not isinstance(message, Mapping):
        return None

    sender_id = _nested_id(message.get("sender"))
    if (
        not message.get("id")
        or not message.get("space_id")
        or not sender_id
        or not message.get("posted_time")
    ):
        return None

    mentions = []
    raw_mentions = message.get("mentions")
    if isinstance(raw_mentions, list):
        for mention in raw_mentions:
            mention_id = mention.get("id") if isinstance(mention, Mapping) else None
            if isinstance(mention_id, str) and mention_id:
                mentions.append(mention_id)

    reply_id = _nested_id(message.get("replied_to"))

    return InteractionEvent(
        id=str(message["id"]),
        channel=str(message["space_id"]),
        sender=str(sender_id),
        mentions=tuple(mentions),
        reply_to=str(reply_id) if reply_id else None,
        reactions=(),
        timestamp=str(message["posted_time"]),
    )


def _normalize_reaction(data: Mapping[str, Any]) -> Optional[InteractionEvent]:
    user_id = _nested_id(data.get("user"))
    if (
        not data.get("message_id")
        or not data.get("emoji")
        or not user_id
        or not data.get("space_id")
        or not data.get("time")
    ):
        return None

    return InteractionEvent(
        id=str(data["message_id"]),
        channel=str(data["space_id"]),
        sender=None,
        mentions=(),
        reply_to=None,
        reactions=(Reaction(user=str(user_id), emoji=str(data["emoji"])),),
        timestamp=str(data["time"]),
    )


def _nested_id(value: Any) -> Any:
    if isinstance(value, Mapping):
        return value.get("id")
    return None
