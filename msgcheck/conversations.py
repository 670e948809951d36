"""Derive conversation partners from raw message rows."""
from typing import Any, Dict, Iterable, List


def conversation_partners(messages: Iterable[Dict[str, Any]], user_id: str) -> List[str]:
    """Distinct counterpart IDs for ``user_id``, in first-seen order.

    The user's own ID and missing IDs are never included, so a message a
    user sent to themselves contributes nothing.
    """
    partners: List[str] = []
    seen = set()
    for msg in messages:
        if msg.get("sender_id") == user_id:
            partner = msg.get("receiver_id")
        else:
            partner = msg.get("sender_id")
        if partner is None or partner == user_id or partner in seen:
            continue
        seen.add(partner)
        partners.append(partner)
    return partners
