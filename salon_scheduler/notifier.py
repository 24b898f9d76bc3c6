"""Async push of new manager escalations to an external webhook
(Slack/Zapier-style URL configured via MANAGER_WEBHOOK_URL).
"""
from __future__ import annotations

import httpx

from .models import ManagerMessage


def escalation_payload(msg: ManagerMessage) -> dict:
    prefix = "[URGENT] " if msg.priority.value == "urgent" else ""
    return {
        "text": f"{prefix}Client request: {msg.client_request}\nReason: {msg.reason}",
        "message_id": msg.id,
        "priority": msg.priority.value,
        "created_at": msg.created_at.isoformat(),
    }


async def notify_manager(url: str, msg: ManagerMessage, timeout: float = 15) -> None:
    """POST the escalation to *url*; raises httpx errors on failure."""
    async with httpx.AsyncClient(http2=True, timeout=timeout) as client:
        resp = await client.post(url, json=escalation_payload(msg))
        resp.raise_for_status()
