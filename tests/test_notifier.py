import json
from datetime import datetime

import pytest, respx, httpx

from salon_scheduler.escalation import EscalationQueue
from salon_scheduler.models import Priority
from salon_scheduler.notifier import escalation_payload, notify_manager

HOOK = "https://hooks.example.com/manager"


def _message(priority=Priority.normal):
    return EscalationQueue().escalate(
        "Wants a house call", "Not a salon service", priority, now=datetime(2024, 6, 10, 9, 15)
    )


def test_payload_marks_urgent_messages():
    payload = escalation_payload(_message(Priority.urgent))
    assert payload["text"].startswith("[URGENT] Client request: Wants a house call")
    assert payload["priority"] == "urgent"
    assert payload["created_at"] == "2024-06-10T09:15:00"


@pytest.mark.asyncio
async def test_notify_manager_posts_payload():
    msg = _message()
    with respx.mock() as m:
        route = m.post(HOOK).respond(200, json={"ok": True})

        await notify_manager(HOOK, msg)

        assert route.called
        sent = route.calls.last.request
        assert json.loads(sent.content)["message_id"] == msg.id


@pytest.mark.asyncio
async def test_notify_manager_raises_on_http_error():
    with respx.mock() as m:
        m.post(HOOK).respond(500)

        with pytest.raises(httpx.HTTPStatusError):
            await notify_manager(HOOK, _message())
