"""
Shared fixtures: an in-memory stand-in for the Supabase REST API.

Requests go through httpx.MockTransport, so the real client code (URL
building, headers, error parsing) runs unchanged.
"""
import json

import httpx
import pytest

from msgcheck.config import Settings
from msgcheck.db_supabase import SupabaseStore

REST_PREFIX = "/rest/v1/"
RESERVED_PARAMS = {"select", "limit", "order", "or"}


class FakeSupabase:
    """Serves tables and functions from dicts and records every request."""

    def __init__(self):
        self.tables = {}
        self.functions = {}
        self.errors = {}
        self.requests = []

    def fail(self, name, status=404, message=None, code="PGRST205", hint=None):
        self.errors[name] = (status, {
            "message": message or f"Could not find '{name}' in the schema cache",
            "code": code,
            "details": None,
            "hint": hint,
        })

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len(REST_PREFIX):]

        if path.startswith("rpc/"):
            name = path[len("rpc/"):]
            if name in self.errors:
                status, body = self.errors[name]
                return httpx.Response(status, json=body)
            value = self.functions.get(name, [])
            if callable(value):
                value = value(json.loads(request.content or b"{}"))
            return httpx.Response(200, json=value)

        if path in self.errors:
            status, body = self.errors[path]
            return httpx.Response(status, json=body)

        rows = list(self.tables.get(path, []))
        for column, value in request.url.params.multi_items():
            if column in RESERVED_PARAMS:
                continue
            expected = value[len("eq."):]
            rows = [r for r in rows if str(r.get(column)) == expected]
        limit = request.url.params.get("limit")
        if limit is not None:
            rows = rows[:int(limit)]
        return httpx.Response(200, json=rows)

    def last(self, path_suffix):
        """Most recent request whose path ends with ``path_suffix``."""
        for request in reversed(self.requests):
            if request.url.path.endswith(path_suffix):
                return request
        raise AssertionError(f"no request to {path_suffix}")


@pytest.fixture
def settings():
    return Settings(url="https://demo.supabase.co", key="anon-key")


@pytest.fixture
def backend():
    return FakeSupabase()


@pytest.fixture
def store(settings, backend):
    s = SupabaseStore(settings, transport=httpx.MockTransport(backend.handler))
    yield s
    s.close()


@pytest.fixture
def down_store(settings):
    """A store whose every request fails to connect."""
    def refuse(request):
        raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

    s = SupabaseStore(settings, transport=httpx.MockTransport(refuse))
    yield s
    s.close()


@pytest.fixture
def seeded(backend):
    """Backend with one doctor (A) who has exchanged messages with B and C."""
    backend.tables.update({
        "messages": [
            {"id": 1, "sender_id": "A", "receiver_id": "B", "message_text": "hi", "created_at": "2025-07-02T10:00:00Z"},
            {"id": 2, "sender_id": "C", "receiver_id": "A", "message_text": "hello", "created_at": "2025-07-01T09:00:00Z"},
        ],
        "profiles": [
            {"user_id": "A", "full_name": "Dr. Ada", "role": "doctor"},
            {"user_id": "B", "full_name": "Ben", "role": "patient"},
            {"user_id": "C", "full_name": "Cleo", "role": "patient"},
        ],
        "doctors": [{"user_id": "A", "specialization": "cardiology"}],
        "patients": [{"user_id": "B"}, {"user_id": "C"}],
        "health_submissions": [{"id": 10, "patient_id": "B"}],
    })
    backend.functions.update({
        "get_recent_conversations": [{"other_user_id": "B"}, {"other_user_id": "C"}],
        "get_conversation_messages": [{"id": 1}],
        "get_user_calendar_data": [{"date": "2025-07-03", "entries": 2}],
    })
    return backend
