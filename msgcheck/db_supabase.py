"""Supabase (PostgREST) client for the messaging and calendar checks - SYNC VERSION."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .config import Settings

logger = logging.getLogger(__name__)

# Characters PostgREST treats as syntax inside or=(...) clauses
_RESERVED = set(',.:()"\\ ')


def _filter_value(value: Any) -> str:
    text = str(value)
    if any(ch in _RESERVED for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


@dataclass
class QueryError:
    message: str
    code: Optional[str] = None
    details: Optional[str] = None
    hint: Optional[str] = None
    status: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "hint": self.hint,
            "status": self.status,
        }


@dataclass
class QueryResult:
    """Result/error pair returned by every remote call."""

    data: Any = None
    error: Optional[QueryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def rows(self) -> List[Any]:
        return self.data if isinstance(self.data, list) else []

    @property
    def count(self) -> int:
        return len(self.rows)


def _error_from_response(response: httpx.Response) -> QueryError:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("message") or body.get("error_description") or body.get("error")
        if message:
            return QueryError(
                message=str(message),
                code=body.get("code"),
                details=body.get("details"),
                hint=body.get("hint"),
                status=response.status_code,
            )

    text = response.text.strip()
    return QueryError(message=text or f"HTTP {response.status_code}", status=response.status_code)


class SupabaseStore:
    """Synchronous Supabase REST client."""

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings or Settings.from_env()
        self.base_url = self.settings.rest_url
        self.client = httpx.Client(
            base_url=self.base_url,
            headers={
                "apikey": self.settings.key,
                "Authorization": f"Bearer {self.settings.key}",
                "Accept": "application/json",
                "Accept-Profile": self.settings.schema,
                "Content-Profile": self.settings.schema,
            },
            timeout=self.settings.timeout,
            transport=transport,
        )
        self.metadata = {"source": "supabase", "url": self.settings.url, "schema": self.settings.schema}
        logger.info("Supabase store initialized: %s", self.base_url)

    def _request(self, method: str, path: str, label: str, **kwargs) -> QueryResult:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            logger.warning("Supabase request failed (%s): %s", label, message)
            return QueryResult(error=QueryError(message=message))

        if response.is_error:
            error = _error_from_response(response)
            logger.warning("Supabase returned %s (%s): %s", response.status_code, label, error.message)
            return QueryResult(error=error)

        if not response.content.strip():
            return QueryResult(data=None)
        try:
            return QueryResult(data=response.json())
        except ValueError:
            logger.warning("Supabase returned non-JSON body (%s)", label)
            return QueryResult(error=QueryError(message="Invalid JSON in response", status=response.status_code))

    # ========== TABLES ==========

    def select(
        self,
        table: str,
        columns: str = "*",
        *,
        eq: Optional[Dict[str, Any]] = None,
        any_of: Optional[List[Tuple[str, Any]]] = None,
        order: Optional[str] = None,
        ascending: bool = True,
        limit: Optional[int] = None,
    ) -> QueryResult:
        """Read rows from a table.

        ``eq`` adds one equality filter per column, sent as-is. ``any_of`` is a
        list of ``(column, value)`` equality pairs joined with OR; values there
        are quoted when they contain reserved characters.
        """
        params: List[Tuple[str, str]] = [("select", columns)]
        for column, value in (eq or {}).items():
            params.append((column, f"eq.{value}"))
        if any_of:
            clauses = ",".join(f"{column}.eq.{_filter_value(value)}" for column, value in any_of)
            params.append(("or", f"({clauses})"))
        if order:
            params.append(("order", f"{order}.{'asc' if ascending else 'desc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))

        return self._request("GET", f"/{table}", table, params=params)

    def messages_for_user(self, user_id: str) -> QueryResult:
        """All messages sent or received by a user, newest first."""
        return self.select(
            "messages",
            any_of=[("sender_id", user_id), ("receiver_id", user_id)],
            order="created_at",
            ascending=False,
        )

    # ========== FUNCTIONS ==========

    def rpc(self, function: str, args: Optional[Dict[str, Any]] = None) -> QueryResult:
        """Call a Postgres function through /rpc."""
        return self._request("POST", f"/rpc/{function}", function, json=args or {})

    def get_recent_conversations(self, user_id: str) -> QueryResult:
        return self.rpc("get_recent_conversations", {"p_user_id": user_id})

    def get_conversation_messages(
        self,
        user1_id: str,
        user2_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> QueryResult:
        args: Dict[str, Any] = {"p_user1_id": user1_id, "p_user2_id": user2_id}
        if limit is not None:
            args["p_limit"] = limit
        if offset is not None:
            args["p_offset"] = offset
        return self.rpc("get_conversation_messages", args)

    def get_user_calendar_data(self, user_id: str, start_date: str, end_date: str) -> QueryResult:
        return self.rpc("get_user_calendar_data", {
            "p_user_id": user_id,
            "p_start_date": start_date,
            "p_end_date": end_date,
        })

    def close(self):
        """Close HTTP client."""
        self.client.close()


# Global store instance
_store: Optional[SupabaseStore] = None


def get_store() -> SupabaseStore:
    """Get or create the global Supabase store instance."""
    global _store
    if _store is None:
        _store = SupabaseStore()
    return _store


def close_store():
    """Close the global store instance."""
    global _store
    if _store:
        _store.close()
        _store = None
