# portal_api/db/supabase_client.py
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from postgrest.exceptions import APIError as PostgrestAPIError
from pydantic import BaseModel, ValidationError
from supabase import Client, create_client

from portal_api.core.config import get_settings


# -----------------------
# Exceptions
# -----------------------
class DBError(Exception):
    """DB layer base exception."""


class DBQueryError(DBError):
    """Supabase/PostgREST query failed."""


M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class DBResult:
    data: Any


# -----------------------
# Client (singleton)
# -----------------------
@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Create the Supabase client with the service role key.
    Cached for the process lifetime; the portal only reads through it.
    """
    s = get_settings()
    return create_client(s.supabase_url, s.supabase_service_key)


# -----------------------
# Helpers
# -----------------------
def _get_data(resp: Any) -> Any:
    if hasattr(resp, "data"):
        return resp.data
    return getattr(resp, "get", lambda *_: None)("data")


def execute(query: Any) -> DBResult:
    """
    Execute a built postgrest query and normalize the response.
    Every failure surfaces as DBQueryError.
    """
    try:
        resp = query.execute()
        return DBResult(data=_get_data(resp))
    except PostgrestAPIError as e:
        raise DBQueryError(str(e)) from e
    except Exception as e:
        raise DBQueryError(str(e)) from e


def ensure_list(data: Any) -> List[Dict[str, Any]]:
    if data is None:
        return []
    if isinstance(data, list):
        return data
    # .single() yields a dict
    if isinstance(data, dict):
        return [data]
    raise DBQueryError(f"Unexpected response data type: {type(data)}")


def fetch_all(build_query: Callable[[], Any], *, page_size: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Pull every row of a query, one `.range()` page at a time.

    PostgREST caps the rows of a single response, so counting queries must
    page. `build_query` is called once per page because postgrest builders
    accumulate their parameters.
    """
    size = int(page_size if page_size is not None else get_settings().db_page_size)
    rows: List[Dict[str, Any]] = []
    offset = 0
    while True:
        q = build_query().range(offset, offset + size - 1)
        page = ensure_list(execute(q).data)
        rows.extend(page)
        if len(page) < size:
            return rows
        offset += size


def parse_row(model: Type[M], row: Dict[str, Any], *, table: str) -> M:
    """Validate a stored row; malformed data is a DB problem, not a bad request."""
    try:
        return model.model_validate(row)
    except ValidationError as e:
        raise DBQueryError(f"invalid {table} row: {e}") from e
