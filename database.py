"""
Database access for the E-Life portal.

Every page talks to the hosted Supabase (PostgREST) backend through the
helpers in this module so that failures are logged and surfaced as a single
exception type.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import streamlit as st
from postgrest.exceptions import APIError
from supabase import create_client

logger = logging.getLogger(__name__)

# ============================================
# Table names
# ============================================
ADMINS = "admins"
CATEGORIES = "employment_categories"
REGISTRATIONS = "employment_registrations"
PROGRAMS = "programs"
SUB_PROJECTS = "sub_projects"
CLIENTS = "registered_clients"
NOTIFICATIONS = "notifications"
STOP_REQUESTS = "program_stop_requests"
FILE_UPLOADS = "file_uploads"

ADMIN_PUBLIC_COLUMNS = "id, username, role, permissions, is_active, created_at, updated_at"


class DatabaseError(Exception):
    """Raised when the backend rejects a query or procedure call."""


@st.cache_resource(show_spinner=False)
def get_supabase_client():
    return create_client(
        st.secrets["SUPABASE_URL"].strip(),
        st.secrets["SUPABASE_KEY"].strip(),
    )


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def run(query, action: str) -> List[Dict[str, Any]]:
    """Execute a PostgREST builder and return its rows."""
    try:
        response = query.execute()
    except APIError as exc:
        logger.error(f"❌ {action} failed: {exc.message}")
        raise DatabaseError(f"{action} failed: {exc.message}") from exc
    return response.data or []


def fetch_all(
    client,
    table: str,
    columns: str = "*",
    order_by: Optional[str] = None,
    desc: bool = False,
    **filters: Any,
) -> List[Dict[str, Any]]:
    query = client.table(table).select(columns)
    for column, value in filters.items():
        query = query.eq(column, value)
    if order_by:
        query = query.order(order_by, desc=desc)
    return run(query, f"Loading {table}")


def fetch_in(client, table: str, column: str, values: List[Any], **filters: Any) -> List[Dict[str, Any]]:
    """Select rows whose ``column`` is one of ``values``."""
    if not values:
        return []
    query = client.table(table).select("*").in_(column, list(values))
    for key, value in filters.items():
        query = query.eq(key, value)
    return run(query, f"Loading {table}")


def fetch_one(client, table: str, columns: str = "*", **filters: Any) -> Optional[Dict[str, Any]]:
    query = client.table(table).select(columns)
    for column, value in filters.items():
        query = query.eq(column, value)
    rows = run(query.limit(1), f"Loading {table}")
    return rows[0] if rows else None


def insert(client, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
    rows = run(client.table(table).insert(row), f"Saving {table}")
    logger.info(f"✅ Inserted into {table}: {rows[0].get('id') if rows else '-'}")
    return rows[0] if rows else {}


def upsert(client, table: str, rows: List[Dict[str, Any]], on_conflict: str) -> List[Dict[str, Any]]:
    saved = run(client.table(table).upsert(rows, on_conflict=on_conflict), f"Saving {table}")
    logger.info(f"✅ Upserted {len(saved)} row(s) into {table} on {on_conflict}")
    return saved


def update(client, table: str, row_id: Any, changes: Dict[str, Any]) -> List[Dict[str, Any]]:
    payload = dict(changes)
    payload["updated_at"] = now_iso()
    rows = run(client.table(table).update(payload).eq("id", row_id), f"Updating {table}")
    logger.info(f"✅ Updated {table} {row_id}: {sorted(changes)}")
    return rows


def delete(client, table: str, row_id: Any) -> None:
    run(client.table(table).delete().eq("id", row_id), f"Deleting from {table}")
    logger.info(f"🗑️ Deleted {table} {row_id}")


def rpc(client, name: str, params: Dict[str, Any]) -> Any:
    try:
        response = client.rpc(name, params).execute()
    except APIError as exc:
        logger.error(f"❌ Procedure {name} failed: {exc.message}")
        raise DatabaseError(f"{name} failed: {exc.message}") from exc
    return response.data
