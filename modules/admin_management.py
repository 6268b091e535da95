#!/usr/bin/env python3
"""Admin user management module."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import pandas as pd
import streamlit as st

import database
from config import DEFAULT_ROLE
from login import require_admin

logger = logging.getLogger(__name__)


class AdminError(ValueError):
    pass


def _hash_password(db, password: str) -> str:
    hashed = database.rpc(db, "hash_password", {"password": password})
    if not hashed:
        raise AdminError("Failed to hash password")
    return hashed


def _username_taken(db, username: str, exclude_id: Optional[str] = None) -> bool:
    existing = database.fetch_one(db, database.ADMINS, columns="id", username=username)
    return existing is not None and existing["id"] != exclude_id


def list_admins(db):
    return database.fetch_all(db, database.ADMINS, columns=database.ADMIN_PUBLIC_COLUMNS, order_by="created_at")


def create_admin(db, username: str, password: str, role: str = DEFAULT_ROLE) -> Dict:
    username = (username or "").strip()
    if not username or not password:
        raise AdminError("Username and password are required")
    if _username_taken(db, username):
        raise AdminError(f"Admin {username} already exists")

    row = database.insert(
        db,
        database.ADMINS,
        {
            "username": username,
            "password_hash": _hash_password(db, password),
            "role": role,
            "permissions": {},
            "is_active": True,
        },
    )
    logger.info(f"👤 Created admin {username}")
    return {key: value for key, value in row.items() if key != "password_hash"}


def update_admin(db, admin_id: str, username: str, new_password: str = "") -> None:
    """Rename an admin and optionally set a new password."""
    username = (username or "").strip()
    if not username:
        raise AdminError("Username is required")
    if _username_taken(db, username, exclude_id=admin_id):
        raise AdminError(f"Admin {username} already exists")

    changes = {"username": username}
    if new_password:
        changes["password_hash"] = _hash_password(db, new_password)
    database.update(db, database.ADMINS, admin_id, changes)


def delete_admin(db, admin_id: str, current_admin_id: str) -> None:
    if admin_id == current_admin_id:
        raise AdminError("You cannot delete your own account")
    database.delete(db, database.ADMINS, admin_id)


def render() -> None:
    admin = require_admin("can_manage_users")
    st.title("Admin Management")
    db = database.get_supabase_client()

    st.subheader("Create Admin")
    with st.form("create_admin_form", clear_on_submit=True):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Create Admin")
    if submitted:
        try:
            create_admin(db, username, password)
        except (AdminError, database.DatabaseError) as exc:
            st.error(str(exc))
        else:
            st.success("Admin user created successfully")

    st.subheader("Existing Admins")
    try:
        admins = list_admins(db)
    except database.DatabaseError as exc:
        st.error(f"Failed to fetch admin users: {exc}")
        return
    st.dataframe(
        pd.DataFrame(admins).reindex(columns=["username", "role", "is_active", "created_at"]),
        use_container_width=True,
        hide_index=True,
    )

    for row in admins:
        if st.button(row["username"], key=f"edit_admin_{row['id']}"):
            st.session_state["edit_admin_id"] = row["id"]

    if "edit_admin_id" in st.session_state:
        admin_id = st.session_state["edit_admin_id"]
        admin_data = next((a for a in admins if a["id"] == admin_id), None)
        if admin_data is None:
            del st.session_state["edit_admin_id"]
            return

        @st.dialog("Edit Admin")
        def edit_admin_dialog():
            new_username = st.text_input("Username", value=admin_data["username"])
            new_password = st.text_input("New Password (leave blank to keep)", type="password")
            col1, col2 = st.columns(2)
            with col1:
                if st.button("Save", key=f"save_admin_{admin_id}"):
                    try:
                        update_admin(db, admin_id, new_username, new_password)
                    except (AdminError, database.DatabaseError) as exc:
                        st.error(str(exc))
                        return
                    del st.session_state["edit_admin_id"]
                    st.rerun()
            with col2:
                if st.button("Cancel", key=f"cancel_admin_{admin_id}"):
                    del st.session_state["edit_admin_id"]
                    st.rerun()
            if admin_id != admin["id"] and st.button("Delete Admin", key=f"delete_admin_{admin_id}"):
                try:
                    delete_admin(db, admin_id, admin["id"])
                except (AdminError, database.DatabaseError) as exc:
                    st.error(str(exc))
                    return
                del st.session_state["edit_admin_id"]
                st.rerun()

        edit_admin_dialog()
