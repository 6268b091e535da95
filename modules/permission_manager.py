#!/usr/bin/env python3
"""Role and permission manager module."""

from __future__ import annotations

from typing import Dict

import pandas as pd
import streamlit as st

import database
from config import PERMISSION_KEYS, ROLE_PERMISSIONS, ROLES
from login import effective_permissions, require_admin


class RoleError(ValueError):
    pass


def permission_overrides(role: str, permissions: Dict[str, bool]) -> Dict[str, bool]:
    """Keep only the permissions that differ from the role's defaults."""
    defaults = ROLE_PERMISSIONS[role]
    return {
        key: bool(permissions[key])
        for key in PERMISSION_KEYS
        if key in permissions and bool(permissions[key]) != defaults[key]
    }


def save_admin_permissions(
    db,
    admin_id: str,
    role: str,
    permissions: Dict[str, bool],
    is_active: bool,
    current_admin_id: str,
) -> Dict:
    if role not in ROLES:
        raise RoleError(f"Unknown role: {role}")
    if admin_id == current_admin_id and not is_active:
        raise RoleError("You cannot deactivate your own account")

    changes = {"role": role, "permissions": permission_overrides(role, permissions), "is_active": bool(is_active)}
    database.update(db, database.ADMINS, admin_id, changes)
    return changes


def _to_title(value: object) -> str:
    text = str(value or "").strip()
    return text.replace("_", " ").title() if text else ""


def render() -> None:
    current = require_admin("can_manage_users")
    st.title("Permission Manager")
    db = database.get_supabase_client()

    with st.expander("Default role permissions"):
        matrix = pd.DataFrame(ROLE_PERMISSIONS).reindex(PERMISSION_KEYS)
        matrix.index = [_to_title(key) for key in matrix.index]
        matrix.columns = [_to_title(role) for role in matrix.columns]
        st.dataframe(matrix, use_container_width=True)

    try:
        admins = database.fetch_all(db, database.ADMINS, columns=database.ADMIN_PUBLIC_COLUMNS, order_by="username")
    except database.DatabaseError as exc:
        st.error(f"Failed to fetch admin users: {exc}")
        return
    if not admins:
        st.info("No admin users found.")
        return

    labels = {a["id"]: f"{a['username']} ({_to_title(a.get('role'))})" for a in admins}
    admin_id = st.selectbox("Admin", list(labels), format_func=labels.get)
    admin_data = next(a for a in admins if a["id"] == admin_id)

    role = st.selectbox(
        "Role",
        ROLES,
        index=ROLES.index(admin_data.get("role")) if admin_data.get("role") in ROLES else 0,
        format_func=_to_title,
        key=f"role_{admin_id}",
    )
    effective = effective_permissions({"role": role, "permissions": admin_data.get("permissions")})

    st.markdown("**Permissions**")
    chosen = {}
    columns = st.columns(2)
    for idx, key in enumerate(PERMISSION_KEYS):
        with columns[idx % 2]:
            chosen[key] = st.checkbox(_to_title(key), value=effective[key], key=f"perm_{admin_id}_{role}_{key}")
    is_active = st.toggle("Account active", value=admin_data.get("is_active", True), key=f"active_{admin_id}")

    if st.button("Save Permissions"):
        try:
            save_admin_permissions(db, admin_id, role, chosen, is_active, current["id"])
        except (RoleError, database.DatabaseError) as exc:
            st.error(str(exc))
        else:
            st.success("User role and permissions have been updated")
            if admin_id == current["id"]:
                st.session_state.admin = {
                    **current,
                    "role": role,
                    "permissions": effective_permissions(
                        {"role": role, "permissions": permission_overrides(role, chosen)}
                    ),
                }
