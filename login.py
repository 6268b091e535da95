import logging
from typing import Dict, Optional, Tuple, Union

import streamlit as st

import database
from translations import leave_edit_mode
from config import DEFAULT_ROLE, PERMISSION_KEYS, ROLE_PERMISSIONS

logger = logging.getLogger(__name__)


class AuthError(Exception):
    pass


def effective_permissions(admin: Dict) -> Dict[str, bool]:
    """Role defaults overlaid with any per-admin overrides."""
    role = admin.get("role") or DEFAULT_ROLE
    permissions = dict(ROLE_PERMISSIONS.get(role, ROLE_PERMISSIONS["viewer"]))
    for key, value in (admin.get("permissions") or {}).items():
        if key in PERMISSION_KEYS:
            permissions[key] = bool(value)
    return permissions


def authenticate(client, username: str, password: str) -> Dict:
    username = (username or "").strip()
    if not username or not password:
        raise AuthError("Username and password are required")

    verified = database.rpc(client, "verify_password", {"username": username, "password": password})
    if not verified:
        logger.info(f"Rejected login for {username}")
        raise AuthError("Invalid username or password")

    row = database.fetch_one(client, database.ADMINS, columns=database.ADMIN_PUBLIC_COLUMNS, username=username)
    if not row:
        raise AuthError("Failed to get admin data")
    if row.get("is_active") is False:
        raise AuthError("This admin account is disabled")

    admin = {
        "id": row["id"],
        "username": row["username"],
        "role": row.get("role") or DEFAULT_ROLE,
        "is_active": True,
    }
    admin["permissions"] = effective_permissions({**admin, "permissions": row.get("permissions")})
    logger.info(f"Admin {username} logged in")
    return admin


def current_admin() -> Optional[Dict]:
    return st.session_state.get("admin")


def has_permission(permission: str) -> bool:
    admin = current_admin()
    return bool(admin and admin.get("permissions", {}).get(permission))


def grants(admin: Optional[Dict], required: Union[None, str, Tuple[str, ...]]) -> bool:
    """True when ``admin`` holds ``required``; a tuple means any one of them."""
    if admin is None:
        return False
    if required is None:
        return True
    permissions = admin.get("permissions", {})
    if isinstance(required, str):
        required = (required,)
    return any(permissions.get(permission) for permission in required)


def require_admin(permission: Optional[str] = None) -> Dict:
    admin = current_admin()
    if admin is None:
        st.error("Login required.")
        st.stop()
    if permission and not admin.get("permissions", {}).get(permission):
        st.error("You do not have permission to access this page.")
        st.stop()
    return admin


def logout() -> None:
    admin = st.session_state.pop("admin", None)
    leave_edit_mode()
    if admin:
        logger.info(f"Admin {admin['username']} logged out")


def login():
    st.title("Admin Login")

    username = st.text_input("Username")
    password = st.text_input("Password", type="password")

    if st.button("Login"):
        try:
            st.session_state.admin = authenticate(database.get_supabase_client(), username, password)
        except (AuthError, database.DatabaseError) as exc:
            st.error(str(exc))
            return
        st.rerun()
