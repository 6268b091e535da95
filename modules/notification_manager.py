#!/usr/bin/env python3
"""Notification manager module."""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

import database
from config import NOTIFICATION_TYPES
from login import require_admin

TARGET_TABLES = {
    "category": database.CATEGORIES,
    "sub_project": database.SUB_PROJECTS,
    "program": database.PROGRAMS,
}


class NotificationError(ValueError):
    pass


def save_notification(
    db,
    title: str,
    message: str,
    notification_type: str,
    target_id: Optional[str],
    is_active: bool = True,
    notification_id: Optional[str] = None,
) -> Dict:
    title = (title or "").strip()
    message = (message or "").strip()
    if not title or not message or not notification_type or not target_id:
        raise NotificationError("Please fill in all required fields")
    if notification_type not in NOTIFICATION_TYPES:
        raise NotificationError(f"Unknown notification type: {notification_type}")
    if database.fetch_one(db, TARGET_TABLES[notification_type], id=target_id) is None:
        raise NotificationError(f"Selected {notification_type.replace('_', '-')} does not exist")

    values = {
        "title": title,
        "message": message,
        "type": notification_type,
        "target_id": target_id,
        "is_active": bool(is_active),
    }
    if notification_id:
        database.update(db, database.NOTIFICATIONS, notification_id, values)
        return {"id": notification_id, **values}
    return database.insert(db, database.NOTIFICATIONS, values)


def target_options(db, notification_type: str) -> List[Dict]:
    return database.fetch_all(db, TARGET_TABLES[notification_type], columns="id, name", order_by="name")


def _notification_form(db, notification: Optional[Dict]) -> None:
    notification = notification or {}
    current_type = notification.get("type", NOTIFICATION_TYPES[0])
    notification_type = st.selectbox(
        "Type",
        NOTIFICATION_TYPES,
        index=NOTIFICATION_TYPES.index(current_type) if current_type in NOTIFICATION_TYPES else 0,
        format_func=lambda t: t.replace("_", "-").title(),
        key="notification_type",
    )
    targets = target_options(db, notification_type)
    if not targets:
        st.warning(f"No {notification_type.replace('_', '-')}s available.")
        return
    target_ids = [target["id"] for target in targets]
    current_target = notification.get("target_id")

    with st.form("notification_form", clear_on_submit=not notification):
        target_id = st.selectbox(
            "Target",
            target_ids,
            index=target_ids.index(current_target) if current_target in target_ids else 0,
            format_func=lambda tid: next(t["name"] for t in targets if t["id"] == tid),
        )
        title = st.text_input("Title", value=notification.get("title", ""))
        message = st.text_area("Message", value=notification.get("message", ""))
        is_active = st.checkbox("Active", value=notification.get("is_active", True))
        submitted = st.form_submit_button("Update Notification" if notification else "Create Notification")

    if submitted:
        try:
            save_notification(db, title, message, notification_type, target_id, is_active, notification.get("id"))
        except (NotificationError, database.DatabaseError) as exc:
            st.error(str(exc))
            return
        st.session_state.pop("edit_notification_id", None)
        st.success("Notification updated successfully" if notification else "Notification created successfully")
        st.rerun()


def render() -> None:
    require_admin("can_edit")
    st.title("Notification Manager")
    db = database.get_supabase_client()

    try:
        notifications = database.fetch_all(db, database.NOTIFICATIONS, order_by="created_at", desc=True)
    except database.DatabaseError as exc:
        st.error(f"Failed to load data: {exc}")
        return

    editing_id = st.session_state.get("edit_notification_id")
    editing = next((n for n in notifications if n["id"] == editing_id), None)
    st.subheader("Edit Notification" if editing else "Create Notification")
    if editing and st.button("Cancel Edit"):
        st.session_state.pop("edit_notification_id", None)
        st.rerun()
    _notification_form(db, editing)

    st.subheader("Existing Notifications")
    if not notifications:
        st.info("No notifications yet.")
        return

    st.dataframe(
        pd.DataFrame(notifications).reindex(columns=["title", "type", "is_active", "created_at"]),
        use_container_width=True,
        hide_index=True,
    )
    for notification in notifications:
        col1, col2, col3 = st.columns([4, 1, 1])
        with col1:
            st.markdown(f"**{notification['title']}** ({notification.get('type', '')})")
            st.caption(notification.get("message", ""))
        with col2:
            if st.button("Edit", key=f"edit_notification_{notification['id']}"):
                st.session_state["edit_notification_id"] = notification["id"]
                st.rerun()
        with col3:
            if st.button("Delete", key=f"delete_notification_{notification['id']}"):
                try:
                    database.delete(db, database.NOTIFICATIONS, notification["id"])
                except database.DatabaseError as exc:
                    st.error(f"Failed to delete notification: {exc}")
                else:
                    st.rerun()
