#!/usr/bin/env python3
"""Add / edit sub-project module."""

from __future__ import annotations

from typing import Dict, Optional

import streamlit as st

import database
from login import has_permission, require_admin


class SubProjectError(ValueError):
    pass


def save_sub_project(
    db,
    name: str,
    category_id: Optional[str],
    description: str = "",
    sub_project_id: Optional[str] = None,
) -> Dict:
    name = (name or "").strip()
    if not name:
        raise SubProjectError("Sub-project name is required")
    if not category_id:
        raise SubProjectError("Please select a category")

    values = {"name": name, "category_id": category_id, "description": (description or "").strip() or None}
    if sub_project_id:
        database.update(db, database.SUB_PROJECTS, sub_project_id, values)
        return {"id": sub_project_id, **values}
    return database.insert(db, database.SUB_PROJECTS, values)


def edit_sub_project(sub_project_id: Optional[str] = None, category_id: Optional[str] = None) -> None:
    st.session_state["edit_sub_project_id"] = sub_project_id
    st.session_state["sub_project_category_id"] = category_id
    st.session_state["nav"] = "Add Sub-project"


def render() -> None:
    require_admin()
    db = database.get_supabase_client()

    sub_project_id = st.session_state.get("edit_sub_project_id")
    if not has_permission("can_edit" if sub_project_id else "can_create"):
        st.error("You do not have permission to access this page.")
        st.stop()

    try:
        categories = database.fetch_all(db, database.CATEGORIES, order_by="name", is_active=True)
        sub_project = database.fetch_one(db, database.SUB_PROJECTS, id=sub_project_id) if sub_project_id else None
    except database.DatabaseError as exc:
        st.error(f"Failed to load form data: {exc}")
        return

    st.title("Edit Sub-project" if sub_project else "Add New Sub-project")
    if not categories:
        st.warning("Create an active category first.")
        return

    sub_project = sub_project or {}
    category_ids = [c["id"] for c in categories]
    default_category = sub_project.get("category_id") or st.session_state.get("sub_project_category_id")

    with st.form("sub_project_form"):
        category_id = st.selectbox(
            "Category",
            category_ids,
            index=category_ids.index(default_category) if default_category in category_ids else 0,
            format_func=lambda cid: next(c["name"] for c in categories if c["id"] == cid),
        )
        name = st.text_input("Sub-project Name", value=sub_project.get("name", ""))
        description = st.text_area("Description", value=sub_project.get("description") or "")
        submitted = st.form_submit_button("Update Sub-project" if sub_project else "Create Sub-project")

    if submitted:
        try:
            save_sub_project(db, name, category_id, description, sub_project.get("id"))
        except (SubProjectError, database.DatabaseError) as exc:
            st.error(str(exc))
            return
        st.success("Sub-project updated successfully" if sub_project else "Sub-project created successfully")
        st.session_state.pop("edit_sub_project_id", None)
