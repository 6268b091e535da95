#!/usr/bin/env python3
"""Employment categories management module."""

from __future__ import annotations

from typing import Dict, Optional

import pandas as pd
import streamlit as st

import database
from login import require_admin


class CategoryError(ValueError):
    pass


def save_category(db, name: str, description: str = "", category_id: Optional[str] = None) -> Dict:
    name = (name or "").strip()
    if not name:
        raise CategoryError("Category name is required")

    for existing in database.fetch_all(db, database.CATEGORIES):
        if existing["id"] != category_id and str(existing.get("name", "")).strip().lower() == name.lower():
            raise CategoryError(f"A category named {name} already exists")

    values = {"name": name, "description": (description or "").strip()}
    if category_id:
        database.update(db, database.CATEGORIES, category_id, values)
        return {"id": category_id, **values}
    return database.insert(db, database.CATEGORIES, {**values, "is_active": True})


def set_category_active(db, category_id: str, is_active: bool) -> None:
    database.update(db, database.CATEGORIES, category_id, {"is_active": bool(is_active)})


def _category_dialog(db, category: Optional[Dict]) -> None:
    @st.dialog("Edit Category" if category else "Add New Category")
    def category_dialog():
        name = st.text_input("Category Name", value=(category or {}).get("name", ""))
        description = st.text_area("Description", value=(category or {}).get("description") or "")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Update" if category else "Create", key="category_dialog_save"):
                try:
                    save_category(db, name, description, (category or {}).get("id"))
                except (CategoryError, database.DatabaseError) as exc:
                    st.error(str(exc))
                    return
                st.session_state.pop("category_dialog", None)
                st.rerun()
        with col2:
            if st.button("Cancel", key="category_dialog_cancel"):
                st.session_state.pop("category_dialog", None)
                st.rerun()

    category_dialog()


def render() -> None:
    require_admin("can_manage_categories")
    st.title("Categories Management")
    db = database.get_supabase_client()

    if st.button("Add Category"):
        st.session_state["category_dialog"] = "new"

    try:
        categories = database.fetch_all(db, database.CATEGORIES, order_by="name")
    except database.DatabaseError as exc:
        st.error(f"Failed to fetch categories: {exc}")
        return

    if not categories:
        st.info("No categories found.")

    for category in categories:
        with st.container(border=True):
            col1, col2, col3, col4 = st.columns([4, 1, 1, 1])
            with col1:
                st.markdown(f"**{category['name']}**")
                st.caption(category.get("description") or "")
            with col2:
                active = bool(category.get("is_active"))
                if st.button("Deactivate" if active else "Activate", key=f"toggle_category_{category['id']}"):
                    set_category_active(db, category["id"], not active)
                    st.rerun()
            with col3:
                if st.button("Edit", key=f"edit_category_{category['id']}"):
                    st.session_state["category_dialog"] = category["id"]
            with col4:
                if st.button("Delete", key=f"delete_category_{category['id']}"):
                    try:
                        database.delete(db, database.CATEGORIES, category["id"])
                    except database.DatabaseError as exc:
                        st.error(f"Failed to delete category: {exc}")
                    else:
                        st.rerun()

    st.subheader("Overview")
    st.dataframe(
        pd.DataFrame(categories, columns=["name", "description", "is_active", "created_at"]),
        use_container_width=True,
        hide_index=True,
    )

    selected = st.session_state.get("category_dialog")
    if selected:
        category = next((c for c in categories if c["id"] == selected), None)
        _category_dialog(db, category)
