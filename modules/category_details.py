#!/usr/bin/env python3
"""Category details module."""

from __future__ import annotations

from typing import Dict, Optional

import streamlit as st

import database
from login import has_permission
from modules.program_form import edit_program
from modules.sub_project_form import edit_sub_project


def category_overview(db, category_id: str) -> Optional[Dict]:
    category = database.fetch_one(db, database.CATEGORIES, id=category_id)
    if category is None:
        return None
    return {
        **category,
        "programs": database.fetch_all(db, database.PROGRAMS, order_by="name", category_id=category_id),
        "sub_projects": database.fetch_all(db, database.SUB_PROJECTS, order_by="name", category_id=category_id),
    }


def _admin_buttons(db, table: str, item: Dict, on_edit) -> None:
    col1, col2 = st.columns(2)
    with col1:
        if has_permission("can_edit") and st.button("Edit", key=f"edit_{table}_{item['id']}"):
            on_edit(item["id"], item.get("category_id"))
            st.rerun()
    with col2:
        if has_permission("can_delete") and st.button("Delete", key=f"delete_{table}_{item['id']}"):
            try:
                database.delete(db, table, item["id"])
            except database.DatabaseError as exc:
                st.error(f"Failed to delete: {exc}")
            else:
                st.rerun()


def render() -> None:
    db = database.get_supabase_client()
    try:
        categories = database.fetch_all(db, database.CATEGORIES, order_by="name", is_active=True)
    except database.DatabaseError as exc:
        st.error(str(exc))
        return
    if not categories:
        st.info("No employment categories available yet.")
        return

    ids = [c["id"] for c in categories]
    selected = st.session_state.get("selected_category_id")
    category_id = st.selectbox(
        "Category",
        ids,
        index=ids.index(selected) if selected in ids else 0,
        format_func=lambda cid: next(c["name"] for c in categories if c["id"] == cid),
    )
    st.session_state["selected_category_id"] = category_id

    try:
        category = category_overview(db, category_id)
    except database.DatabaseError as exc:
        st.error(str(exc))
        return
    if category is None:
        st.error("Category not found")
        return

    st.title(category["name"])
    if category.get("description"):
        st.write(category["description"])

    programs_tab, sub_projects_tab = st.tabs(
        [f"Programs ({len(category['programs'])})", f"Sub-projects ({len(category['sub_projects'])})"]
    )
    with programs_tab:
        if has_permission("can_create") and st.button("Add Program"):
            edit_program(category_id=category_id)
            st.rerun()
        if not category["programs"]:
            st.info("No programs in this category yet.")
        for program in category["programs"]:
            with st.container(border=True):
                st.subheader(program["name"])
                if program.get("description"):
                    st.write(program["description"])
                if program.get("conditions"):
                    st.caption(f"Conditions: {program['conditions']}")
                _admin_buttons(db, database.PROGRAMS, program, edit_program)

    with sub_projects_tab:
        if has_permission("can_create") and st.button("Add Sub-project"):
            edit_sub_project(category_id=category_id)
            st.rerun()
        if not category["sub_projects"]:
            st.info("No sub-projects in this category yet.")
        for sub_project in category["sub_projects"]:
            with st.container(border=True):
                st.subheader(sub_project["name"])
                if sub_project.get("description"):
                    st.write(sub_project["description"])
                _admin_buttons(db, database.SUB_PROJECTS, sub_project, edit_sub_project)
