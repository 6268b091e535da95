#!/usr/bin/env python3
"""Add / edit program module."""

from __future__ import annotations

from typing import Dict, Optional

import streamlit as st

import database
from login import has_permission, require_admin


class ProgramError(ValueError):
    pass


def save_program(
    db,
    name: str,
    category_id: Optional[str],
    sub_project_id: Optional[str] = None,
    description: str = "",
    conditions: str = "",
    program_id: Optional[str] = None,
) -> Dict:
    """Create or update a program.

    The sub-project is optional but must belong to the chosen category.
    """
    name = (name or "").strip()
    if not name:
        raise ProgramError("Program name is required")
    if not category_id:
        raise ProgramError("Please select a category")
    if database.fetch_one(db, database.CATEGORIES, id=category_id) is None:
        raise ProgramError("Selected category does not exist")
    if sub_project_id:
        sub_project = database.fetch_one(db, database.SUB_PROJECTS, id=sub_project_id)
        if sub_project is None or sub_project.get("category_id") != category_id:
            raise ProgramError("Sub-project does not belong to the selected category")

    values = {
        "name": name,
        "category_id": category_id,
        "sub_project_id": sub_project_id or None,
        "description": (description or "").strip() or None,
        "conditions": (conditions or "").strip() or None,
    }
    if program_id:
        database.update(db, database.PROGRAMS, program_id, values)
        return {"id": program_id, **values}
    return database.insert(db, database.PROGRAMS, values)


def edit_program(program_id: Optional[str] = None, category_id: Optional[str] = None) -> None:
    """Open the program form from another page."""
    st.session_state["edit_program_id"] = program_id
    st.session_state["program_category_id"] = category_id
    st.session_state["nav"] = "Add Program"


def render() -> None:
    require_admin()
    db = database.get_supabase_client()

    program_id = st.session_state.get("edit_program_id")
    needed = "can_edit" if program_id else "can_create"
    if not has_permission(needed):
        st.error("You do not have permission to access this page.")
        st.stop()

    try:
        categories = database.fetch_all(db, database.CATEGORIES, order_by="name", is_active=True)
        program = database.fetch_one(db, database.PROGRAMS, id=program_id) if program_id else None
    except database.DatabaseError as exc:
        st.error(f"Failed to load form data: {exc}")
        return

    st.title("Edit Program" if program else "Add New Program")
    if not categories:
        st.warning("Create an active category first.")
        return

    program = program or {}
    category_ids = [c["id"] for c in categories]
    default_category = program.get("category_id") or st.session_state.get("program_category_id")
    category_id = st.selectbox(
        "Category",
        category_ids,
        index=category_ids.index(default_category) if default_category in category_ids else 0,
        format_func=lambda cid: next(c["name"] for c in categories if c["id"] == cid),
    )

    try:
        sub_projects = database.fetch_all(db, database.SUB_PROJECTS, order_by="name", category_id=category_id)
    except database.DatabaseError as exc:
        st.error(f"Failed to load sub-projects: {exc}")
        sub_projects = []
    sub_project_ids = [None] + [s["id"] for s in sub_projects]
    current_sub_project = program.get("sub_project_id")
    sub_project_id = st.selectbox(
        "Sub-project (optional)",
        sub_project_ids,
        index=sub_project_ids.index(current_sub_project) if current_sub_project in sub_project_ids else 0,
        format_func=lambda sid: "None" if sid is None else next(s["name"] for s in sub_projects if s["id"] == sid),
    )

    with st.form("program_form"):
        name = st.text_input("Program Name", value=program.get("name", ""))
        description = st.text_area("Description", value=program.get("description") or "")
        conditions = st.text_area("Conditions", value=program.get("conditions") or "")
        submitted = st.form_submit_button("Update Program" if program else "Create Program")

    if submitted:
        try:
            save_program(db, name, category_id, sub_project_id, description, conditions, program.get("id"))
        except (ProgramError, database.DatabaseError) as exc:
            st.error(str(exc))
            return
        st.success("Program updated successfully" if program else "Program created successfully")
        st.session_state.pop("edit_program_id", None)
