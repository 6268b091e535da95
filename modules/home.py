#!/usr/bin/env python3
"""Home page module."""

from __future__ import annotations

from typing import Dict, List

import streamlit as st

import database
from login import has_permission
from modules.program_form import edit_program
from modules.sub_project_form import edit_sub_project
from translations import t, translated_text

TOP_PROGRAMS = 3
TOP_SUB_PROJECTS = 5


def category_summaries(db) -> List[Dict]:
    """Active categories with their program / sub-project counts and previews."""
    categories = database.fetch_all(db, database.CATEGORIES, order_by="name", is_active=True)
    ids = [c["id"] for c in categories]
    programs = database.fetch_in(db, database.PROGRAMS, "category_id", ids)
    sub_projects = database.fetch_in(db, database.SUB_PROJECTS, "category_id", ids)

    summaries = []
    for category in categories:
        category_programs = [p for p in programs if p.get("category_id") == category["id"]]
        category_sub_projects = [s for s in sub_projects if s.get("category_id") == category["id"]]
        summaries.append(
            {
                **category,
                "program_count": len(category_programs),
                "sub_project_count": len(category_sub_projects),
                "programs": category_programs[:TOP_PROGRAMS],
                "sub_projects": category_sub_projects[:TOP_SUB_PROJECTS],
            }
        )
    return summaries


def show_category(category_id: str) -> None:
    st.session_state["selected_category_id"] = category_id
    st.session_state["nav"] = "Category Details"


def render() -> None:
    translated_text("hero.title1", kind="title")
    translated_text("hero.title2", kind="header")
    translated_text("hero.subtitle")

    if has_permission("can_create"):
        col1, col2 = st.columns(2)
        with col1:
            if st.button(t("hero.addNewProgram")):
                edit_program()
                st.rerun()
        with col2:
            if st.button("Add Sub-project"):
                edit_sub_project()
                st.rerun()

    translated_text("categories.title", kind="header")
    try:
        summaries = category_summaries(database.get_supabase_client())
    except database.DatabaseError as exc:
        st.error(f"Failed to load categories: {exc}")
        return

    if not summaries:
        st.info("No employment categories available yet.")
        return

    columns = st.columns(2)
    for idx, category in enumerate(summaries):
        with columns[idx % 2]:
            with st.container(border=True):
                st.subheader(category["name"])
                if category.get("description"):
                    st.write(category["description"])
                st.caption(f"{category['program_count']} programs · {category['sub_project_count']} sub-projects")
                for program in category["programs"]:
                    st.markdown(f"- {program['name']}")
                if category["sub_projects"]:
                    st.caption("Sub-projects: " + ", ".join(s["name"] for s in category["sub_projects"]))
                if st.button("View Details", key=f"view_category_{category['id']}"):
                    show_category(category["id"])
                    st.rerun()
