#!/usr/bin/env python3
"""All programs module."""

from __future__ import annotations

import pandas as pd
import streamlit as st

import database
from translations import t

PROGRAM_LIST_COLUMNS = [
    "id",
    "name",
    "description",
    "conditions",
    "category_id",
    "category_name",
    "sub_project_name",
]


def program_listing(db) -> pd.DataFrame:
    """Every program with its category and sub-project names."""
    programs = pd.DataFrame(database.fetch_all(db, database.PROGRAMS, order_by="name"))
    programs = programs.reindex(columns=["id", "name", "description", "conditions", "category_id", "sub_project_id"])
    categories = pd.DataFrame(database.fetch_all(db, database.CATEGORIES)).reindex(columns=["id", "name"])
    sub_projects = pd.DataFrame(database.fetch_all(db, database.SUB_PROJECTS)).reindex(columns=["id", "name"])

    for frame, key in ((programs, "category_id"), (programs, "sub_project_id"), (categories, "id"), (sub_projects, "id")):
        frame[key] = frame[key].astype(object)

    df = programs.merge(
        categories.rename(columns={"id": "category_id", "name": "category_name"}), on="category_id", how="left"
    )
    df = df.merge(
        sub_projects.rename(columns={"id": "sub_project_id", "name": "sub_project_name"}),
        on="sub_project_id",
        how="left",
    )
    df = df.reindex(columns=PROGRAM_LIST_COLUMNS)
    return df.astype(object).where(pd.notna(df), None)


def search_programs(df: pd.DataFrame, term: str) -> pd.DataFrame:
    term = (term or "").strip().lower()
    if not term:
        return df
    mask = pd.Series(False, index=df.index)
    for column in ("name", "description", "category_name"):
        mask |= df[column].fillna("").astype(str).str.lower().str.contains(term, regex=False)
    return df[mask]


def render() -> None:
    st.title(t("nav.allPrograms"))
    try:
        df = program_listing(database.get_supabase_client())
    except database.DatabaseError as exc:
        st.error(f"Failed to load programs: {exc}")
        return

    search = st.text_input("Search programs", placeholder="Program, description or category")
    filtered = search_programs(df, search)
    st.caption(f"{len(filtered)} program(s)")

    if filtered.empty:
        st.info("No programs found.")
        return

    for category_name, group in filtered.groupby(filtered["category_name"].fillna("Uncategorised"), sort=True):
        st.markdown(f"## {category_name}")
        for _, program in group.iterrows():
            with st.container(border=True):
                st.subheader(program["name"])
                if program["sub_project_name"]:
                    st.caption(f"Sub-project: {program['sub_project_name']}")
                if program["description"]:
                    st.write(program["description"])
                if program["conditions"]:
                    st.caption(f"Conditions: {program['conditions']}")
