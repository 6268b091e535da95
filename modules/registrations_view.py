#!/usr/bin/env python3
"""Employment registrations dashboard module."""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import streamlit as st

import database
from config import ALL_STATUSES, REGISTRATION_EXPORT_COLUMNS
from eligibility import EligibilityError, allowed_actions, status_counts
from login import require_admin
from registrations import (
    change_registration_status,
    filter_registrations,
    load_registration_frame,
    panchayath_options,
)
from spreadsheets import export_filename, export_frame, registrations_to_excel

NO_ACTION = "Select Action"
ACTION_LABELS = {"Approve": "approve", "Reject": "reject", "Reset to Pending": "reset"}


def _to_title(value: object) -> str:
    text = str(value or "").strip()
    return text.replace("_", " ").title() if text else ""


def status_chart(counts: dict):
    chart_df = pd.DataFrame(
        {"Status": [_to_title(s) for s in ALL_STATUSES], "Registrations": [counts.get(s, 0) for s in ALL_STATUSES]}
    )
    fig = px.bar(chart_df, x="Status", y="Registrations", color="Status", text="Registrations")
    fig.update_layout(showlegend=False, height=320, margin=dict(l=10, r=10, t=30, b=10))
    return fig


def render() -> None:
    require_admin("can_manage_registrations")
    st.title("Employment Registrations")
    db = database.get_supabase_client()

    try:
        df = load_registration_frame(db)
        categories = database.fetch_all(db, database.CATEGORIES, order_by="name")
    except database.DatabaseError as exc:
        st.error(f"Failed to fetch registrations: {exc}")
        return

    counts = status_counts(df.to_dict(orient="records"))
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total", counts["total"])
    col2.metric("Pending", counts["pending"])
    col3.metric("Approved", counts["approved"])
    col4.metric("Rejected", counts["rejected"])
    if counts["total"]:
        st.plotly_chart(status_chart(counts), use_container_width=True)

    f1, f2, f3 = st.columns(3)
    with f1:
        category = st.selectbox("Category", ["all"] + [c["name"] for c in categories])
    with f2:
        status = st.selectbox("Status", ["all"] + ALL_STATUSES, format_func=lambda s: "All" if s == "all" else _to_title(s))
    with f3:
        panchayath = st.selectbox("Panchayath", ["all"] + panchayath_options(df))
    search = st.text_input("Search", placeholder="Name, customer ID, mobile or category")

    filtered = filter_registrations(df, category, status, panchayath, search).reset_index(drop=True)
    st.caption(f"Showing {len(filtered)} of {len(df)} registrations")

    if filtered.empty:
        st.info("No registrations found.")
        return

    export_df = export_frame(filtered, REGISTRATION_EXPORT_COLUMNS)
    st.download_button(
        "Export to Excel",
        data=registrations_to_excel(export_df, "Registrations"),
        file_name=export_filename("employment_registrations", "xlsx"),
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

    editor_df = pd.DataFrame(
        {
            "Name": filtered["client_name"].map(_to_title),
            "Customer ID": filtered["customer_id"].fillna(""),
            "Mobile": filtered["mobile_number"].fillna(""),
            "Category": filtered["category_name"].fillna(""),
            "Program": filtered["program_name"].fillna(""),
            "Panchayath": filtered["panchayath"].fillna(""),
            "Status": filtered["status"].map(_to_title),
            "Action": NO_ACTION,
        }
    )

    edited_df = st.data_editor(
        editor_df,
        use_container_width=True,
        hide_index=True,
        key="registrations_editor",
        column_config={
            "Action": st.column_config.SelectboxColumn(
                "Action",
                options=[NO_ACTION] + list(ACTION_LABELS),
            )
        },
        disabled=[c for c in editor_df.columns if c != "Action"],
    )

    for idx, row in edited_df.iterrows():
        label = str(row.get("Action", NO_ACTION)).strip()
        if label == NO_ACTION:
            continue

        registration = filtered.iloc[idx]
        action = ACTION_LABELS.get(label)
        if action not in allowed_actions(registration["status"], ACTION_LABELS.values()):
            st.warning(f"Cannot {label.lower()} a {_to_title(registration['status']).lower()} registration.")
            continue
        try:
            change_registration_status(db, registration["id"], action, registration["status"])
        except (EligibilityError, database.DatabaseError) as exc:
            st.error(f"Failed to update status: {exc}")
            return
        st.rerun()
