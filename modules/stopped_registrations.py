#!/usr/bin/env python3
"""Stopped registrations module."""

from __future__ import annotations

import streamlit as st

import database
from config import STOPPED_EXPORT_COLUMNS, STOPPED_PDF_COLUMNS, STOPPED_VIEW_STATUSES
from eligibility import EligibilityError
from login import has_permission, require_admin
from registrations import (
    change_registration_status,
    delete_registration,
    filter_registrations,
    load_registration_frame,
    panchayath_options,
)
from spreadsheets import export_filename, export_frame, registrations_to_excel, registrations_to_pdf


def _delete_dialog(db, registration) -> None:
    @st.dialog("Delete Registration")
    def delete_dialog():
        st.warning(
            f"Permanently delete the registration of {registration['client_name'] or 'this client'}? "
            "This cannot be undone."
        )
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Delete", key="confirm_delete_registration"):
                try:
                    delete_registration(db, registration["id"])
                except database.DatabaseError as exc:
                    st.error(f"Failed to delete registration: {exc}")
                    return
                st.session_state.pop("delete_registration_id", None)
                st.rerun()
        with col2:
            if st.button("Cancel", key="cancel_delete_registration"):
                st.session_state.pop("delete_registration_id", None)
                st.rerun()

    delete_dialog()


def render() -> None:
    require_admin("can_manage_registrations")
    st.title("Stopped Registrations")
    db = database.get_supabase_client()

    try:
        df = load_registration_frame(db, STOPPED_VIEW_STATUSES)
        categories = database.fetch_all(db, database.CATEGORIES, order_by="name")
    except database.DatabaseError as exc:
        st.error(f"Failed to fetch stopped registrations: {exc}")
        return

    f1, f2, f3 = st.columns(3)
    with f1:
        category = st.selectbox("Category", ["all"] + [c["name"] for c in categories], key="stopped_category")
    with f2:
        status = st.selectbox("Status", ["all"] + STOPPED_VIEW_STATUSES, key="stopped_status")
    with f3:
        panchayath = st.selectbox("Panchayath", ["all"] + panchayath_options(df), key="stopped_panchayath")
    search = st.text_input("Search", key="stopped_search")

    filtered = filter_registrations(df, category, status, panchayath, search)
    if filtered.empty:
        st.info("No stopped registrations found.")
        return

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "Export to Excel",
            data=registrations_to_excel(export_frame(filtered, STOPPED_EXPORT_COLUMNS), "Stopped Registrations"),
            file_name=export_filename("stopped_registrations", "xlsx"),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    with col2:
        st.download_button(
            "Export to PDF",
            data=registrations_to_pdf(
                export_frame(filtered, STOPPED_PDF_COLUMNS), "Stopped Employment Registrations Report"
            ),
            file_name=export_filename("stopped_registrations", "pdf"),
            mime="application/pdf",
        )

    can_delete = has_permission("can_delete")
    for _, registration in filtered.iterrows():
        with st.container(border=True):
            info, actions = st.columns([4, 1])
            with info:
                st.markdown(f"**{registration['client_name'] or 'Unknown client'}** ({registration['customer_id'] or '-'})")
                st.caption(
                    f"{registration['category_name'] or '-'} · {registration['panchayath'] or '-'} · "
                    f"{registration['status']}"
                )
                if registration["experience"] or registration["skills"]:
                    st.write(f"Experience: {registration['experience'] or '-'} | Skills: {registration['skills'] or '-'}")
            with actions:
                if st.button("Restore", key=f"restore_{registration['id']}"):
                    try:
                        change_registration_status(db, registration["id"], "restore", registration["status"])
                    except (EligibilityError, database.DatabaseError) as exc:
                        st.error(str(exc))
                    else:
                        st.rerun()
                if can_delete and st.button("Delete", key=f"delete_{registration['id']}"):
                    st.session_state["delete_registration_id"] = registration["id"]

    selected = st.session_state.get("delete_registration_id")
    if selected:
        match = filtered[filtered["id"] == selected]
        if not match.empty:
            _delete_dialog(db, match.iloc[0])
