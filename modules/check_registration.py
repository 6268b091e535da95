#!/usr/bin/env python3
"""Check registration status module."""

from __future__ import annotations

from typing import Dict, Optional

import pandas as pd
import streamlit as st

import database
from eligibility import (
    ApplicationBlocked,
    EligibilityError,
    active_registrations,
    allowed_actions,
    available_programs,
    dual_application_message,
    special_holder_notice,
)
from registrations import (
    apply_for_program,
    client_notifications,
    client_registrations,
    find_client_by_mobile,
    request_stop,
)
from translations import t, translated_text

_MOBILE_KEY = "check_mobile"


def registration_overview(db, mobile_number: str) -> Optional[Dict]:
    """Everything the status page shows for one mobile number, or None."""
    client = find_client_by_mobile(db, mobile_number)
    if client is None:
        return None

    registrations = client_registrations(db, client)
    categories = {c["id"]: c for c in database.fetch_all(db, database.CATEGORIES)}
    programs = database.fetch_all(db, database.PROGRAMS, order_by="name")
    program_names = {p["id"]: p["name"] for p in programs}

    for registration in registrations:
        category = categories.get(registration.get("category_id"), {})
        registration["category_name"] = category.get("name")
        registration["program_name"] = program_names.get(registration.get("program_id"))
        registration["category_programs"] = [
            p["name"] for p in programs if p.get("category_id") == registration.get("category_id")
        ]

    active = [c for c in categories.values() if c.get("is_active")]
    applied = {r.get("program_id") for r in registrations}
    return {
        "client": client,
        "registrations": registrations,
        "notice": special_holder_notice(client, registrations),
        "notifications": client_notifications(db, registrations),
        "programs": [p for p in available_programs(client, programs, active) if p["id"] not in applied],
        "categories": active,
    }


def apply_widget_keys(program_id) -> Dict[str, str]:
    return {field: f"apply_{field}_{program_id}" for field in ("experience", "skills", "submit", "cancel")}


def _status_badge(status: Optional[str]) -> str:
    return (status or "pending").replace("_", " ").title()


def _apply_dialog(db, client: Dict, program: Dict) -> None:
    @st.dialog(f"Apply for {program['name']}")
    def apply_dialog():
        keys = apply_widget_keys(program["id"])
        if program.get("conditions"):
            st.caption(f"Conditions: {program['conditions']}")
        experience = st.text_area("Experience *", key=keys["experience"])
        skills = st.text_area("Skills *", key=keys["skills"])
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Submit Application", key=keys["submit"]):
                try:
                    apply_for_program(db, client, program["id"], experience, skills)
                except EligibilityError as exc:
                    st.error(f"{exc.title}: {exc}")
                    return
                except database.DatabaseError as exc:
                    st.error(f"Failed to submit application: {exc}")
                    return
                st.session_state.pop("apply_program_id", None)
                st.session_state["check_message"] = f"Application for {program['name']} submitted."
                st.rerun()
        with col2:
            if st.button("Cancel", key=keys["cancel"]):
                st.session_state.pop("apply_program_id", None)
                st.rerun()

    apply_dialog()


def _blocked_dialog(message: str) -> None:
    @st.dialog(ApplicationBlocked.title)
    def blocked_dialog():
        st.warning(message)
        if st.button("Close", key="blocked_close"):
            st.session_state.pop("apply_program_id", None)
            st.rerun()

    blocked_dialog()


def render() -> None:
    translated_text("check.title", kind="title")
    db = database.get_supabase_client()

    with st.form("check_registration_form"):
        mobile = st.text_input(t("register.mobile"), value=st.session_state.get(_MOBILE_KEY, ""), max_chars=15)
        submitted = st.form_submit_button("Check Status")
    if submitted:
        st.session_state[_MOBILE_KEY] = mobile
        st.session_state.pop("apply_program_id", None)

    mobile = st.session_state.get(_MOBILE_KEY)
    if not mobile:
        return

    try:
        overview = registration_overview(db, mobile)
    except database.DatabaseError as exc:
        st.error(f"Failed to check registration: {exc}")
        return
    if overview is None:
        st.error("No registration found for this mobile number.")
        return

    message = st.session_state.pop("check_message", None)
    if message:
        st.success(message)

    client = overview["client"]
    st.subheader("Client Details")
    col1, col2 = st.columns(2)
    col1.write(f"**Name:** {client.get('name', '')}")
    col1.write(f"**Customer ID:** {client.get('customer_id', '')}")
    col1.write(f"**Qualification:** {client.get('category') or '-'}")
    col2.write(f"**District:** {client.get('district') or '-'}")
    col2.write(f"**Panchayath:** {client.get('panchayath') or '-'}")
    col2.write(f"**Agent/PRO:** {client.get('agent_pro') or '-'}")

    if overview["notice"]:
        st.warning(overview["notice"])

    st.subheader("Your Registrations")
    if not overview["registrations"]:
        st.info("You have not registered for any category yet.")
    for registration in overview["registrations"]:
        with st.container(border=True):
            st.markdown(f"**{registration['category_name'] or 'Unknown category'}**")
            if registration["program_name"]:
                st.write(f"Program: {registration['program_name']}")
            st.write(f"Status: {_status_badge(registration.get('status'))}")
            st.caption(f"Registered on {str(registration.get('registration_date', ''))[:10]}")
            if registration["category_programs"]:
                st.caption("Programs in this category: " + ", ".join(registration["category_programs"]))
            if allowed_actions(registration.get("status"), ["request_stop"]):
                if st.button("Request Stop/Multi-Program", key=f"stop_{registration['id']}"):
                    try:
                        request_stop(db, client, registration["id"])
                    except (EligibilityError, database.DatabaseError) as exc:
                        st.error(str(exc))
                    else:
                        st.session_state["check_message"] = "Your request has been sent to the admin."
                        st.rerun()

    translated_text("check.notifications", kind="header")
    if not overview["notifications"]:
        st.caption("No notifications.")
    for notification in overview["notifications"]:
        st.info(f"**{notification['title']}**\n\n{notification['message']}")

    st.subheader("Available Programs")
    programs = overview["programs"]
    if not programs:
        st.info("No programs are available for your qualification.")
        return

    st.dataframe(
        pd.DataFrame(programs).reindex(columns=["name", "description", "conditions"]),
        use_container_width=True,
        hide_index=True,
    )
    for program in programs:
        if st.button(f"Apply: {program['name']}", key=f"apply_{program['id']}"):
            st.session_state["apply_program_id"] = program["id"]

    program_id = st.session_state.get("apply_program_id")
    program = next((p for p in programs if p["id"] == program_id), None)
    if program is None:
        return
    active = active_registrations(overview["registrations"])
    if active:
        _blocked_dialog(dual_application_message(len(active)))
    else:
        _apply_dialog(db, client, program)
