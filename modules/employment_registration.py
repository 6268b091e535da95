#!/usr/bin/env python3
"""Employment registration module."""

from __future__ import annotations

import streamlit as st

import database
from eligibility import EligibilityError, eligible_categories
from registrations import active_categories, client_registrations, find_client_by_mobile, register_for_category
from translations import t, translated_text

_CLIENT_KEY = "registration_client"


def _reset() -> None:
    st.session_state.pop(_CLIENT_KEY, None)


def render() -> None:
    translated_text("register.title", kind="title")
    db = database.get_supabase_client()

    client = st.session_state.get(_CLIENT_KEY)
    if client is None:
        with st.form("verify_mobile_form"):
            mobile = st.text_input(t("register.mobile"), max_chars=15)
            submitted = st.form_submit_button("Verify")
        if submitted:
            try:
                client = find_client_by_mobile(db, mobile)
            except database.DatabaseError as exc:
                st.error(str(exc))
                return
            if client is None:
                st.error("Mobile number not found in our records. Please contact your agent.")
                return
            st.session_state[_CLIENT_KEY] = client
            st.rerun()
        return

    st.subheader("Client Details")
    col1, col2 = st.columns(2)
    col1.write(f"**Name:** {client.get('name', '')}")
    col1.write(f"**Customer ID:** {client.get('customer_id', '')}")
    col1.write(f"**Mobile:** {client.get('mobile_number', '')}")
    col2.write(f"**Qualification:** {client.get('category') or '-'}")
    col2.write(f"**Panchayath:** {client.get('panchayath') or '-'}")
    col2.write(f"**Agent/PRO:** {client.get('agent_pro') or '-'}")

    try:
        categories = eligible_categories(client, active_categories(db))
        registered = {r["category_id"] for r in client_registrations(db, client)}
    except database.DatabaseError as exc:
        st.error(str(exc))
        return

    options = [c for c in categories if c["id"] not in registered]
    if not options:
        st.info("There are no categories left for you to register in.")
    else:
        with st.form("register_category_form"):
            category_id = st.selectbox(
                "Employment Category",
                [c["id"] for c in options],
                format_func=lambda cid: next(c["name"] for c in options if c["id"] == cid),
            )
            confirmed = st.checkbox("I confirm that the details above are correct")
            submitted = st.form_submit_button("Submit Registration")
        if submitted:
            if not confirmed:
                st.warning("Please confirm your details before submitting.")
            else:
                try:
                    register_for_category(db, client, category_id)
                except EligibilityError as exc:
                    st.error(f"{exc.title}: {exc}")
                except database.DatabaseError as exc:
                    st.error(f"Failed to submit registration: {exc}")
                else:
                    st.success("Registration submitted. Your status is pending review.")

    if st.button("Use a different mobile number"):
        _reset()
        st.rerun()
