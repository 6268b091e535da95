#!/usr/bin/env python3
"""Stop / multi-program requests module."""

from __future__ import annotations

import streamlit as st

import database
from config import STATUS_STOP_REQUESTED
from eligibility import EligibilityError
from login import require_admin
from registrations import decide_stop_request, load_registration_frame, pending_stop_requests

DECISIONS = {
    "approve_stop": ("Approve Stop", "Registration stopped"),
    "allow_multi": ("Allow Multi-Program", "Multi-program enrollment approved"),
    "reject_stop": ("Reject Request", "Stop request rejected"),
}


def render() -> None:
    require_admin("can_manage_registrations")
    st.title("Stop / Multi-Program Requests")
    db = database.get_supabase_client()

    try:
        df = load_registration_frame(db, [STATUS_STOP_REQUESTED])
    except database.DatabaseError as exc:
        st.error(f"Failed to fetch stop requests: {exc}")
        return

    if df.empty:
        st.info("No pending stop requests.")
        return

    st.caption(f"{len(df)} registration(s) waiting for a decision")
    for _, registration in df.iterrows():
        registration_id = registration["id"]
        with st.container(border=True):
            st.markdown(f"**{registration['client_name'] or 'Unknown client'}** ({registration['customer_id'] or '-'})")
            st.write(f"Mobile: {registration['mobile_number']}")
            st.write(f"Category: {registration['category_name'] or '-'}")
            if registration["program_name"]:
                st.write(f"Program: {registration['program_name']}")
            st.write(f"Panchayath: {registration['panchayath'] or '-'}")

            try:
                requests = pending_stop_requests(db, registration_id)
            except database.DatabaseError:
                requests = []
            if requests:
                st.caption(f"Requested on {str(requests[0].get('created_at', ''))[:10]}")

            notes = st.text_area("Admin notes (optional)", key=f"stop_notes_{registration_id}")
            columns = st.columns(len(DECISIONS))
            for column, (action, (label, message)) in zip(columns, DECISIONS.items()):
                with column:
                    if st.button(label, key=f"{action}_{registration_id}"):
                        try:
                            decide_stop_request(db, registration_id, action, notes)
                        except (EligibilityError, database.DatabaseError) as exc:
                            st.error(str(exc))
                        else:
                            st.success(message)
                            st.rerun()
