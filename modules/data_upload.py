#!/usr/bin/env python3
"""Client data upload module."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import pandas as pd
import streamlit as st

import database
from login import has_permission, require_admin
from spreadsheets import UploadError, file_extension, parse_client_upload

logger = logging.getLogger(__name__)

CLIENT_DISPLAY_COLUMNS = {
    "customer_id": "Customer ID",
    "name": "Name",
    "mobile_number": "Mobile Number",
    "category": "Category",
    "panchayath": "Panchayath",
    "district": "District",
    "agent_pro": "Agent/PRO",
}


def import_clients(db, filename: str, content: bytes, uploaded_by: Optional[str] = None) -> Dict:
    """Parse an uploaded sheet, record the upload and upsert its clients.

    Raises ``UploadError`` before anything is written when the file is unusable.
    """
    clients = parse_client_upload(filename, content)

    upload = database.insert(
        db,
        database.FILE_UPLOADS,
        {
            "filename": filename,
            "file_type": file_extension(filename),
            "records_count": len(clients),
            "uploaded_by": uploaded_by,
        },
    )
    rows = [{**client, "file_upload_id": upload.get("id")} for client in clients]
    database.upsert(db, database.CLIENTS, rows, on_conflict="customer_id")
    logger.info(f"📥 Imported {len(rows)} client(s) from {filename}")
    return upload


def _to_title(value: object) -> str:
    text = str(value or "").strip()
    return text.title() if text else ""


def render() -> None:
    admin = require_admin("can_create")
    st.title("Client Data Upload")
    db = database.get_supabase_client()

    st.subheader("Upload Client File")
    st.caption("Required columns: Customer ID, Name, Mobile Number")
    uploaded = st.file_uploader("Upload CSV or Excel file", type=["csv", "xlsx"])
    if uploaded is not None and st.button("Import Clients"):
        try:
            upload = import_clients(db, uploaded.name, uploaded.getvalue(), admin["id"])
        except UploadError as exc:
            st.error(str(exc))
        except database.DatabaseError as exc:
            st.error(f"Failed to upload data: {exc}")
        else:
            st.success(f"Successfully uploaded {upload.get('records_count', 0)} client records")

    try:
        clients = database.fetch_all(db, database.CLIENTS, order_by="created_at", desc=True)
        uploads = database.fetch_all(db, database.FILE_UPLOADS, order_by="upload_date", desc=True)
    except database.DatabaseError as exc:
        st.error(str(exc))
        return

    st.subheader("Registered Clients")
    if not clients:
        st.info("No clients uploaded yet.")
    else:
        df = pd.DataFrame(clients).reindex(columns=["id", *CLIENT_DISPLAY_COLUMNS])
        search = st.text_input("Search clients", placeholder="Name, customer ID or mobile")
        if search.strip():
            term = search.strip().lower()
            mask = (
                df["name"].fillna("").str.lower().str.contains(term, regex=False)
                | df["customer_id"].fillna("").str.lower().str.contains(term, regex=False)
                | df["mobile_number"].fillna("").str.contains(term, regex=False)
            )
            df = df[mask]

        display_df = df.drop(columns=["id"]).rename(columns=CLIENT_DISPLAY_COLUMNS)
        display_df["Name"] = display_df["Name"].map(_to_title)
        st.dataframe(display_df, use_container_width=True, hide_index=True)

        if has_permission("can_delete") and not df.empty:
            labels = {row["id"]: f"{row['customer_id']} - {row['name']}" for _, row in df.iterrows()}
            client_id = st.selectbox("Delete client", list(labels), format_func=labels.get)
            if st.button("Delete Client"):
                try:
                    database.delete(db, database.CLIENTS, client_id)
                except database.DatabaseError as exc:
                    st.error(f"Failed to delete client: {exc}")
                else:
                    st.rerun()

    st.subheader("Upload History")
    if uploads:
        st.dataframe(
            pd.DataFrame(uploads).reindex(columns=["filename", "file_type", "records_count", "upload_date"]),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("No uploads yet.")
