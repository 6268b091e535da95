#!/usr/bin/env python3
"""Registration workflows shared by the citizen and admin pages."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import pandas as pd

import database
from config import (
    STATUS_PENDING,
    STATUS_STOP_REQUESTED,
    STOP_REQUEST_APPROVED,
    STOP_REQUEST_PENDING,
    STOP_REQUEST_REJECTED,
    STOP_REQUEST_TYPE,
)
from eligibility import (
    EligibilityError,
    MissingInformation,
    NotEligible,
    check_can_apply,
    check_can_register,
    next_status,
    normalize_mobile,
)

logger = logging.getLogger(__name__)

# admin actions that take a registration out of stop_requested without deciding it
WITHDRAWING_ACTIONS = ("reset", "restore")
WITHDRAWN_NOTE = "Closed: registration returned to pending"

STOP_DECISIONS = {
    "approve_stop": (STOP_REQUEST_APPROVED, "stop"),
    "allow_multi": (STOP_REQUEST_APPROVED, "multi_program"),
    "reject_stop": (STOP_REQUEST_REJECTED, None),
}

CLIENT_COLUMNS = {
    "id": "client_id",
    "name": "client_name",
    "customer_id": "customer_id",
    "district": "district",
    "agent_pro": "agent_pro",
    "panchayath": "panchayath",
    "category": "client_category",
}
CATEGORY_COLUMNS = {
    "id": "category_id",
    "name": "category_name",
    "description": "category_description",
}
PROGRAM_COLUMNS = {
    "id": "program_id",
    "name": "program_name",
    "description": "program_description",
    "conditions": "program_conditions",
}
REGISTRATION_COLUMNS = [
    "id",
    "client_id",
    "category_id",
    "program_id",
    "mobile_number",
    "registration_date",
    "status",
    "experience",
    "skills",
    "updated_at",
]


# ============================================
# Lookups
# ============================================
def find_client_by_mobile(db, mobile_number: str) -> Optional[Dict]:
    mobile = normalize_mobile(mobile_number)
    if not mobile:
        return None
    return database.fetch_one(db, database.CLIENTS, mobile_number=mobile)


def client_registrations(db, client: Dict) -> List[Dict]:
    return database.fetch_all(
        db, database.REGISTRATIONS, order_by="registration_date", desc=True, client_id=client["id"]
    )


def active_categories(db) -> List[Dict]:
    return database.fetch_all(db, database.CATEGORIES, order_by="name", is_active=True)


def _lookup_frame(rows: List[Dict], columns: Dict[str, str]) -> pd.DataFrame:
    frame = pd.DataFrame(rows).reindex(columns=list(columns)).rename(columns=columns)
    key = next(iter(columns.values()))
    frame[key] = frame[key].astype(object)
    return frame.drop_duplicates(subset=[key])


def build_registration_frame(
    registrations: List[Dict],
    clients: List[Dict],
    categories: List[Dict],
    programs: List[Dict],
) -> pd.DataFrame:
    """Join registrations with client, category and program details."""
    df = pd.DataFrame(registrations).reindex(columns=REGISTRATION_COLUMNS)
    for key in ("client_id", "category_id", "program_id"):
        df[key] = df[key].astype(object)

    df = df.merge(_lookup_frame(clients, CLIENT_COLUMNS), on="client_id", how="left")
    df = df.merge(_lookup_frame(categories, CATEGORY_COLUMNS), on="category_id", how="left")
    df = df.merge(_lookup_frame(programs, PROGRAM_COLUMNS), on="program_id", how="left")
    return df.astype(object).where(pd.notna(df), None)


def load_registration_frame(db, statuses: Optional[List[str]] = None) -> pd.DataFrame:
    if statuses:
        registrations = database.fetch_in(db, database.REGISTRATIONS, "status", statuses)
    else:
        registrations = database.fetch_all(db, database.REGISTRATIONS)
    clients = database.fetch_all(db, database.CLIENTS)
    categories = database.fetch_all(db, database.CATEGORIES)
    programs = database.fetch_all(db, database.PROGRAMS)

    df = build_registration_frame(registrations, clients, categories, programs)
    sort_column = "updated_at" if statuses else "registration_date"
    return df.sort_values(sort_column, ascending=False, na_position="last", key=lambda s: s.astype(str))


def filter_registrations(
    df: pd.DataFrame,
    category: str = "all",
    status: str = "all",
    panchayath: str = "all",
    search: str = "",
) -> pd.DataFrame:
    filtered = df
    if category != "all":
        filtered = filtered[filtered["category_name"] == category]
    if status != "all":
        filtered = filtered[filtered["status"] == status]
    if panchayath != "all":
        filtered = filtered[filtered["panchayath"] == panchayath]
    term = (search or "").strip().lower()
    if term:
        def _contains(column: str, lower: bool = True) -> pd.Series:
            values = filtered[column].fillna("").astype(str)
            if lower:
                values = values.str.lower()
            return values.str.contains(term, regex=False)

        mask = (
            _contains("client_name")
            | _contains("customer_id")
            | _contains("mobile_number", lower=False)
            | _contains("category_name")
        )
        filtered = filtered[mask]
    return filtered


def panchayath_options(df: pd.DataFrame) -> List[str]:
    if df.empty:
        return []
    return sorted({str(p).strip() for p in df["panchayath"].dropna() if str(p).strip()})


# ============================================
# Citizen actions
# ============================================
def register_for_category(db, client: Dict, category_id: str) -> Dict:
    category = next((c for c in active_categories(db) if c["id"] == category_id), None)
    if category is None:
        raise NotEligible("Please select an active employment category.")
    check_can_register(client, client_registrations(db, client), category)

    row = database.insert(
        db,
        database.REGISTRATIONS,
        {
            "client_id": client["id"],
            "category_id": category["id"],
            "mobile_number": client["mobile_number"],
            "status": STATUS_PENDING,
        },
    )
    logger.info(f"Client {client['customer_id']} registered for {category['name']}")
    return row


def apply_for_program(db, client: Dict, program_id: str, experience: str, skills: str) -> Dict:
    experience = (experience or "").strip()
    skills = (skills or "").strip()
    if not experience or not skills:
        raise MissingInformation("Please provide both experience and skills information.")

    program = database.fetch_one(db, database.PROGRAMS, id=program_id)
    if program is None:
        raise NotEligible("This program is no longer available.")
    categories = active_categories(db)
    check_can_apply(client, client_registrations(db, client), program, categories)

    row = database.insert(
        db,
        database.REGISTRATIONS,
        {
            "client_id": client["id"],
            "category_id": program["category_id"],
            "program_id": program["id"],
            "mobile_number": client["mobile_number"],
            "status": STATUS_PENDING,
            "experience": experience,
            "skills": skills,
        },
    )
    logger.info(f"Client {client['customer_id']} applied for program {program['name']}")
    return row


def request_stop(db, client: Dict, registration_id: str) -> Dict:
    registration = database.fetch_one(db, database.REGISTRATIONS, id=registration_id)
    if registration is None or registration.get("client_id") != client["id"]:
        raise NotEligible("Registration not found for this mobile number.")

    new_status = next_status(registration.get("status"), "request_stop")
    category = database.fetch_one(db, database.CATEGORIES, id=registration["category_id"]) or {}

    database.update(db, database.REGISTRATIONS, registration_id, {"status": new_status})
    try:
        return database.insert(
            db,
            database.STOP_REQUESTS,
            {
                "registration_id": registration_id,
                "client_id": client["id"],
                "mobile_number": client["mobile_number"],
                "current_category": category.get("name"),
                "request_type": STOP_REQUEST_TYPE,
                "status": STOP_REQUEST_PENDING,
            },
        )
    except database.DatabaseError:
        logger.error(f"❌ Stop request for {registration_id} not saved, restoring previous status")
        database.update(db, database.REGISTRATIONS, registration_id, {"status": registration.get("status")})
        raise


def client_notifications(db, registrations: List[Dict]) -> List[Dict]:
    """Active notifications relevant to the categories a client registered for."""
    category_ids = {r["category_id"] for r in registrations if r.get("category_id")}
    if not category_ids:
        return []

    program_ids = {r["program_id"] for r in registrations if r.get("program_id")}
    program_ids |= {p["id"] for p in database.fetch_in(db, database.PROGRAMS, "category_id", list(category_ids))}
    sub_project_ids = {
        s["id"] for s in database.fetch_in(db, database.SUB_PROJECTS, "category_id", list(category_ids))
    }
    targets = {"category": category_ids, "program": program_ids, "sub_project": sub_project_ids}

    notifications = database.fetch_all(
        db, database.NOTIFICATIONS, order_by="created_at", desc=True, is_active=True
    )
    seen = set()
    relevant = []
    for notification in notifications:
        if notification["id"] in seen:
            continue
        if notification.get("target_id") in targets.get(notification.get("type"), set()):
            seen.add(notification["id"])
            relevant.append(notification)
    return relevant


# ============================================
# Admin actions
# ============================================
def change_registration_status(db, registration_id: str, action: str, current: Optional[str] = None) -> str:
    if current is None:
        registration = database.fetch_one(db, database.REGISTRATIONS, id=registration_id)
        if registration is None:
            raise EligibilityError("Registration not found.")
        current = registration.get("status")
    new_status = next_status(current, action)
    database.update(db, database.REGISTRATIONS, registration_id, {"status": new_status})
    if current == STATUS_STOP_REQUESTED and action in WITHDRAWING_ACTIONS:
        for stop_request in pending_stop_requests(db, registration_id):
            database.update(
                db,
                database.STOP_REQUESTS,
                stop_request["id"],
                {"status": STOP_REQUEST_REJECTED, "admin_notes": WITHDRAWN_NOTE},
            )
    return new_status


def pending_stop_requests(db, registration_id: str) -> List[Dict]:
    return database.fetch_all(
        db, database.STOP_REQUESTS, registration_id=registration_id, status=STOP_REQUEST_PENDING
    )


def decide_stop_request(db, registration_id: str, action: str, admin_notes: str = "") -> str:
    if action not in STOP_DECISIONS:
        raise EligibilityError(f"Unknown stop request decision: {action}")
    new_status = change_registration_status(db, registration_id, action)

    request_status, request_type = STOP_DECISIONS[action]
    changes = {"status": request_status}
    if request_type:
        changes["request_type"] = request_type
    if (admin_notes or "").strip():
        changes["admin_notes"] = admin_notes.strip()
    for stop_request in pending_stop_requests(db, registration_id):
        database.update(db, database.STOP_REQUESTS, stop_request["id"], changes)
    return new_status


def delete_registration(db, registration_id: str) -> None:
    for stop_request in database.fetch_all(db, database.STOP_REQUESTS, registration_id=registration_id):
        database.delete(db, database.STOP_REQUESTS, stop_request["id"])
    database.delete(db, database.REGISTRATIONS, registration_id)
