#!/usr/bin/env python3
"""Registration eligibility and status rules."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional

from config import (
    ACTIVE_STATUSES,
    ALL_STATUSES,
    STATUS_APPROVED,
    STATUS_MULTI_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
    STATUS_STOP_REQUESTED,
    STATUS_STOPPED,
    WILDCARD_QUALIFICATIONS,
)

# action -> (allowed current statuses, next status); None means "any but pending"
TRANSITIONS = {
    "approve": ({STATUS_PENDING}, STATUS_APPROVED),
    "reject": ({STATUS_PENDING}, STATUS_REJECTED),
    "reset": (None, STATUS_PENDING),
    "request_stop": ({STATUS_PENDING, STATUS_APPROVED, STATUS_MULTI_APPROVED}, STATUS_STOP_REQUESTED),
    "approve_stop": ({STATUS_STOP_REQUESTED}, STATUS_STOPPED),
    "allow_multi": ({STATUS_STOP_REQUESTED}, STATUS_MULTI_APPROVED),
    "reject_stop": ({STATUS_STOP_REQUESTED}, STATUS_APPROVED),
    "restore": ({STATUS_STOPPED, STATUS_STOP_REQUESTED}, STATUS_PENDING),
}

DUAL_APPLICATION_TITLE = "Dual Application Not Allowed"


class EligibilityError(Exception):
    """Base class for rule violations shown to the citizen or admin."""

    title = "Not Allowed"


class ApplicationBlocked(EligibilityError):
    title = DUAL_APPLICATION_TITLE


class NotEligible(EligibilityError):
    title = "Not Eligible"


class AlreadyRegistered(EligibilityError):
    title = "Already Registered"


class InvalidTransition(EligibilityError):
    title = "Invalid Status Change"


class MissingInformation(EligibilityError):
    title = "Missing Information"


def normalize_mobile(value: object) -> str:
    text = str(value or "").strip()
    if text.endswith(".0"):
        # spreadsheet cells typed as numbers
        text = text[:-2]
    return re.sub(r"[\s\-()+]", "", text)


def _client_category(client: Optional[Dict]) -> str:
    return str((client or {}).get("category") or "").strip().lower()


def is_wildcard_qualification(client_category: object) -> bool:
    text = str(client_category or "").strip().lower()
    return any(token in text for token in WILDCARD_QUALIFICATIONS)


def qualifies_for_category(client: Optional[Dict], category_name: object) -> bool:
    if not client:
        return False
    qualification = _client_category(client)
    if is_wildcard_qualification(qualification):
        return True
    name = str(category_name or "").strip().lower()
    return bool(name) and name in qualification


def eligible_categories(client: Optional[Dict], categories: Iterable[Dict]) -> List[Dict]:
    return [c for c in categories if qualifies_for_category(client, c.get("name"))]


def available_programs(client: Optional[Dict], programs: Iterable[Dict], categories: Iterable[Dict]) -> List[Dict]:
    """Programs in any category the client qualifies for."""
    allowed_ids = {c["id"] for c in eligible_categories(client, categories)}
    return [p for p in programs if p.get("category_id") in allowed_ids]


def active_registrations(registrations: Iterable[Dict]) -> List[Dict]:
    return [r for r in registrations if r.get("status") in ACTIVE_STATUSES]


def dual_application_message(active_count: int) -> str:
    return (
        f"You already have {active_count} active registration(s). According to our dual application policy, "
        "you cannot apply for additional programs until your current registration is completed.\n\n"
        "To apply for this program, please:\n"
        "1. Complete your current registration, or\n"
        '2. Request to stop your current registration using the "Request Stop/Multi-Program" button\n\n'
        "If you believe this is an error, please contact our support team."
    )


def check_can_apply(
    client: Optional[Dict],
    registrations: List[Dict],
    program: Dict,
    categories: Iterable[Dict],
) -> None:
    if not client:
        raise NotEligible("Please look up your registration first.")

    active = active_registrations(registrations)
    if active:
        raise ApplicationBlocked(dual_application_message(len(active)))

    category = next((c for c in categories if c.get("id") == program.get("category_id")), None)
    if category is None or not qualifies_for_category(client, category.get("name")):
        raise NotEligible(
            f"Your qualification ({client.get('category') or 'unknown'}) does not allow applying for "
            f"\"{program.get('name')}\"."
        )

    if any(r.get("program_id") == program.get("id") for r in registrations):
        raise AlreadyRegistered(f"You have already applied for \"{program.get('name')}\".")


def check_can_register(client: Optional[Dict], registrations: List[Dict], category: Dict) -> None:
    if not client:
        raise NotEligible("You are not registered. Please contact your agent.")
    if not qualifies_for_category(client, category.get("name")):
        raise NotEligible(f"You are not eligible for the {category.get('name')} category.")
    if any(r.get("category_id") == category.get("id") for r in registrations):
        raise AlreadyRegistered("You have already registered for this category.")


def special_holder_notice(client: Optional[Dict], registrations: List[Dict]) -> Optional[str]:
    if not client or not registrations:
        return None
    if not is_wildcard_qualification(client.get("category")):
        return None
    return (
        "Special qualification holders can only have one registration at a time. "
        f"You already have {len(registrations)} registration(s)."
    )


def next_status(current: Optional[str], action: str) -> str:
    if action not in TRANSITIONS:
        raise InvalidTransition(f"Unknown action: {action}")
    allowed, target = TRANSITIONS[action]
    current = current or STATUS_PENDING
    if allowed is None:
        if current == STATUS_PENDING:
            raise InvalidTransition("Registration is already pending.")
        return target
    if current not in allowed:
        raise InvalidTransition(f"Cannot {action.replace('_', ' ')} a registration that is {current}.")
    return target


def allowed_actions(current: Optional[str], actions: Iterable[str]) -> List[str]:
    result = []
    for action in actions:
        try:
            next_status(current, action)
        except InvalidTransition:
            continue
        result.append(action)
    return result


def status_counts(registrations: Iterable[Dict]) -> Dict[str, int]:
    counts = {status: 0 for status in ALL_STATUSES}
    total = 0
    for registration in registrations:
        total += 1
        status = registration.get("status") or STATUS_PENDING
        counts[status] = counts.get(status, 0) + 1
    counts["total"] = total
    return counts
