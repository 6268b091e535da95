import pytest

import registrations
from database import DatabaseError
from eligibility import (
    AlreadyRegistered,
    ApplicationBlocked,
    InvalidTransition,
    MissingInformation,
    NotEligible,
)


def test_find_client_by_mobile_normalizes_input(db, catalog):
    client = registrations.find_client_by_mobile(db, " 98765-43210 ")
    assert client["customer_id"] == "C001"
    assert registrations.find_client_by_mobile(db, "") is None
    assert registrations.find_client_by_mobile(db, "1111111111") is None


def test_register_for_eligible_category(db, catalog):
    client = catalog["clients"]["food"]
    category = catalog["categories"]["foodelife"]

    row = registrations.register_for_category(db, client, category["id"])

    assert row["status"] == "pending"
    assert row["client_id"] == client["id"]
    assert row["mobile_number"] == "9876543210"
    with pytest.raises(AlreadyRegistered):
        registrations.register_for_category(db, client, category["id"])


def test_register_rejects_ineligible_or_inactive_category(db, catalog):
    client = catalog["clients"]["food"]
    with pytest.raises(NotEligible):
        registrations.register_for_category(db, client, catalog["categories"]["farmelife"]["id"])

    inactive = db.add("employment_categories", name="foodelife extra", is_active=False)
    with pytest.raises(NotEligible, match="active employment category"):
        registrations.register_for_category(db, client, inactive["id"])
    assert db.rows("employment_registrations") == []


def test_apply_for_program_records_program_and_category(db, catalog):
    client = catalog["clients"]["jobcard"]
    program = catalog["programs"]["farmelife"]

    row = registrations.apply_for_program(db, client, program["id"], " 3 years ", "milking")

    assert row["program_id"] == program["id"]
    assert row["category_id"] == catalog["categories"]["farmelife"]["id"]
    assert row["experience"] == "3 years"
    assert row["skills"] == "milking"


def test_apply_requires_experience_and_skills(db, catalog):
    client = catalog["clients"]["jobcard"]
    with pytest.raises(MissingInformation):
        registrations.apply_for_program(db, client, catalog["programs"]["farmelife"]["id"], "", "milking")


def test_second_application_blocked_while_first_is_active(db, catalog):
    client = catalog["clients"]["jobcard"]
    registrations.apply_for_program(db, client, catalog["programs"]["farmelife"]["id"], "2y", "dairy")

    with pytest.raises(ApplicationBlocked):
        registrations.apply_for_program(db, client, catalog["programs"]["entrelife"]["id"], "2y", "retail")
    assert len(db.rows("employment_registrations")) == 1


def test_apply_outside_qualification_is_rejected(db, catalog):
    with pytest.raises(NotEligible):
        registrations.apply_for_program(
            db, catalog["clients"]["food"], catalog["programs"]["farmelife"]["id"], "1y", "farming"
        )


def test_stop_request_flow_allows_multi_program(db, catalog):
    client = catalog["clients"]["jobcard"]
    first = registrations.apply_for_program(db, client, catalog["programs"]["farmelife"]["id"], "2y", "dairy")

    stop_request = registrations.request_stop(db, client, first["id"])
    assert stop_request["current_category"] == "farmelife"
    assert stop_request["status"] == "pending"

    new_status = registrations.decide_stop_request(db, first["id"], "allow_multi", "approved by panchayath")
    assert new_status == "multi_approved"
    saved = db.rows("program_stop_requests")[0]
    assert saved["status"] == "approved"
    assert saved["request_type"] == "multi_program"
    assert saved["admin_notes"] == "approved by panchayath"

    second = registrations.apply_for_program(db, client, catalog["programs"]["entrelife"]["id"], "1y", "retail")
    assert second["status"] == "pending"


def test_reject_stop_returns_registration_to_approved(db, catalog):
    client = catalog["clients"]["food"]
    registration = db.add(
        "employment_registrations",
        client_id=client["id"],
        category_id=catalog["categories"]["foodelife"]["id"],
        mobile_number=client["mobile_number"],
        status="approved",
    )
    registrations.request_stop(db, client, registration["id"])

    assert registrations.decide_stop_request(db, registration["id"], "reject_stop") == "approved"
    assert db.rows("program_stop_requests")[0]["status"] == "rejected"
    assert db.rows("program_stop_requests")[0]["admin_notes"] is None


def test_request_stop_requires_ownership(db, catalog):
    owner = catalog["clients"]["food"]
    registration = registrations.register_for_category(db, owner, catalog["categories"]["foodelife"]["id"])
    with pytest.raises(NotEligible):
        registrations.request_stop(db, catalog["clients"]["jobcard"], registration["id"])


def test_change_registration_status(db, catalog):
    client = catalog["clients"]["food"]
    registration = registrations.register_for_category(db, client, catalog["categories"]["foodelife"]["id"])

    assert registrations.change_registration_status(db, registration["id"], "approve") == "approved"
    with pytest.raises(InvalidTransition):
        registrations.change_registration_status(db, registration["id"], "approve")
    assert registrations.change_registration_status(db, registration["id"], "reset") == "pending"


def test_delete_registration_removes_stop_requests(db, catalog):
    client = catalog["clients"]["food"]
    registration = registrations.register_for_category(db, client, catalog["categories"]["foodelife"]["id"])
    registrations.request_stop(db, client, registration["id"])

    registrations.delete_registration(db, registration["id"])

    assert db.rows("employment_registrations") == []
    assert db.rows("program_stop_requests") == []


def test_registration_frame_joins_and_filters(db, catalog):
    food = catalog["clients"]["food"]
    jobcard = catalog["clients"]["jobcard"]
    registrations.register_for_category(db, food, catalog["categories"]["foodelife"]["id"])
    registrations.apply_for_program(db, jobcard, catalog["programs"]["farmelife"]["id"], "2y", "dairy")

    frame = registrations.load_registration_frame(db)

    assert len(frame) == 2
    assert frame.iloc[0]["client_name"] == "Biju"
    assert frame.iloc[0]["program_name"] == "farmelife starter"
    assert frame.iloc[1]["program_name"] is None
    assert registrations.panchayath_options(frame) == ["Kottayam", "Pala"]

    assert len(registrations.filter_registrations(frame, category="foodelife")) == 1
    assert len(registrations.filter_registrations(frame, panchayath="Pala")) == 1
    assert len(registrations.filter_registrations(frame, search="anitha")) == 1
    assert len(registrations.filter_registrations(frame, search="912345")) == 1
    assert registrations.filter_registrations(frame, status="approved").empty


def test_stopped_view_only_loads_requested_statuses(db, catalog):
    client = catalog["clients"]["food"]
    registration = registrations.register_for_category(db, client, catalog["categories"]["foodelife"]["id"])
    registrations.request_stop(db, client, registration["id"])
    registrations.register_for_category(db, catalog["clients"]["jobcard"], catalog["categories"]["entrelife"]["id"])

    frame = registrations.load_registration_frame(db, ["stopped", "stop_requested"])

    assert frame["status"].tolist() == ["stop_requested"]


def test_client_notifications_follow_registered_categories(db, catalog):
    client = catalog["clients"]["food"]
    food = catalog["categories"]["foodelife"]
    registration = registrations.register_for_category(db, client, food["id"])
    db.add("notifications", title="Food fair", message="m", type="category", target_id=food["id"])
    db.add(
        "notifications", title="Bakery batch", message="m", type="program",
        target_id=catalog["programs"]["foodelife"]["id"],
    )
    db.add(
        "notifications", title="Cluster meet", message="m", type="sub_project",
        target_id=catalog["sub_projects"]["foodelife"]["id"],
    )
    db.add(
        "notifications", title="Farm visit", message="m", type="category",
        target_id=catalog["categories"]["farmelife"]["id"],
    )
    db.add("notifications", title="Old", message="m", type="category", target_id=food["id"], is_active=False)

    titles = [n["title"] for n in registrations.client_notifications(db, [registration])]

    assert titles == ["Cluster meet", "Bakery batch", "Food fair"]
    assert registrations.client_notifications(db, []) == []


@pytest.mark.parametrize("action", ["reset", "restore"])
def test_returning_to_pending_closes_open_stop_requests(db, catalog, action):
    client = catalog["clients"]["food"]
    registration = registrations.register_for_category(db, client, catalog["categories"]["foodelife"]["id"])
    registrations.request_stop(db, client, registration["id"])

    assert registrations.change_registration_status(db, registration["id"], action) == "pending"

    first = db.rows("program_stop_requests")[0]
    assert first["status"] == "rejected"
    assert first["admin_notes"] == registrations.WITHDRAWN_NOTE
    assert registrations.pending_stop_requests(db, registration["id"]) == []


def test_later_decision_only_touches_the_new_request(db, catalog):
    client = catalog["clients"]["food"]
    registration = registrations.register_for_category(db, client, catalog["categories"]["foodelife"]["id"])
    registrations.request_stop(db, client, registration["id"])
    registrations.change_registration_status(db, registration["id"], "restore")
    second = registrations.request_stop(db, client, registration["id"])

    registrations.decide_stop_request(db, registration["id"], "reject_stop", "second request only")

    notes = {r["id"]: r["admin_notes"] for r in db.rows("program_stop_requests")}
    assert notes[second["id"]] == "second request only"
    assert list(notes.values()).count("second request only") == 1


def test_failed_stop_request_keeps_previous_status(db, catalog):
    client = catalog["clients"]["food"]
    registration = registrations.register_for_category(db, client, catalog["categories"]["foodelife"]["id"])
    db.failing_tables.add("program_stop_requests")

    with pytest.raises(DatabaseError):
        registrations.request_stop(db, client, registration["id"])

    assert db.rows("employment_registrations")[0]["status"] == "pending"
    db.failing_tables.clear()
    assert db.rows("program_stop_requests") == []
