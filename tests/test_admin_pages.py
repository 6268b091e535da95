import pytest

from modules.admin_management import AdminError, create_admin, delete_admin, list_admins, update_admin
from modules.categories_management import CategoryError, save_category, set_category_active
from modules.data_upload import import_clients
from modules.notification_manager import NotificationError, save_notification
from modules.permission_manager import RoleError, permission_overrides, save_admin_permissions
from modules.program_form import ProgramError, save_program
from modules.sub_project_form import SubProjectError, save_sub_project
from spreadsheets import UploadError


def test_save_category_create_update_and_duplicates(db):
    created = save_category(db, " foodelife ", "Food units")
    assert created["name"] == "foodelife"
    assert created["is_active"] is True

    with pytest.raises(CategoryError, match="already exists"):
        save_category(db, "FoodeLife")
    with pytest.raises(CategoryError, match="required"):
        save_category(db, "  ")

    save_category(db, "foodelife", "Updated", category_id=created["id"])
    assert db.rows("employment_categories")[0]["description"] == "Updated"

    set_category_active(db, created["id"], False)
    assert db.rows("employment_categories")[0]["is_active"] is False


def test_save_program_validates_sub_project_category(db, catalog):
    food = catalog["categories"]["foodelife"]
    farm_cluster = catalog["sub_projects"]["farmelife"]

    with pytest.raises(ProgramError, match="name is required"):
        save_program(db, "", food["id"])
    with pytest.raises(ProgramError, match="select a category"):
        save_program(db, "Bakery", None)
    with pytest.raises(ProgramError, match="does not belong"):
        save_program(db, "Bakery", food["id"], farm_cluster["id"])

    program = save_program(db, "Bakery", food["id"], catalog["sub_projects"]["foodelife"]["id"], "", " 18+ ")
    assert program["conditions"] == "18+"
    assert program["description"] is None


def test_save_program_update(db, catalog):
    program = catalog["programs"]["foodelife"]
    save_program(db, "Renamed", program["category_id"], program_id=program["id"])
    saved = next(p for p in db.rows("programs") if p["id"] == program["id"])
    assert saved["name"] == "Renamed"
    assert saved["sub_project_id"] is None


def test_save_sub_project(db, catalog):
    with pytest.raises(SubProjectError):
        save_sub_project(db, "Cluster", None)
    created = save_sub_project(db, "New cluster", catalog["categories"]["entrelife"]["id"], "  ")
    assert created["description"] is None


def test_import_clients_records_upload_and_upserts(db, catalog):
    content = b"Customer ID,Name,Mobile Number,Category\nC001,Anitha K,9876543210,Foodelife\nC010,Gopi,9000000010,Others\n"

    upload = import_clients(db, "march.csv", content, uploaded_by="admin-1")

    assert upload["records_count"] == 2
    assert upload["file_type"] == "csv"
    clients = {c["customer_id"]: c for c in db.rows("registered_clients")}
    assert len(clients) == 3
    assert clients["C001"]["name"] == "Anitha K"
    assert clients["C001"]["id"] == catalog["clients"]["food"]["id"]
    assert clients["C010"]["file_upload_id"] == upload["id"]


def test_import_clients_rejects_bad_file_without_writing(db):
    with pytest.raises(UploadError):
        import_clients(db, "clients.txt", b"hello")
    assert db.rows("file_uploads") == []


def test_save_notification_requires_existing_target(db, catalog):
    program = catalog["programs"]["farmelife"]
    with pytest.raises(NotificationError, match="all required fields"):
        save_notification(db, "Title", "", "program", program["id"])
    with pytest.raises(NotificationError, match="does not exist"):
        save_notification(db, "Title", "Body", "sub_project", program["id"])

    created = save_notification(db, "Batch opens", "Apply now", "program", program["id"])
    assert created["is_active"] is True

    save_notification(db, "Batch closed", "Too late", "program", program["id"], False, created["id"])
    saved = db.rows("notifications")[0]
    assert saved["title"] == "Batch closed"
    assert saved["is_active"] is False


def test_admin_lifecycle(db):
    created = create_admin(db, " clerk ", "pw1")
    assert "password_hash" not in created
    assert db.rows("admins")[0]["password_hash"] == "hashed::pw1"

    with pytest.raises(AdminError, match="already exists"):
        create_admin(db, "clerk", "other")
    with pytest.raises(AdminError, match="required"):
        create_admin(db, "someone", "")

    update_admin(db, created["id"], "clerk2")
    assert db.rows("admins")[0]["password_hash"] == "hashed::pw1"
    update_admin(db, created["id"], "clerk2", "pw2")
    assert db.rows("admins")[0]["password_hash"] == "hashed::pw2"
    assert [a["username"] for a in list_admins(db)] == ["clerk2"]
    assert "password_hash" not in list_admins(db)[0]

    with pytest.raises(AdminError, match="own account"):
        delete_admin(db, created["id"], created["id"])
    delete_admin(db, created["id"], "someone-else")
    assert db.rows("admins") == []


def test_permission_overrides_store_only_differences():
    assert permission_overrides("viewer", {"can_view": True, "can_edit": True}) == {"can_edit": True}
    assert permission_overrides("super_admin", {"can_delete": False}) == {"can_delete": False}


def test_save_admin_permissions(db):
    target = db.add("admins", username="clerk", password_hash="hashed::x")
    save_admin_permissions(db, target["id"], "viewer", {"can_edit": True}, False, "me")

    saved = db.rows("admins")[0]
    assert saved["role"] == "viewer"
    assert saved["permissions"] == {"can_edit": True}
    assert saved["is_active"] is False

    with pytest.raises(RoleError, match="Unknown role"):
        save_admin_permissions(db, target["id"], "owner", {}, True, "me")
    with pytest.raises(RoleError, match="deactivate your own"):
        save_admin_permissions(db, "me", "admin", {}, False, "me")
