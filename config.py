# E-Life Portal - Centralized Configuration
# Business constants shared by the pages and the rule set.

import os

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

APP_TITLE = "E-Life Society Self Employment Portal"

# Registration status vocabulary

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
STATUS_STOP_REQUESTED = "stop_requested"
STATUS_STOPPED = "stopped"
STATUS_MULTI_APPROVED = "multi_approved"

ALL_STATUSES = [
    STATUS_PENDING,
    STATUS_APPROVED,
    STATUS_REJECTED,
    STATUS_STOP_REQUESTED,
    STATUS_STOPPED,
    STATUS_MULTI_APPROVED,
]

# Statuses that block a new program application (dual application policy)
ACTIVE_STATUSES = {STATUS_PENDING, STATUS_APPROVED}

STOPPED_VIEW_STATUSES = [STATUS_STOPPED, STATUS_STOP_REQUESTED]

# Client qualifications that may apply to every category
WILDCARD_QUALIFICATIONS = ("job card", "jobcard", "others")

# Stop request rows

STOP_REQUEST_PENDING = "pending"
STOP_REQUEST_APPROVED = "approved"
STOP_REQUEST_REJECTED = "rejected"
STOP_REQUEST_TYPE = "stop_or_multi"

# Notifications

NOTIFICATION_TYPES = ["category", "sub_project", "program"]

# Client data upload: header (lowercase) -> registered_clients column

UPLOAD_EXTENSIONS = ("csv", "xlsx")
UPLOAD_COLUMN_MAP = {
    "customer id": "customer_id",
    "name": "name",
    "mobile number": "mobile_number",
    "address": "address",
    "category": "category",
    "panchayath": "panchayath",
    "district": "district",
    "ward": "ward",
    "agent/pro": "agent_pro",
    "preference": "preference",
    "status": "status",
}
UPLOAD_REQUIRED_COLUMNS = ("customer_id", "name", "mobile_number")

# Exports

REGISTRATION_EXPORT_COLUMNS = {
    "client_name": "Name",
    "customer_id": "Customer ID",
    "mobile_number": "Mobile Number",
    "category_name": "Category",
    "program_name": "Program",
    "program_description": "Program Description",
    "program_conditions": "Program Conditions",
    "district": "District",
    "panchayath": "Panchayath",
    "agent_pro": "Agent",
    "registration_date": "Registration Date",
    "status": "Status",
}

STOPPED_EXPORT_COLUMNS = {
    "client_name": "Name",
    "customer_id": "Customer ID",
    "mobile_number": "Mobile Number",
    "category_name": "Category",
    "experience": "Experience",
    "skills": "Skills",
    "district": "District",
    "panchayath": "Panchayath",
    "agent_pro": "Agent",
    "registration_date": "Registration Date",
    "status": "Status",
}

STOPPED_PDF_COLUMNS = {
    "client_name": "Name",
    "customer_id": "Customer ID",
    "mobile_number": "Mobile",
    "category_name": "Category",
    "district": "District",
    "panchayath": "Panchayath",
    "registration_date": "Registration Date",
    "status": "Status",
}

# Admin roles and permissions

ROLES = ["super_admin", "admin", "moderator", "viewer"]
DEFAULT_ROLE = "moderator"

PERMISSION_KEYS = [
    "can_create",
    "can_edit",
    "can_delete",
    "can_view",
    "can_manage_users",
    "can_manage_categories",
    "can_manage_registrations",
    "can_view_analytics",
]

ROLE_PERMISSIONS = {
    "super_admin": {key: True for key in PERMISSION_KEYS},
    "admin": {
        "can_create": True,
        "can_edit": True,
        "can_delete": True,
        "can_view": True,
        "can_manage_users": False,
        "can_manage_categories": True,
        "can_manage_registrations": True,
        "can_view_analytics": True,
    },
    "moderator": {
        "can_create": True,
        "can_edit": True,
        "can_delete": False,
        "can_view": True,
        "can_manage_users": False,
        "can_manage_categories": False,
        "can_manage_registrations": True,
        "can_view_analytics": False,
    },
    "viewer": {
        "can_create": False,
        "can_edit": False,
        "can_delete": False,
        "can_view": True,
        "can_manage_users": False,
        "can_manage_categories": False,
        "can_manage_registrations": False,
        "can_view_analytics": False,
    },
}
