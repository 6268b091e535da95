#!/usr/bin/env python3
"""Streamlit E-Life Society Self Employment Portal."""

from __future__ import annotations

import logging

import streamlit as st

from config import APP_TITLE, LOG_LEVEL
from login import current_admin, grants, login, logout
from modules.admin_management import render as render_admin_management
from modules.all_programs import render as render_all_programs
from modules.categories_management import render as render_categories
from modules.category_details import render as render_category_details
from modules.check_registration import render as render_check_registration
from modules.data_upload import render as render_data_upload
from modules.employment_registration import render as render_registration
from modules.home import render as render_home
from modules.notification_manager import render as render_notifications
from modules.permission_manager import render as render_permissions
from modules.program_form import render as render_program_form
from modules.registrations_view import render as render_registrations
from modules.stop_requests import render as render_stop_requests
from modules.stopped_registrations import render as render_stopped
from modules.sub_project_form import render as render_sub_project_form
from translations import edit_mode_toggle, t

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(
    page_title=APP_TITLE,
    layout="wide",
    initial_sidebar_state="expanded"
)

hide_pages_style = """
<style>
section[data-testid="stSidebarNav"] {
    display: none;
}
</style>
"""

st.markdown(hide_pages_style, unsafe_allow_html=True)

PUBLIC_PAGES = {
    "Home": render_home,
    "Category Details": render_category_details,
    "All Programs": render_all_programs,
    "Register": render_registration,
    "Check Status": render_check_registration,
}

# page -> (permission, renderer); a tuple means any one of them
ADMIN_PAGES = {
    "Registrations": ("can_manage_registrations", render_registrations),
    "Stop Requests": ("can_manage_registrations", render_stop_requests),
    "Stopped Registrations": ("can_manage_registrations", render_stopped),
    "Categories": ("can_manage_categories", render_categories),
    "Add Program": (("can_create", "can_edit"), render_program_form),
    "Add Sub-project": (("can_create", "can_edit"), render_sub_project_form),
    "Client Data Upload": ("can_create", render_data_upload),
    "Notifications": ("can_edit", render_notifications),
    "Admin Management": ("can_manage_users", render_admin_management),
    "Permissions": ("can_manage_users", render_permissions),
}

ADMIN_LOGIN = "Admin Login"


def available_pages(admin) -> list:
    pages = list(PUBLIC_PAGES)
    if admin is None:
        return pages + [ADMIN_LOGIN]
    return pages + [name for name, (permission, _) in ADMIN_PAGES.items() if grants(admin, permission)]


def unified_app() -> None:
    admin = current_admin()
    pages = available_pages(admin)

    with st.sidebar:
        st.markdown(f"### {APP_TITLE}")
        if admin:
            st.markdown(f"**Logged in:** {admin.get('username', '')}")
            if st.button(t("nav.logout")):
                logout()
                st.rerun()
            edit_mode_toggle()
        if st.session_state.get("nav") in pages:
            st.session_state["navigation"] = st.session_state.pop("nav")
        else:
            st.session_state.pop("nav", None)
        if st.session_state.get("navigation") not in pages:
            st.session_state.pop("navigation", None)
        selection = st.selectbox("Navigation", pages, key="navigation")

    if selection == ADMIN_LOGIN:
        login()
    elif selection in PUBLIC_PAGES:
        PUBLIC_PAGES[selection]()
    else:
        ADMIN_PAGES[selection][1]()


if __name__ == "__main__":
    unified_app()
