#!/usr/bin/env python3
"""English / Malayalam UI text with admin-editable overrides."""

from __future__ import annotations

from typing import Dict

import streamlit as st

DEFAULT_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "nav.home": {"english": "Home", "malayalam": "ഹോം"},
    "nav.allPrograms": {"english": "All Programs", "malayalam": "എല്ലാ പ്രോഗ്രാമുകൾ"},
    "nav.register": {"english": "Register", "malayalam": "രജിസ്റ്റർ ചെയ്യുക"},
    "nav.checkStatus": {"english": "Check Status", "malayalam": "സ്റ്റാറ്റസ് പരിശോധിക്കുക"},
    "nav.admin": {"english": "Admin", "malayalam": "അഡ്മിൻ"},
    "nav.logout": {"english": "Logout", "malayalam": "ലോഗൗട്ട്"},
    "nav.adminLogin": {"english": "Admin Login", "malayalam": "അഡ്മിൻ ലോഗിൻ"},
    "hero.title1": {"english": "Transform Your Career", "malayalam": "നിങ്ങളുടെ കരിയർ മാറ്റിമറിക്കുക"},
    "hero.title2": {"english": "with E-Life Society", "malayalam": "ഇ-ലൈഫ് സൊസൈറ്റിയുമായി"},
    "hero.subtitle": {
        "english": (
            "Discover exclusive employment opportunities, professional development programs, "
            "and career advancement resources tailored to your success."
        ),
        "malayalam": (
            "നിങ്ങളുടെ വിജയത്തിനായി രൂപകൽപ്പന ചെയ്ത എക്സ്ക്ലൂസീവ് തൊഴിൽ അവസരങ്ങൾ, "
            "പ്രൊഫഷണൽ വികസന പ്രോഗ്രാമുകൾ, കരിയർ പുരോഗതി വിഭവങ്ങൾ എന്നിവ കണ്ടെത്തുക."
        ),
    },
    "hero.addNewProgram": {"english": "Add New Program", "malayalam": "പുതിയ പ്രോഗ്രാം ചേർക്കുക"},
    "hero.viewAllPrograms": {"english": "View All Programs", "malayalam": "എല്ലാ പ്രോഗ്രാമുകളും കാണുക"},
    "categories.title": {"english": "Employment Categories", "malayalam": "തൊഴിൽ വിഭാഗങ്ങൾ"},
    "register.title": {"english": "Employment Registration", "malayalam": "തൊഴിൽ രജിസ്ട്രേഷൻ"},
    "register.mobile": {"english": "Mobile Number", "malayalam": "മൊബൈൽ നമ്പർ"},
    "check.title": {"english": "Check Registration Status", "malayalam": "രജിസ്ട്രേഷൻ സ്റ്റാറ്റസ് പരിശോധിക്കുക"},
    "check.notifications": {"english": "Notifications", "malayalam": "അറിയിപ്പുകൾ"},
}

_OVERRIDES_KEY = "translation_overrides"
_EDIT_MODE_KEY = "translation_edit_mode"


def _overrides() -> Dict[str, Dict[str, str]]:
    if _OVERRIDES_KEY not in st.session_state:
        st.session_state[_OVERRIDES_KEY] = {}
    return st.session_state[_OVERRIDES_KEY]


def get_translation(key: str) -> Dict[str, str]:
    override = _overrides().get(key)
    if override:
        return override
    return DEFAULT_TRANSLATIONS.get(key, {"english": key, "malayalam": ""})


def update_translation(key: str, english: str, malayalam: str) -> None:
    _overrides()[key] = {"english": english.strip(), "malayalam": malayalam.strip()}


def t(key: str) -> str:
    entry = get_translation(key)
    if entry.get("malayalam"):
        return f"{entry['english']} / {entry['malayalam']}"
    return entry["english"]


def is_edit_mode() -> bool:
    return bool(st.session_state.get(_EDIT_MODE_KEY, False))


def leave_edit_mode() -> None:
    st.session_state.pop(_EDIT_MODE_KEY, None)


def edit_mode_toggle() -> None:
    st.toggle("Edit Text", key=_EDIT_MODE_KEY)


def translated_text(key: str, kind: str = "markdown") -> None:
    entry = get_translation(key)
    if kind == "title":
        st.title(entry["english"])
    elif kind == "header":
        st.header(entry["english"])
    else:
        st.markdown(entry["english"])
    if entry.get("malayalam"):
        st.caption(entry["malayalam"])

    if is_edit_mode():
        with st.expander(f"✏️ {key}"):
            english = st.text_input("English", value=entry["english"], key=f"tr_en_{key}")
            malayalam = st.text_area("Malayalam", value=entry.get("malayalam", ""), key=f"tr_ml_{key}")
            if st.button("Save", key=f"tr_save_{key}"):
                update_translation(key, english, malayalam)
                st.rerun()
