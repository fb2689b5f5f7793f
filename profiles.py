from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import List
from pydantic import ValidationError
from models import AppState
from paths import get_data_dir
from storage import data_path, load_json, save_json


logger = logging.getLogger(__name__)

PROFILES_FILE = "profiles.json"


def _sanitize_profile_name(name: str) -> str:
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", name.strip())
    safe = safe.strip("_") or "default"
    return safe[:80]


def _profile_path(profile_name: str) -> Path:
    safe = _sanitize_profile_name(profile_name)
    return data_path(f"state__{safe}.json")


def _save_profiles_list(profiles: List[str]) -> None:
    save_json(data_path(PROFILES_FILE), {"profiles": profiles})


def list_profiles() -> List[str]:
    data = load_json(data_path(PROFILES_FILE), {"profiles": []})
    profiles: List[str] = [p for p in data.get("profiles", []) if isinstance(p, str)]

    # Discover any files on disk not in the list
    discovered = []
    known = {_sanitize_profile_name(p) for p in profiles}
    for path in sorted(get_data_dir().glob("state__*.json")):
        suffix = path.stem.replace("state__", "", 1)
        if suffix not in known:
            discovered.append(suffix.replace("_", " ").strip() or "default")

    combined = []
    for name in profiles + discovered:
        if name and name not in combined:
            combined.append(name)

    if not combined:
        combined = ["default"]
        _save_profiles_list(combined)

    return combined


def load_profile(profile_name: str) -> AppState:
    default_state = AppState(profile=profile_name)
    raw = load_json(_profile_path(profile_name), default_state.model_dump(mode="json"))
    try:
        state = AppState.model_validate(raw)
    except ValidationError as e:
        logger.warning("Profile '%s' failed validation, starting fresh: %s", profile_name, e)
        state = default_state
        save_profile(profile_name, state)
    state.profile = profile_name

    profiles = list_profiles()
    if profile_name not in profiles:
        profiles.append(profile_name)
        _save_profiles_list(profiles)

    return state


def save_profile(profile_name: str, state: AppState) -> None:
    state.profile = profile_name
    save_json(_profile_path(profile_name), state.model_dump(mode="json"))
    profiles = list_profiles()
    if profile_name not in profiles:
        profiles.append(profile_name)
        _save_profiles_list(profiles)


def create_profile(profile_name: str) -> AppState:
    name = profile_name.strip()
    if not name:
        raise ValueError("Profile name cannot be empty.")

    profiles = list_profiles()
    if any(p.lower() == name.lower() for p in profiles):
        raise ValueError("Profile already exists.")

    path = _profile_path(name)
    if path.exists():
        raise ValueError("A profile with that name already exists on disk.")

    state = AppState(profile=name)
    save_profile(name, state)
    return state


def reset_profile(profile_name: str) -> AppState:
    """
    Drop the stored user data and schedule of a profile, keeping the slot.
    """
    state = AppState(profile=profile_name)
    save_profile(profile_name, state)
    return state


def delete_profile(profile_name: str) -> None:
    path = _profile_path(profile_name)
    try:
        path.unlink()
    except FileNotFoundError:
        pass

    profiles = [p for p in list_profiles() if p != profile_name]
    if not profiles:
        profiles = ["default"]
        save_profile("default", AppState(profile="default"))
    _save_profiles_list(profiles)
