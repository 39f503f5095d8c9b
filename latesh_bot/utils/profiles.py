"""
Profile Store Module

Persists user profiles as a single JSON object keyed by Discord user ID.
The whole file is read on every lookup and rewritten on every change.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .. import config

logger = logging.getLogger(__name__)

OPTIONAL_FIELDS = ('team', 'role', 'location')


def _profiles_path() -> str:
    return config.PROFILES_FILE


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def ensure_profiles_file() -> str:
    """Create the data directory and an empty profile file if needed"""
    path = _profiles_path()
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    if not os.path.exists(path):
        with open(path, 'w', encoding='utf-8') as f:
            json.dump({}, f)
    return path


def load_profiles() -> Dict[str, Dict[str, Any]]:
    """Load every profile. A missing or unreadable file yields an empty store."""
    path = _profiles_path()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading user profiles from {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Profile file {path} does not contain a JSON object")
        return {}
    return data


def save_profiles(profiles: Dict[str, Dict[str, Any]]) -> bool:
    """Overwrite the profile file with the given mapping"""
    path = ensure_profiles_file()
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(profiles, f, indent=2, ensure_ascii=False)
        return True
    except OSError as e:
        logger.error(f"Error saving user profiles to {path}: {e}")
        return False


def get_user_profile(user_id) -> Optional[Dict[str, Any]]:
    return load_profiles().get(str(user_id))


def get_all_profiles() -> Dict[str, Dict[str, Any]]:
    return load_profiles()


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def save_profile_from_form(user, name: str, description: str, team: Optional[str] = None,
                           role: Optional[str] = None, location: Optional[str] = None) -> Tuple[Dict[str, Any], bool]:
    """
    Create or replace a user's profile from the /remember form.

    Args:
        user: Discord user submitting the form
        name, description: Required free text
        team, role, location: Optional values, blank becomes None

    Returns:
        Tuple of (saved profile, whether an existing profile was updated)
    """
    profiles = load_profiles()
    key = str(user.id)
    existing = profiles.get(key)
    now = _now_iso()

    profile = {
        'name': name.strip(),
        'description': description.strip(),
        'team': _clean_optional(team),
        'role': _clean_optional(role),
        'location': _clean_optional(location),
        'discord_id': key,
        'discord_username': user.name,
        'discord_display_name': user.display_name,
        'created_at': existing.get('created_at', now) if existing else now,
        'updated_at': now,
    }

    # Lab game identity data survives a profile rewrite
    if existing:
        for carried in ('avatar_url', 'webhook_url'):
            if existing.get(carried):
                profile[carried] = existing[carried]

    profiles[key] = profile
    if not save_profiles(profiles):
        raise OSError(f"Could not write profile for user {key}")
    return profile, existing is not None


def update_profile_fields(user_id, **fields) -> Optional[Dict[str, Any]]:
    """Merge fields into an existing profile and stamp updated_at"""
    profiles = load_profiles()
    key = str(user_id)
    profile = profiles.get(key)
    if profile is None:
        return None

    profile.update(fields)
    profile['updated_at'] = _now_iso()
    profiles[key] = profile
    if not save_profiles(profiles):
        return None
    return profile


def delete_profile(user_id) -> bool:
    profiles = load_profiles()
    key = str(user_id)
    if key not in profiles:
        return False
    del profiles[key]
    return save_profiles(profiles)


def format_team(profile: Dict[str, Any]) -> str:
    team = profile.get('team')
    return f"Team {team}" if team else "Not specified"
