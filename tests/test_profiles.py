"""
Tests for the JSON profile store.
"""

import json
from unittest.mock import MagicMock

import pytest

from latesh_bot.utils import profiles as profile_store


def make_user(user_id=111, name="alexr", display_name="Alex"):
    user = MagicMock()
    user.id = user_id
    user.name = name
    user.display_name = display_name
    return user


class TestProfileLoading:
    """Test reading the profile file."""

    def test_missing_file_reads_empty(self, profiles_file):
        assert profile_store.load_profiles() == {}

    def test_corrupt_file_reads_empty(self, profiles_file):
        profiles_file.parent.mkdir(parents=True)
        profiles_file.write_text("{not json")
        assert profile_store.load_profiles() == {}

    def test_non_object_reads_empty(self, profiles_file):
        profiles_file.parent.mkdir(parents=True)
        profiles_file.write_text("[1, 2, 3]")
        assert profile_store.load_profiles() == {}

    def test_lookup_by_int_or_str_id(self, saved_profiles):
        assert profile_store.get_user_profile(111)['name'] == 'Alex Rivera'
        assert profile_store.get_user_profile('222')['name'] == 'Jordan Lee'
        assert profile_store.get_user_profile(333) is None

    def test_ensure_creates_directory_and_empty_object(self, profiles_file):
        profile_store.ensure_profiles_file()
        assert json.loads(profiles_file.read_text()) == {}


class TestProfileSaving:
    """Test creating and updating profiles from the /remember form."""

    def test_create_profile(self, profiles_file):
        profile, is_update = profile_store.save_profile_from_form(
            make_user(), "  Alex Rivera ", "Likes robots", "254", "", "   ")

        assert is_update is False
        assert profile['name'] == "Alex Rivera"
        assert profile['team'] == "254"
        assert profile['role'] is None
        assert profile['location'] is None
        assert profile['discord_id'] == "111"
        assert profile['created_at'] == profile['updated_at']

        stored = json.loads(profiles_file.read_text())
        assert stored["111"]['description'] == "Likes robots"

    def test_file_written_with_indent(self, profiles_file):
        profile_store.save_profile_from_form(make_user(), "Alex", "About", None, None, None)
        assert '\n  "111"' in profiles_file.read_text()

    def test_update_keeps_created_at_and_lab_identity(self, saved_profiles):
        profile_store.update_profile_fields(111, avatar_url="https://img.example/a.png",
                                            webhook_url="https://discord.com/api/webhooks/1/abc")

        profile, is_update = profile_store.save_profile_from_form(
            make_user(), "Alex R", "Updated bio", None, "Lead", None)

        assert is_update is True
        assert profile['created_at'] == saved_profiles['111']['created_at']
        assert profile['avatar_url'] == "https://img.example/a.png"
        assert profile['webhook_url'].startswith("https://discord.com/api/webhooks/")
        assert profile['team'] is None

    def test_update_fields_missing_profile(self, profiles_file):
        assert profile_store.update_profile_fields(999, avatar_url="x") is None

    def test_update_fields_stamps_updated_at(self, saved_profiles):
        profile = profile_store.update_profile_fields('222', avatar_url="https://img.example/j.png")
        assert profile['avatar_url'] == "https://img.example/j.png"
        assert profile['updated_at'] != saved_profiles['222']['updated_at']

    def test_save_failure_raises(self, profiles_file, monkeypatch):
        monkeypatch.setattr(profile_store, "save_profiles", lambda profiles: False)
        with pytest.raises(OSError):
            profile_store.save_profile_from_form(make_user(), "Alex", "About")


class TestProfileDeletion:
    """Test deleting profiles."""

    def test_delete_existing(self, saved_profiles):
        assert profile_store.delete_profile(111) is True
        assert profile_store.get_user_profile(111) is None
        assert profile_store.get_user_profile(222) is not None

    def test_delete_missing(self, saved_profiles):
        assert profile_store.delete_profile(999) is False

    def test_format_team(self, sample_profile):
        assert profile_store.format_team(sample_profile) == "Team 254"
        assert profile_store.format_team({'team': None}) == "Not specified"
