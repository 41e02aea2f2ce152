"""Tests for profile loading."""

import json

import pytest
from pydantic import ValidationError

from form_autofill.core.profile import Identity, Profile, load_profile
from form_autofill.errors import ProfileLoadError


class TestLoadProfile:
    """Test cases for load_profile."""

    def test_bundled_sample(self, profile):
        assert profile.identity.name == "Asta"
        assert profile.identity.university_roll_no == "22dba70184"
        assert profile.work_experience[0].end_date == "Present"
        assert profile.projects[0].title == "E-commerce Platform"
        assert profile.links["github"] == "https://github.com/johndoe"

    def test_sequences_are_tuples(self, profile):
        assert isinstance(profile.work_experience, tuple)
        assert isinstance(profile.skills.frameworks, tuple)
        assert isinstance(profile.additional_info.references, tuple)

    def test_profile_is_frozen(self, profile):
        with pytest.raises(ValidationError):
            profile.identity.name = "Someone else"

    def test_links_are_read_only(self, profile):
        with pytest.raises(TypeError):
            profile.links["github"] = "https://github.com/someone-else"
        assert profile.links["github"] == "https://github.com/johndoe"

    def test_links_default_to_empty_read_only_mapping(self):
        bare = Profile(identity=Identity(uid="u", name="n", email="e@x.com"))
        assert dict(bare.links) == {}
        with pytest.raises(TypeError):
            bare.links["github"] = "x"

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "me.json"
        path.write_text(json.dumps({
            "identity": {"uid": "u1", "name": "Noelle", "email": "noelle@example.com"},
            "education": {"school": "Clover Academy"},
            "unknown_section": {"ignored": True},
        }))

        loaded = load_profile(path)
        assert loaded.identity.name == "Noelle"
        assert loaded.education.school == "Clover Academy"
        assert loaded.projects == ()
        assert loaded.address.current.city is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProfileLoadError):
            load_profile(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ProfileLoadError):
            load_profile(str(path))

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"identity": {"name": "No uid"}}))
        with pytest.raises(ProfileLoadError):
            load_profile(path)


class TestIdentity:
    """Test cases for derived identity values."""

    @pytest.mark.parametrize("date_of_birth,dob,expected", [
        ("2003-03-12", None, "2003"),
        (None, "12-03-2003", "2003"),
        (None, "12/03/2003", None),
        (None, None, None),
    ])
    def test_birth_year(self, date_of_birth, dob, expected):
        identity = Identity(uid="u", name="n", email="e@x.com", date_of_birth=date_of_birth, dob=dob)
        assert identity.birth_year == expected

    def test_profile_requires_identity(self):
        with pytest.raises(ValidationError):
            Profile()
