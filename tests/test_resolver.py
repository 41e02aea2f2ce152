"""Tests for question-to-profile value resolution."""

import pytest

from form_autofill.core.models import NOT_APPLICABLE
from form_autofill.forms.resolver import (
    STUDENT_DOB,
    Rule,
    ValueResolver,
    all_of,
    any_of,
    build_rules,
    exact,
    resolve,
    word,
)


def with_identity(profile, **changes):
    return profile.model_copy(update={"identity": profile.identity.model_copy(update=changes)})


def with_education(profile, **changes):
    return profile.model_copy(update={"education": profile.education.model_copy(update=changes)})


class TestPredicates:
    """Test cases for rule predicates."""

    def test_exact_ignores_required_marker(self):
        matches = exact("student dob")
        assert matches("student dob")
        assert matches("student dob *")
        assert matches("student dob*")
        assert not matches("student dob (dd-mm-yyyy)")

    def test_word_requires_boundaries(self):
        matches = word("id", "uid")
        assert matches("student id")
        assert matches("uid")
        assert not matches("provide your answer")
        assert not matches("residential address")

    def test_any_and_all(self):
        assert any_of("city", "town")("home town")
        assert not all_of("project", "title")("job title")
        assert all_of("project", "title")("project title")


class TestExactOverrides:
    """Test cases for the exact question tiers."""

    def test_student_dob_uses_fixed_literal(self, profile):
        changed = with_identity(profile, dob="01-01-1999", date_of_birth="1999-01-01")
        assert resolve("Student DOB", changed) == "12-03-2003"
        assert resolve("Student DOB *", changed) == STUDENT_DOB

    def test_student_dob_literal_is_configurable(self, profile):
        resolver = ValueResolver(student_dob="05-06-2001")
        assert resolver.resolve("Student DOB", profile) == "05-06-2001"

    def test_personal_email(self, profile):
        changed = with_identity(profile, personal_email="asta.personal@gmail.com")
        assert resolve("Personal Email ID", changed) == "asta.personal@gmail.com"
        assert resolve("Personal Email ID (not college domain)", changed) == "asta.personal@gmail.com"

    def test_college_domain_email_is_returned_raw(self, profile):
        changed = with_identity(profile, college_domain_email="22dba70184")
        assert resolve("College Domain Email ID", changed) == "22dba70184"

    def test_university_roll_no_falls_back_to_uid(self, profile):
        assert resolve("University Roll No", profile) == "22dba70184"
        changed = with_identity(profile, university_roll_no=None)
        assert resolve("University Roll No", changed) == "22dba184"

    def test_percentage_overrides_with_fallbacks(self, profile):
        assert resolve("10th Percentage", profile) == "92%"
        assert resolve("12th Percentage *", profile) == "88%"

        changed = with_education(profile, tenth_percentage=None, school_percentage="91%")
        assert resolve("10th Percentage", changed) == "91%"

        changed = with_education(profile, twelfth_percentage=None, intermediate_percentage="87%")
        assert resolve("12th Percentage", changed) == "87%"

    def test_graduation_percentage(self, profile):
        assert resolve("Graduation Percentage", profile) == "8.5"


class TestKeywordRules:
    """Test cases for the keyword heuristic tiers."""

    @pytest.mark.parametrize("question,expected", [
        ("Full Name", "Asta"),
        ("UID", "22dba184"),
        ("Student ID", "22dba184"),
        ("Email Address", "m@gmail.com"),
        ("University Email", "22dba70184@cuchd.in"),
        ("Phone Number", "9777777777"),
        ("Alternate Mobile Number", "9451285754"),
        ("Date of Birth", "12-03-2003"),
        ("Year of Birth", "2003"),
        ("Age", "21"),
        ("Gender", "Male"),
        ("Nationality", "Indian"),
        ("University", "Chandigarh University"),
        ("Degree", "Bachelor of Engineering (B.E)"),
        ("CGPA", "8.5"),
        ("Intermediate (XII) Percentage", "88%"),
        ("Overall Percentage", "85%"),
        ("Current Backlogs", "0"),
        ("Batch", "2026"),
        ("Stream", "CSE-AIML"),
        ("Preferred Location", "Bangalore"),
        ("Permanent Address", "456 Oak Avenue"),
        ("Address", "123 Main Street"),
        ("City", "Anytown"),
        ("Permanent City", "Hometown"),
        ("Zip Code", "12345"),
        ("Current Company", "Digital Solutions LLC"),
        ("Designation", "Junior Developer"),
        ("Project Title", "E-commerce Platform"),
        ("Project Role", "Full-stack Developer"),
        ("Programming Languages", "JavaScript, Python, Java, C++, TypeScript"),
        ("Databases", "MongoDB, MySQL, PostgreSQL, Redis"),
        ("Languages Known", "English (Fluent), Hindi (Native), Spanish (Basic)"),
        ("Certifications", "AWS Certified Developer - Associate"),
        ("LinkedIn Profile", "https://linkedin.com/in/johndoe"),
        ("GitHub URL", "https://github.com/johndoe"),
        ("Hobbies", "Reading, Hiking, Photography, Coding"),
    ])
    def test_sample_profile_answers(self, profile, question, expected):
        assert resolve(question, profile) == expected

    def test_identifier_is_normalized(self, profile):
        changed = with_identity(profile, uid="22 DBA-184")
        assert resolve("UID", changed) == "22dba184"
        # Only identifiers are normalized
        assert resolve("Full Name", with_identity(profile, name="Asta Staria")) == "Asta Staria"

    def test_word_rules_do_not_fire_inside_words(self, profile):
        assert resolve("Percentage", profile) == "85%"
        assert resolve("Languages Known", profile).startswith("English")

    def test_dob_matches_whole_word_only(self, profile):
        resolver = ValueResolver()
        assert resolver.explain("DOB (dd-mm-yyyy)", profile)[0] == "date_of_birth"
        assert resolver.explain("Adobe Photoshop experience", profile)[0] != "date_of_birth"
        assert resolver.explain("Adobe skills", profile)[0] != "date_of_birth"

    def test_bare_skills_unions_languages_and_frameworks(self, profile):
        value = resolve("Technical Skills", profile)
        assert value.startswith("JavaScript, Python")
        assert "Spring Boot" in value
        assert resolve("Soft Skills", profile).startswith("Communication")

    def test_reference_formatting(self, profile):
        assert resolve("Reference", profile) == (
            "Jane Smith, Senior Developer at Tech Company Inc., jane.smith@example.com, 1234567890"
        )

    def test_work_rules_use_most_recent_position(self, profile):
        assert resolve("Work Start Date", profile) == "January 2023"
        assert resolve("Work Technologies", profile) == "Python, Django, React, PostgreSQL"
        assert resolve("Responsibilities", profile) == "Full-stack development, code reviews, mentoring interns"

    def test_post_graduation_degree_placeholder(self, profile):
        assert resolve("Post Graduation Degree", profile) == "N/A"


class TestFallback:
    """Test cases for unmatched and absent answers."""

    def test_unmatched_question(self, profile):
        assert resolve("Favorite color", profile) == NOT_APPLICABLE

    def test_empty_question(self, profile):
        assert resolve("", profile) == NOT_APPLICABLE
        assert resolve(None, profile) == NOT_APPLICABLE

    def test_absent_value_falls_through_to_sentinel(self, profile):
        assert resolve("Willing to relocate?", profile) == NOT_APPLICABLE
        assert resolve("Post Graduation University", profile) == NOT_APPLICABLE
        assert resolve("School Board", profile) == NOT_APPLICABLE

    def test_email_last_resort(self, profile):
        changed = with_identity(profile, personal_email=None)
        assert resolve("Personal Email", changed) == "m@gmail.com"

    def test_failing_rule_does_not_raise(self, profile):
        def broken(p):
            raise KeyError("boom")

        resolver = ValueResolver(rules=[Rule("broken", any_of("color"), broken)])
        assert resolver.resolve("Favorite color", profile) == NOT_APPLICABLE


class TestExplain:
    """Test cases for rule reporting."""

    def test_reports_matching_rule(self, profile):
        assert ValueResolver().explain("Student DOB", profile) == ("student_dob", "12-03-2003")
        assert ValueResolver().explain("Gender", profile) == ("gender", "Male")

    def test_reports_fallback(self, profile):
        assert ValueResolver().explain("Favorite color", profile) == (None, NOT_APPLICABLE)

    def test_rule_names_are_unique(self):
        names = [rule.name for rule in build_rules()]
        assert len(names) == len(set(names))
