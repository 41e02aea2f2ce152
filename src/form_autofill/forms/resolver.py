"""
Question-to-profile value resolution.

The resolver is an ordered table of rules. Each rule pairs a predicate over
the lower-cased question text with a function reading one value from the
profile; the first rule whose predicate holds decides the answer. Rules are
grouped in tiers: exact question overrides, exact percentage overrides, then
keyword heuristics by domain. A question nothing matches resolves to
``"Not applicable"``.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from form_autofill.core.models import NOT_APPLICABLE
from form_autofill.core.profile import Address, Profile, Project, WorkExperience
from form_autofill.utils.logging import get_logger

logger = get_logger(__name__)


STUDENT_DOB = "12-03-2003"
REQUIRED_MARKER = re.compile(r"\s*\*\s*$")

Predicate = Callable[[str], bool]
ValueGetter = Callable[[Profile], Optional[str]]


@dataclass(frozen=True)
class Rule:
    """One entry of the resolution table."""
    name: str
    matches: Predicate
    value: ValueGetter


# Predicates. All receive the question already lower-cased and trimmed.

def exact(*texts: str) -> Predicate:
    """Whole-question match, ignoring a trailing required marker."""
    expected = frozenset(texts)
    return lambda q: REQUIRED_MARKER.sub("", q) in expected


def any_of(*keywords: str) -> Predicate:
    return lambda q: any(keyword in q for keyword in keywords)


def all_of(*keywords: str) -> Predicate:
    return lambda q: all(keyword in q for keyword in keywords)


def none_of(*keywords: str) -> Predicate:
    return lambda q: not any(keyword in q for keyword in keywords)


def word(*words: str) -> Predicate:
    """Keyword match on word boundaries, for keywords short enough to hide inside other words."""
    pattern = re.compile(r"\b(?:%s)\b" % "|".join(re.escape(w) for w in words))
    return lambda q: pattern.search(q) is not None


def both(*predicates: Predicate) -> Predicate:
    return lambda q: all(predicate(q) for predicate in predicates)


def either(*predicates: Predicate) -> Predicate:
    return lambda q: any(predicate(q) for predicate in predicates)


# Profile accessors

def joined(values: Iterable[str]) -> str:
    return ", ".join(values)


def first_of(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def latest_job(profile: Profile) -> Optional[WorkExperience]:
    return profile.work_experience[0] if profile.work_experience else None


def first_project(profile: Profile) -> Optional[Project]:
    return profile.projects[0] if profile.projects else None


def from_job(attribute: str) -> ValueGetter:
    def getter(profile: Profile) -> Optional[str]:
        job = latest_job(profile)
        return getattr(job, attribute) if job else None
    return getter


def from_project(attribute: str) -> ValueGetter:
    def getter(profile: Profile) -> Optional[str]:
        project = first_project(profile)
        return getattr(project, attribute) if project else None
    return getter


def from_address(attribute: str, permanent: bool = False) -> ValueGetter:
    def getter(profile: Profile) -> Optional[str]:
        address: Address = profile.address.permanent if permanent else profile.address.current
        return getattr(address, attribute)
    return getter


def address_rules(name: str, predicate: Predicate, attribute: str) -> List[Rule]:
    """Permanent variant first, current address otherwise."""
    return [
        Rule(f"permanent_{name}", both(predicate, any_of("permanent")), from_address(attribute, permanent=True)),
        Rule(f"current_{name}", predicate, from_address(attribute)),
    ]


def normalized_uid(profile: Profile) -> str:
    return re.sub(r"[\s-]", "", profile.identity.uid.lower())


def formatted_reference(profile: Profile) -> Optional[str]:
    references = profile.additional_info.references
    if not references:
        return None
    ref = references[0]
    return f"{ref.name}, {ref.position} at {ref.company}, {ref.email}, {ref.phone}"


def spoken_languages(profile: Profile) -> str:
    return joined(f"{entry.language} ({entry.proficiency})" for entry in profile.languages)


def first_certification(profile: Profile) -> Optional[str]:
    return profile.certifications[0].name if profile.certifications else None


def build_rules(student_dob: str = STUDENT_DOB) -> List[Rule]:
    """The resolution table, highest priority first."""
    email = any_of("email")
    phone = any_of("phone", "mobile", "contact")
    institution = any_of("university", "college", "institution")
    programme = both(any_of("course", "program", "degree"), none_of("programming"))
    percentage = any_of("percentage")
    board = any_of("board")
    backlog = any_of("backlog")
    post_graduate = any_of("post", "pg")
    project = any_of("project")

    rules = [
        # Exact question overrides
        Rule("student_dob", exact("student dob"), lambda p: student_dob),
        Rule(
            "university_roll_no",
            exact("university roll no"),
            lambda p: first_of(p.identity.university_roll_no, p.identity.uid)
        ),
        Rule(
            "personal_email_exact",
            exact("personal email id (not college domain)", "personal email id"),
            lambda p: p.identity.personal_email
        ),
        Rule("college_domain_email_exact", exact("college domain email id"), lambda p: p.identity.college_domain_email),

        # Exact percentage overrides
        Rule(
            "tenth_percentage_exact",
            exact("10th percentage"),
            lambda p: first_of(p.education.tenth_percentage, p.education.school_percentage)
        ),
        Rule(
            "twelfth_percentage_exact",
            exact("12th percentage"),
            lambda p: first_of(p.education.twelfth_percentage, p.education.intermediate_percentage)
        ),
        Rule(
            "graduation_percentage_exact",
            exact("graduation percentage"),
            lambda p: first_of(p.education.graduation_percentage, p.education.percentage)
        ),
        Rule(
            "post_graduation_percentage_exact",
            exact("post graduation percentage"),
            lambda p: first_of(p.education.post_graduation_percentage, p.education.percentage)
        ),

        # Identity and contact
        Rule("identifier", word("uid", "id", "identifier"), normalized_uid),
        Rule("name", both(any_of("name"), none_of("company", "school")), lambda p: p.identity.name),
        Rule("personal_email", both(email, any_of("personal", "gmail")), lambda p: p.identity.personal_email),
        Rule(
            "college_email",
            both(email, any_of("college", "university", "edu")),
            lambda p: p.identity.college_domain_email
        ),
        Rule("email", email, lambda p: p.identity.email),
        Rule("alternate_phone", both(phone, any_of("alternate", "secondary")), lambda p: p.identity.alternate_phone),
        Rule("phone", phone, lambda p: p.identity.phone),
        Rule("birth_year", any_of("birth year", "year of birth"), lambda p: p.identity.birth_year),
        Rule(
            "date_of_birth",
            either(any_of("date of birth", "birth date"), word("dob")),
            lambda p: first_of(p.identity.dob, p.identity.date_of_birth)
        ),
        Rule("age", word("age"), lambda p: p.identity.age),
        Rule(
            "gender",
            any_of("gender", "sex"),
            lambda p: first_of(p.identity.gender, p.common_responses.gender)
        ),
        Rule("marital_status", any_of("marital", "married"), lambda p: p.identity.marital_status),
        Rule("nationality", any_of("nationality", "citizen"), lambda p: p.identity.nationality),

        # Education
        Rule(
            "post_graduation_university",
            both(institution, post_graduate),
            lambda p: p.education.post_graduation_university
        ),
        Rule(
            "graduation_university",
            both(institution, any_of("graduation", "ug")),
            lambda p: p.education.graduation_university
        ),
        Rule("university", institution, lambda p: p.education.school),
        Rule(
            "post_graduation_degree",
            both(programme, post_graduate),
            lambda p: p.education.post_graduation_degree or "N/A"
        ),
        Rule("degree", programme, lambda p: p.education.degree),
        Rule("cgpa", any_of("cgpa"), lambda p: p.education.cgpa),
        Rule(
            "school_percentage",
            both(percentage, either(any_of("school", "10th", "ssc"), word("x"))),
            lambda p: p.education.school_percentage
        ),
        Rule(
            "intermediate_percentage",
            both(percentage, any_of("intermediate", "12th", "xii", "higher secondary", "hsc")),
            lambda p: p.education.intermediate_percentage
        ),
        Rule(
            "post_graduation_percentage",
            both(percentage, post_graduate),
            lambda p: p.education.post_graduation_percentage
        ),
        Rule(
            "graduation_percentage",
            both(percentage, any_of("graduation", "ug", "grad percentage")),
            lambda p: p.education.graduation_percentage
        ),
        Rule("percentage", percentage, lambda p: p.education.percentage),
        Rule(
            "tenth_marks",
            either(any_of("10th"), all_of("10", "%")),
            lambda p: first_of(p.education.tenth_percentage, p.education.school_percentage)
        ),
        Rule(
            "twelfth_marks",
            either(any_of("12th"), all_of("12", "%")),
            lambda p: first_of(p.education.twelfth_percentage, p.education.intermediate_percentage)
        ),
        Rule(
            "intermediate_board",
            both(board, any_of("intermediate", "12th"), none_of("school", "10th")),
            lambda p: p.education.intermediate_board
        ),
        Rule("school_board", board, lambda p: p.education.school_board),
        Rule("semester", any_of("semester", "sem"), lambda p: p.education.current_semester),
        Rule("section", any_of("section", "sec"), lambda p: p.education.section),
        Rule("total_backlogs", both(backlog, any_of("total"), none_of("current")), lambda p: p.education.total_backlogs),
        Rule("current_backlogs", backlog, lambda p: p.education.current_backlogs),
        Rule("batch", any_of("batch", "passing", "graduation year"), lambda p: p.education.batch),
        Rule(
            "expected_graduation",
            all_of("expected", "graduation"),
            lambda p: p.education.expected_graduation_date
        ),
        Rule("stream", any_of("stream", "specialization", "branch"), lambda p: p.education.stream),
        Rule("major", any_of("major", "field of study"), lambda p: p.education.major),

        # Application preferences
        Rule(
            "position",
            both(any_of("position", "role", "applying for"), none_of("project")),
            lambda p: p.application.position
        ),
        Rule(
            "registered_on_corporate_link",
            any_of("registered", "corporate link"),
            lambda p: p.application.registered_on_corporate_link
        ),
        Rule("registration_reason", all_of("reason", "registration"), lambda p: p.application.registration_reason),
        Rule(
            "preferred_location",
            any_of("preferred location", "work location"),
            lambda p: p.application.preferred_location
        ),
        Rule("willing_to_relocate", any_of("relocate"), lambda p: p.application.willing_to_relocate),
        Rule("notice_period", any_of("notice period"), lambda p: p.application.notice_period),
        Rule("expected_salary", all_of("expected", "salary"), lambda p: p.application.expected_salary),
        Rule("current_ctc", all_of("current", "ctc"), lambda p: p.application.current_ctc),
        Rule("expected_ctc", all_of("expected", "ctc"), lambda p: p.application.expected_ctc),
        Rule("reason_for_job_change", all_of("reason", "job change"), lambda p: p.application.reason_for_job_change),
        Rule("referred_by", any_of("referred"), lambda p: p.application.referred_by),
        Rule(
            "available_for_interview",
            all_of("available", "interview"),
            lambda p: p.application.available_for_interview
        ),
        Rule(
            "preferred_work_model",
            any_of("work model", "remote", "hybrid"),
            lambda p: p.application.preferred_work_model
        ),
    ]

    # Addresses
    rules += address_rules("street", any_of("address"), "street")
    rules += address_rules("city", any_of("city"), "city")
    rules += address_rules("state", any_of("state"), "state")
    rules += address_rules("zip_code", any_of("zip", "postal"), "zip_code")
    rules += address_rules("country", any_of("country"), "country")

    rules += [
        # Work history, most recent position
        Rule("company", any_of("company", "employer"), from_job("company")),
        Rule("job_title", any_of("job title", "designation"), from_job("position")),
        Rule("work_start_date", all_of("start date", "work"), from_job("start_date")),
        Rule("work_end_date", all_of("end date", "work"), from_job("end_date")),
        Rule("work_duration", all_of("duration", "work"), from_job("duration")),
        Rule("work_location", all_of("work", "location"), from_job("location")),
        Rule("responsibilities", any_of("responsibilities"), from_job("responsibilities")),
        Rule("work_technologies", all_of("technologies", "work"), from_job("technologies")),
        Rule("work_achievements", all_of("achievements", "work"), from_job("achievements")),
        Rule("work_description", any_of("experience", "job description"), from_job("description")),

        # Projects, first listed
        Rule("project_title", both(project, any_of("title")), from_project("title")),
        Rule("project_description", both(project, any_of("description")), from_project("description")),
        Rule("project_technologies", both(project, any_of("technologies")), from_project("technologies")),
        Rule("project_role", both(project, any_of("role")), from_project("role")),
        Rule("project_duration", both(project, any_of("duration")), from_project("duration")),
        Rule("project_link", both(project, any_of("link")), from_project("link")),

        # Skills
        Rule(
            "programming_languages",
            all_of("programming", "languages"),
            lambda p: joined(p.skills.programming_languages)
        ),
        Rule("frameworks", any_of("frameworks"), lambda p: joined(p.skills.frameworks)),
        Rule("databases", any_of("databases"), lambda p: joined(p.skills.databases)),
        Rule("tools", any_of("tools"), lambda p: joined(p.skills.tools)),
        Rule("soft_skills", any_of("soft skills"), lambda p: joined(p.skills.soft_skills)),
        Rule(
            "technical_skills",
            both(any_of("skills"), none_of("soft")),
            lambda p: joined(p.skills.programming_languages + p.skills.frameworks)
        ),

        # Certifications and languages
        Rule("certification", any_of("certification"), first_certification),
        Rule("spoken_languages", both(any_of("language"), none_of("programming")), spoken_languages),

        # Compliance questions
        Rule("ethnicity", any_of("ethnicity", "race"), lambda p: p.common_responses.ethnicity),
        Rule("visa_status", any_of("visa", "work authorization"), lambda p: p.common_responses.visa_status),
        Rule("disability_status", any_of("disability"), lambda p: p.common_responses.disability_status),
        Rule("veteran_status", any_of("veteran"), lambda p: p.common_responses.veteran_status),
        Rule("criminal_record", any_of("criminal"), lambda p: p.common_responses.criminal_record),
        Rule("agree_to_terms", all_of("terms", "agree"), lambda p: p.common_responses.agree_to_terms),
        Rule("agree_to_background", all_of("background", "check"), lambda p: p.common_responses.agree_to_background),
    ]

    # Social links
    for link in ("linkedin", "github", "portfolio", "twitter", "stackoverflow", "medium"):
        rules.append(Rule(link, any_of(link), lambda p, link=link: p.links.get(link)))

    rules += [
        # Additional information
        Rule("hobbies", any_of("hobbies"), lambda p: joined(p.additional_info.hobbies)),
        Rule(
            "achievements",
            both(any_of("achievements"), none_of("work")),
            lambda p: joined(p.additional_info.achievements)
        ),
        Rule("interests", any_of("interests"), lambda p: joined(p.additional_info.interests)),
        Rule("reference", any_of("reference"), formatted_reference),
    ]
    return rules


class ValueResolver:
    """
    Maps question text to the profile value that answers it.

    ``resolve`` is total: it never raises and always returns a string, the
    ``"Not applicable"`` sentinel when no rule yields a value.
    """

    def __init__(self, rules: Optional[List[Rule]] = None, student_dob: str = STUDENT_DOB):
        self.rules = rules if rules is not None else build_rules(student_dob)
        self.logger = logger.bind(component="value_resolver")

    def explain(self, question_text: str, profile: Profile) -> Tuple[Optional[str], str]:
        """
        Resolve a question and report which rule decided it.

        Returns:
            ``(rule_name, value)``; ``rule_name`` is None when the fallback
            tier answered
        """
        question = (question_text or "").strip().lower()

        for rule in self.rules:
            if not rule.matches(question):
                continue

            try:
                value = rule.value(profile)
            except Exception as e:
                self.logger.warning("Rule failed to read profile", rule=rule.name, question=question_text, error=str(e))
                value = None

            if value:
                self.logger.debug("Resolved question", question=question_text, rule=rule.name, value=value)
                return rule.name, value

            self.logger.info("Matched rule has no profile value", question=question_text, rule=rule.name)
            break

        return None, self._fallback(question_text, question, profile)

    def _fallback(self, question_text: str, question: str, profile: Profile) -> str:
        self.logger.info("No match found for question", question=question_text)
        if "email" in question and profile.identity.email:
            return profile.identity.email
        return NOT_APPLICABLE

    def resolve(self, question_text: str, profile: Profile) -> str:
        """Return the value to fill for a question."""
        return self.explain(question_text, profile)[1]


_default_resolver = ValueResolver()


def resolve(question_text: str, profile: Profile) -> str:
    """Resolve a question against a profile with the default rule table."""
    return _default_resolver.resolve(question_text, profile)
