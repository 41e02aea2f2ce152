"""Read-only applicant profile used as the source of every filled value."""

import json
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from form_autofill.errors import ProfileLoadError
from form_autofill.utils.logging import get_logger

logger = get_logger(__name__)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Identity(_Frozen):
    """Name, identifiers, contact details and demographics."""
    uid: str = Field(..., description="Institutional identifier")
    university_roll_no: Optional[str] = Field(None, description="University roll number")
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Primary email address")
    personal_email: Optional[str] = Field(None, description="Personal (non-institutional) email")
    college_domain_email: Optional[str] = Field(None, description="Institutional email or bare mailbox id")
    phone: Optional[str] = Field(None, description="Phone number")
    alternate_phone: Optional[str] = Field(None, description="Secondary phone number")
    date_of_birth: Optional[str] = Field(None, description="Date of birth, yyyy-mm-dd")
    dob: Optional[str] = Field(None, description="Date of birth, dd-mm-yyyy")
    age: Optional[str] = Field(None, description="Age in years")
    gender: Optional[str] = Field(None, description="Gender")
    marital_status: Optional[str] = Field(None, description="Marital status")
    nationality: Optional[str] = Field(None, description="Nationality")

    @property
    def birth_year(self) -> Optional[str]:
        if self.date_of_birth:
            return self.date_of_birth.split("-")[0]
        if self.dob:
            parts = self.dob.split("-")
            return parts[2] if len(parts) == 3 else None
        return None


class Education(_Frozen):
    """The current study programme and earlier schooling results."""
    school: Optional[str] = None
    degree: Optional[str] = None
    major: Optional[str] = None
    batch: Optional[str] = None
    stream: Optional[str] = None
    program: Optional[str] = None
    cgpa: Optional[str] = None
    percentage: Optional[str] = None
    tenth_percentage: Optional[str] = None
    twelfth_percentage: Optional[str] = None
    school_percentage: Optional[str] = None
    intermediate_percentage: Optional[str] = None
    graduation_percentage: Optional[str] = None
    post_graduation_percentage: Optional[str] = None
    current_backlogs: Optional[str] = None
    total_backlogs: Optional[str] = None
    graduation_university: Optional[str] = None
    post_graduation_university: Optional[str] = None
    post_graduation_degree: Optional[str] = None
    school_board: Optional[str] = None
    intermediate_board: Optional[str] = None
    current_semester: Optional[str] = None
    section: Optional[str] = None
    expected_graduation_date: Optional[str] = None


class Application(_Frozen):
    """Preferences for the position being applied to."""
    position: Optional[str] = None
    registered_on_corporate_link: Optional[str] = None
    registration_reason: Optional[str] = None
    preferred_location: Optional[str] = None
    willing_to_relocate: Optional[str] = None
    notice_period: Optional[str] = None
    expected_salary: Optional[str] = None
    current_ctc: Optional[str] = None
    expected_ctc: Optional[str] = None
    reason_for_job_change: Optional[str] = None
    referred_by: Optional[str] = None
    available_for_interview: Optional[str] = None
    preferred_work_model: Optional[str] = None


class Address(_Frozen):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class Addresses(_Frozen):
    current: Address = Field(default_factory=Address)
    permanent: Address = Field(default_factory=Address)


class WorkExperience(_Frozen):
    company: str
    position: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    responsibilities: Optional[str] = None
    technologies: Optional[str] = None
    achievements: Optional[str] = None


class Project(_Frozen):
    title: str
    description: Optional[str] = None
    technologies: Optional[str] = None
    role: Optional[str] = None
    duration: Optional[str] = None
    link: Optional[str] = None


class Skills(_Frozen):
    programming_languages: Tuple[str, ...] = ()
    frameworks: Tuple[str, ...] = ()
    databases: Tuple[str, ...] = ()
    tools: Tuple[str, ...] = ()
    soft_skills: Tuple[str, ...] = ()


class Certification(_Frozen):
    name: str
    issuer: Optional[str] = None
    date: Optional[str] = None
    expiry_date: Optional[str] = None
    credential_id: Optional[str] = None


class LanguageProficiency(_Frozen):
    language: str
    proficiency: str


class CommonResponses(_Frozen):
    """Canned answers to compliance questions."""
    gender: Optional[str] = None
    ethnicity: Optional[str] = None
    visa_status: Optional[str] = None
    disability_status: Optional[str] = None
    veteran_status: Optional[str] = None
    criminal_record: Optional[str] = None
    agree_to_terms: Optional[str] = None
    agree_to_background: Optional[str] = None


class Reference(_Frozen):
    name: str
    position: str
    company: str
    email: str
    phone: str


class AdditionalInfo(_Frozen):
    hobbies: Tuple[str, ...] = ()
    achievements: Tuple[str, ...] = ()
    interests: Tuple[str, ...] = ()
    references: Tuple[Reference, ...] = ()


class Profile(_Frozen):
    """
    Complete applicant profile.

    Loaded once at start-up and passed explicitly to the resolver and the
    filler. Instances are frozen, sequences are tuples and links are a
    read-only mapping, so a loaded profile can be shared freely.
    """
    identity: Identity
    education: Education = Field(default_factory=Education)
    application: Application = Field(default_factory=Application)
    address: Addresses = Field(default_factory=Addresses)
    work_experience: Tuple[WorkExperience, ...] = Field((), description="Most recent position first")
    projects: Tuple[Project, ...] = ()
    skills: Skills = Field(default_factory=Skills)
    certifications: Tuple[Certification, ...] = ()
    languages: Tuple[LanguageProficiency, ...] = ()
    common_responses: CommonResponses = Field(default_factory=CommonResponses)
    links: Mapping[str, str] = Field(
        default_factory=dict, validate_default=True, description="Social and portfolio links by name"
    )
    additional_info: AdditionalInfo = Field(default_factory=AdditionalInfo)

    @field_validator("links", mode="after")
    @classmethod
    def _read_only_links(cls, links: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(links))


def load_profile(path: Optional[Union[str, Path]] = None) -> Profile:
    """
    Load and validate a profile document.

    Args:
        path: JSON file to read; the bundled sample profile when None

    Returns:
        The validated, immutable profile

    Raises:
        ProfileLoadError: if the file cannot be read or fails validation
    """
    try:
        if path is None:
            source = "bundled sample"
            raw = resources.files("form_autofill").joinpath("data/profile.json").read_text(encoding="utf-8")
        else:
            source = str(path)
            raw = Path(path).read_text(encoding="utf-8")
        profile = Profile.model_validate(json.loads(raw))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error("Failed to load profile", source=source, error=str(e))
        raise ProfileLoadError(f"Could not load profile from {source}: {e}") from e

    logger.info(
        "Profile loaded",
        source=source,
        name=profile.identity.name,
        positions=len(profile.work_experience),
        projects=len(profile.projects)
    )
    return profile
