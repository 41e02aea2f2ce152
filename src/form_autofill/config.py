"""Configuration management for the form autofiller."""

from typing import Optional
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FieldDelay(BaseModel):
    """Randomized pause between two field fills, in milliseconds."""

    min_ms: int = Field(500, ge=0, description="Minimum delay between fields")
    max_ms: int = Field(1500, ge=0, description="Maximum delay between fields")

    @model_validator(mode="after")
    def check_range(self) -> "FieldDelay":
        if self.max_ms < self.min_ms:
            raise ValueError("field_delay.max_ms must not be lower than field_delay.min_ms")
        return self


class BrowserSettings(BaseModel):
    """How the Chrome session is obtained and how long page operations may take."""

    connect_to_existing: bool = Field(True, description="Attach to a Chrome already exposing a debugging port")
    use_existing_profile: bool = Field(True, description="Start Chrome with the user's own profile directory")
    headless: bool = Field(False, description="Run a launched browser without a window")
    debugging_port: int = Field(9222, description="Chrome remote debugging port")
    executable_path: Optional[str] = Field(None, description="Explicit Chrome executable")
    user_data_dir: Optional[str] = Field(None, description="Explicit Chrome user data directory")
    startup_wait_seconds: float = Field(3.0, description="Time given to a freshly started Chrome")
    navigation_timeout_ms: int = Field(60000, description="Timeout for loading the form URL")
    default_timeout_ms: int = Field(30000, description="Default timeout for page operations")
    form_wait_timeout_ms: int = Field(10000, description="Timeout waiting for the form element")
    settle_seconds: float = Field(2.0, description="Pause after load before scanning the form")


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FORM_AUTOFILL_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    # Submission is always left to the user; kept for configuration compatibility
    auto_submit: bool = Field(False, description="Submit automatically (never honoured)")

    field_delay: FieldDelay = Field(default_factory=FieldDelay)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)

    # Profile
    profile_path: Optional[str] = Field(None, description="Profile JSON file; bundled sample when unset")
    resume_path: str = Field("./resume.pdf", description="Resume file (file uploads are never automated)")

    # Form-specific literals
    college_email_domain: str = Field("cuchd.in", description="Domain appended to bare college email ids")
    student_dob: str = Field("12-03-2003", description="Date of birth typed into DOB date widgets (dd-mm-yyyy)")

    # Application Configuration
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")


# Global settings instance
settings = Settings()
