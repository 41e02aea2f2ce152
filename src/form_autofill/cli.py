"""Command-line interface for the form autofiller."""

import asyncio
import signal
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from form_autofill.browser import chrome
from form_autofill.config import FieldDelay, Settings, settings
from form_autofill.core.automator import FormAutomator
from form_autofill.core.models import FillReport
from form_autofill.core.profile import Profile, load_profile
from form_autofill.core.review import ReviewCheckpoint
from form_autofill.errors import BrowserUnavailableError, ProfileLoadError
from form_autofill.forms.resolver import ValueResolver
from form_autofill.utils.logging import configure_logging

app = typer.Typer(
    name="form-autofill",
    help="Fill Google Forms from a stored profile, leaving submission to you",
    add_completion=False,
)
console = Console()


def _load(profile_path: Optional[Path]) -> Profile:
    try:
        return load_profile(profile_path or settings.profile_path)
    except ProfileLoadError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1)


def _with_field_delay(base: Settings, delay_min: Optional[int], delay_max: Optional[int]) -> Settings:
    if delay_min is None and delay_max is None:
        return base
    try:
        delay = FieldDelay(
            min_ms=base.field_delay.min_ms if delay_min is None else delay_min,
            max_ms=base.field_delay.max_ms if delay_max is None else delay_max,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))
    return base.model_copy(update={"field_delay": delay})


async def _run_fill(url: str, profile: Profile, run_settings: Settings) -> FillReport:
    checkpoint = ReviewCheckpoint()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, checkpoint.release, sig.name)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C still interrupts the wait
            pass

    automator = FormAutomator(profile, settings=run_settings)
    return await automator.run(url, checkpoint)


def _print_report(report: FillReport) -> None:
    table = Table(title="Fill Report")
    table.add_column("#", style="dim")
    table.add_column("Question", style="cyan")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Value", style="green")

    styles = {"filled": "green", "failed": "red", "skipped": "yellow"}
    for outcome in report.outcomes:
        status = outcome.status.value
        table.add_row(
            str(outcome.position),
            outcome.question_text,
            outcome.modality.value,
            f"[{styles[status]}]{status}[/{styles[status]}]",
            outcome.value or "",
        )

    console.print(table)
    summary = report.summary()
    console.print(
        f"Filled {summary['filled']}, failed {summary['failed']}, skipped {summary['skipped']}. "
        "The form was NOT submitted."
    )


@app.command()
def fill(
    url: str = typer.Argument(..., help="URL of the form to fill"),
    profile: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile JSON file"),
    delay_min: Optional[int] = typer.Option(None, "--delay-min", min=0, help="Minimum pause between fields (ms)"),
    delay_max: Optional[int] = typer.Option(None, "--delay-max", min=0, help="Maximum pause between fields (ms)"),
) -> None:
    """Fill a form and keep it open for manual review and submission."""
    configure_logging()
    user_profile = _load(profile)
    run_settings = _with_field_delay(settings, delay_min, delay_max)

    console.print(f"📝 Filling form: {url}")
    console.print("Press Ctrl+C once you have reviewed and submitted the form.")

    try:
        report = asyncio.run(_run_fill(url, user_profile, run_settings))
    except BrowserUnavailableError as e:
        console.print(f"❌ {e}", style="red")
        for step in chrome.startup_instructions(run_settings.browser.debugging_port):
            console.print(f"  • {step}")
        raise typer.Exit(1)

    _print_report(report)


@app.command()
def resolve(
    question: str = typer.Argument(..., help="Question text as shown on the form"),
    profile: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile JSON file"),
) -> None:
    """Show the value a question would be filled with."""
    user_profile = _load(profile)
    rule, value = ValueResolver(student_dob=settings.student_dob).explain(question, user_profile)

    table = Table(title="Resolution")
    table.add_column("Question", style="cyan")
    table.add_column("Rule")
    table.add_column("Value", style="green")
    table.add_row(question, rule or "(fallback)", value)
    console.print(table)


@app.command("profile")
def show_profile(
    profile: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile JSON file"),
) -> None:
    """Show a summary of the loaded profile."""
    user_profile = _load(profile)
    identity = user_profile.identity
    education = user_profile.education
    latest = user_profile.work_experience[0] if user_profile.work_experience else None

    table = Table(title="Profile")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Name", identity.name)
    table.add_row("UID", identity.uid)
    table.add_row("Email", identity.email)
    table.add_row("College Email", identity.college_domain_email or "")
    table.add_row("Date of Birth", identity.dob or identity.date_of_birth or "")
    table.add_row("Institution", education.school or "")
    table.add_row("Degree", education.degree or "")
    table.add_row("Latest Position", f"{latest.position} at {latest.company}" if latest else "")
    table.add_row("Projects", str(len(user_profile.projects)))
    table.add_row("Certifications", str(len(user_profile.certifications)))

    console.print(table)


@app.command()
def config() -> None:
    """Show current configuration."""
    table = Table(title="Form Autofill Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Auto Submit", str(settings.auto_submit))
    table.add_row("Field Delay (ms)", f"{settings.field_delay.min_ms}-{settings.field_delay.max_ms}")
    table.add_row("Connect To Existing Chrome", str(settings.browser.connect_to_existing))
    table.add_row("Debugging Port", str(settings.browser.debugging_port))
    table.add_row("Browser Headless", str(settings.browser.headless))
    table.add_row("Profile Path", settings.profile_path or "(bundled sample)")
    table.add_row("Resume Path", f"{settings.resume_path} (never uploaded)")
    table.add_row("College Email Domain", settings.college_email_domain)

    console.print(table)


@app.command("prepare-chrome")
def prepare_chrome(
    start: bool = typer.Option(False, "--start", help="Start Chrome with remote debugging"),
) -> None:
    """Check for, or start, a Chrome with remote debugging enabled."""
    port = settings.browser.debugging_port

    if start:
        console.print(f"🚀 Starting Chrome with remote debugging on port {port}")
        if not asyncio.run(chrome.start_chrome_with_debugging(settings.browser)):
            console.print("❌ Could not start Chrome", style="red")
            raise typer.Exit(1)

    if asyncio.run(chrome.is_debugging_endpoint_up(port)):
        console.print(f"✅ Chrome debugging endpoint is up at {chrome.debugging_url(port)}")
        return

    console.print(f"⚠️  No Chrome debugging endpoint at {chrome.debugging_url(port)}")
    for number, step in enumerate(chrome.startup_instructions(port), start=1):
        console.print(f"{number}. {step}")


@app.command()
def version() -> None:
    """Show version information."""
    from form_autofill import __version__
    console.print(f"Form Autofill v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
