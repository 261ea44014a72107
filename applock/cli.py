"""Command line management of the diary lock."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, NoReturn

import click

from audit.logger import iter_entries, verify_log
from applock.config import LOCK_DELAY_OPTIONS, describe_delay
from applock.gate import SecurityGate, format_countdown
from applock.policy import policy
from applock.storage import JsonFileStore, SecurityStorage
from applock.validation import (
    ValidationIssue,
    collect_issues,
    validate_pin,
    validate_pin_confirmation,
)

_DELAY_CHOICES = {
    ("off" if value == 0 else str(value // 60_000)): value for value, _label in LOCK_DELAY_OPTIONS
}


def _fail(issues: Iterable[ValidationIssue]) -> NoReturn:
    for issue in issues:
        click.echo(f"Error: {issue.message}", err=True)
    click.get_current_context().exit(1)


def _prompt_pin(label: str) -> str:
    return click.prompt(label, hide_input=True, default="", show_default=False)


@click.group()
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    default=lambda: policy.home,
    envvar="DIARYLOCK_HOME",
    show_default="~/.diarylock",
    help="Directory holding the lock storage.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, home: Path, verbose: bool) -> None:
    """Manage the PIN lock protecting the diary."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    storage = SecurityStorage(JsonFileStore(Path(home).expanduser() / "storage.json"))
    ctx.obj = SecurityGate(storage)


@main.command()
@click.pass_obj
def status(gate: SecurityGate) -> None:
    """Show the current lock configuration."""

    config = gate.config
    remaining = gate.get_time_until_lock()
    click.echo(f"PIN configured:        {'yes' if gate.is_pin_configured else 'no'}")
    if gate.is_pin_configured:
        click.echo(f"PIN:                   {gate.masked_pin}")
    click.echo(f"PIN length:            {config.pin_length}")
    click.echo(f"Auto-lock:             {describe_delay(config.auto_lock_delay_ms)}")
    if remaining is None:
        click.echo("Time until lock:       not configured")
    elif config.auto_lock_delay_ms > 0:
        click.echo(f"Time until lock:       {format_countdown(remaining)}")
    click.echo(f"Require PIN on resume: {'yes' if config.require_pin_on_resume else 'no'}")
    click.echo(f"Hide in multitask:     {'yes' if config.hide_content_in_multitask else 'no'}")


@main.command("set-pin")
@click.pass_obj
def set_pin(gate: SecurityGate) -> None:
    """Protect the diary with a new PIN."""

    if gate.is_pin_configured:
        raise click.ClickException("a PIN is already set; use change-pin or disable-pin.")
    pin = _prompt_pin("New PIN")
    confirmation = _prompt_pin("Repeat PIN")
    issues = collect_issues(
        validate_pin(pin, length=gate.pin_length),
        validate_pin_confirmation(pin, confirmation),
    )
    if issues:
        _fail(issues)
    if not gate.setup_pin(pin):
        raise click.ClickException("the PIN could not be set.")
    click.echo("PIN set.")


@main.command("change-pin")
@click.pass_obj
def change_pin(gate: SecurityGate) -> None:
    """Replace the current PIN."""

    current = _prompt_pin("Current PIN")
    new = _prompt_pin("New PIN")
    confirmation = _prompt_pin("Repeat new PIN")
    issues = collect_issues(
        validate_pin(new, length=gate.pin_length, field="new_pin"),
        validate_pin_confirmation(new, confirmation),
    )
    if issues:
        _fail(issues)
    if not gate.change_pin(current, new):
        raise click.ClickException("the current PIN is incorrect.")
    click.echo("PIN changed.")


@main.command("disable-pin")
@click.pass_obj
def disable_pin(gate: SecurityGate) -> None:
    """Remove the PIN after confirming it."""

    current = _prompt_pin("Current PIN")
    if not gate.disable_pin(current):
        raise click.ClickException("incorrect PIN.")
    click.echo("PIN disabled.")


@main.command()
@click.pass_obj
def verify(gate: SecurityGate) -> None:
    """Check a PIN; exits with status 1 when it does not match."""

    if not gate.is_pin_configured:
        click.echo("No PIN is configured.")
        return
    if not gate.unlock_app(_prompt_pin("PIN")):
        raise click.ClickException("Incorrect PIN.")
    click.echo("PIN accepted.")


@main.command("reset-pin")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def reset_pin(gate: SecurityGate, yes: bool) -> None:
    """Forget the PIN without verifying it."""

    if not yes:
        click.confirm("Remove the PIN without verification?", abort=True)
    gate.reset_pin()
    click.echo("PIN removed.")


@main.command("emergency-reset")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def emergency_reset(gate: SecurityGate, yes: bool) -> None:
    """Remove the PIN and restore default settings."""

    if not yes:
        click.confirm("Remove the PIN and reset all lock settings?", abort=True)
    gate.emergency_reset()
    click.echo("Lock settings restored to defaults.")


@main.command()
@click.option(
    "--auto-lock",
    type=click.Choice(sorted(_DELAY_CHOICES, key=lambda c: (c == "off", c.zfill(3)))),
    help="Minutes of inactivity before locking, or 'off'.",
)
@click.option("--require-pin-on-resume/--no-require-pin-on-resume", default=None)
@click.option("--hide-content/--show-content", default=None, help="Hide the diary in the task switcher.")
@click.pass_obj
def configure(
    gate: SecurityGate,
    auto_lock: str | None,
    require_pin_on_resume: bool | None,
    hide_content: bool | None,
) -> None:
    """Change lock settings."""

    changes = {}
    if auto_lock is not None:
        changes["auto_lock_delay_ms"] = _DELAY_CHOICES[auto_lock]
    if require_pin_on_resume is not None:
        changes["require_pin_on_resume"] = require_pin_on_resume
    if hide_content is not None:
        changes["hide_content_in_multitask"] = hide_content
    if not changes:
        click.echo("Nothing to change.")
        return
    gate.update_config(**changes)
    click.echo("Settings saved.")


@main.command()
@click.option("-n", "--limit", type=click.IntRange(min=1), default=20, show_default=True)
def history(limit: int) -> None:
    """Show the most recent audit records."""

    for path, payload in iter_entries(limit):
        mark = "ok" if verify_log(path) else "INVALID"
        click.echo(f"{payload['timestamp']}  {payload['event']:<28} {mark}")


if __name__ == "__main__":
    main()
