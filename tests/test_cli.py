import json

import pytest
from click.testing import CliRunner

from applock.cli import main


@pytest.fixture
def home(tmp_path):
    return tmp_path / "lock-home"


@pytest.fixture
def run(home):
    runner = CliRunner()

    def _run(*args, input=None):
        return runner.invoke(main, ["--home", str(home), *args], input=input)

    return _run


def test_status_without_pin(run):
    result = run("status")

    assert result.exit_code == 0
    assert "PIN configured:        no" in result.output
    assert "Time until lock:       not configured" in result.output
    assert "10 minutes" in result.output


def test_set_pin_and_status(run, home):
    result = run("set-pin", input="1234\n1234\n")

    assert result.exit_code == 0, result.output
    assert "PIN set." in result.output
    assert json.loads((home / "storage.json").read_text())["app_pin"] == "1234"

    status = run("status")
    assert "PIN configured:        yes" in status.output
    assert "****" in status.output
    assert "1234" not in status.output


def test_set_pin_mismatch(run, home):
    result = run("set-pin", input="1234\n4321\n")

    assert result.exit_code == 1
    assert "do not match" in result.output
    assert not (home / "storage.json").exists()


def test_set_pin_wrong_length(run):
    result = run("set-pin", input="12\n12\n")

    assert result.exit_code == 1
    assert "exactly 4 digits" in result.output


def test_set_pin_refuses_existing(run):
    run("set-pin", input="1234\n1234\n")

    result = run("set-pin", input="5678\n5678\n")

    assert result.exit_code == 1
    assert "already set" in result.output


def test_verify(run):
    assert "No PIN" in run("verify").output
    run("set-pin", input="1234\n1234\n")

    assert run("verify", input="1234\n").exit_code == 0
    wrong = run("verify", input="0000\n")
    assert wrong.exit_code == 1
    assert "Incorrect PIN." in wrong.output


def test_change_pin(run):
    run("set-pin", input="1234\n1234\n")

    assert run("change-pin", input="0000\n5678\n5678\n").exit_code == 1
    result = run("change-pin", input="1234\n5678\n5678\n")
    assert result.exit_code == 0, result.output

    assert run("verify", input="5678\n").exit_code == 0
    assert run("verify", input="1234\n").exit_code == 1


def test_disable_pin(run):
    run("set-pin", input="1234\n1234\n")

    assert run("disable-pin", input="9999\n").exit_code == 1
    assert run("disable-pin", input="1234\n").exit_code == 0
    assert "PIN configured:        no" in run("status").output


def test_reset_pin_requires_confirmation(run):
    run("set-pin", input="1234\n1234\n")

    aborted = run("reset-pin", input="n\n")
    assert aborted.exit_code == 1
    assert "PIN configured:        yes" in run("status").output

    assert run("reset-pin", "--yes").exit_code == 0
    assert "PIN configured:        no" in run("status").output


def test_configure_and_emergency_reset(run, home):
    run("set-pin", input="1234\n1234\n")

    result = run("configure", "--auto-lock", "off", "--no-require-pin-on-resume", "--show-content")
    assert result.exit_code == 0, result.output
    stored = json.loads(json.loads((home / "storage.json").read_text())["security_config"])
    assert stored == {
        "autoLockDelayMs": 0,
        "requirePinOnResume": False,
        "hideContentInMultitask": False,
        "pinLength": 4,
    }
    status = run("status").output
    assert "disabled" in status
    assert "Require PIN on resume: no" in status

    assert run("emergency-reset", input="y\n").exit_code == 0
    status = run("status").output
    assert "PIN configured:        no" in status
    assert "10 minutes" in status
    assert "Require PIN on resume: yes" in status


def test_configure_without_options(run):
    result = run("configure")

    assert result.exit_code == 0
    assert "Nothing to change." in result.output


def test_configure_rejects_unknown_delay(run):
    result = run("configure", "--auto-lock", "7")

    assert result.exit_code == 2


def test_history_lists_verified_events(run):
    run("set-pin", input="1234\n1234\n")
    run("verify", input="0000\n")

    result = run("history")

    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert "applock.unlock_failed" in lines[0]
    assert "applock.pin_set" in lines[-1]
    assert all(line.endswith("ok") for line in lines)


def test_failures_report_errors_through_click(run):
    run("set-pin", input="1234\n1234\n")

    wrong = run("verify", input="0000\n")
    assert wrong.exit_code == 1
    assert "Error: Incorrect PIN." in wrong.output

    refused = run("set-pin", input="5678\n5678\n")
    assert refused.exit_code == 1
    assert "Error: a PIN is already set" in refused.output

    changed = run("change-pin", input="0000\n5678\n5678\n")
    assert changed.exit_code == 1
    assert "Error: the current PIN is incorrect." in changed.output


def test_history_does_not_create_a_signing_key(run, tmp_path):
    run("set-pin", input="1234\n1234\n")
    key_path = tmp_path / "audit" / "signing_key.pem"
    key_path.unlink()

    result = run("history")

    assert result.exit_code == 0
    assert result.output.strip().endswith("INVALID")
    assert not key_path.exists()
