"""CLI: run against the sandbox backend with fast timings."""

import json

import pytest
from click.testing import CliRunner

from kyc_deposit.cli import main as cli_main


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr(cli_main, "CONFIG_FILE", path)
    return path


def invoke(*args):
    return CliRunner().invoke(cli_main.main, list(args))


def test_first_run_declines_then_second_succeeds(config_file):
    first = invoke("run", "--fast")
    assert first.exit_code == 0, first.output
    assert "PIX generated" in first.output
    assert "R$ 4,90" in first.output
    assert "Verification failed" in first.output
    assert json.loads(config_file.read_text())["kyc"]["deposit_attempts"] == 1

    second = invoke("run", "--fast")
    assert second.exit_code == 0, second.output
    assert "Verification complete" in second.output
    kyc = json.loads(config_file.read_text())["kyc"]
    assert kyc["deposit_verified"] is True
    assert kyc["deposit_attempts"] == 2

    third = invoke("run", "--fast")
    assert "already verified" in third.output


def test_always_succeed_flag(config_file):
    result = invoke("run", "--fast", "--always-succeed")
    assert result.exit_code == 0, result.output
    assert "Verification complete" in result.output


def test_status_and_reset(config_file):
    config_file.write_text(json.dumps({"kyc": {"identity_verified": True, "deposit_attempts": 1}}))

    status = invoke("status")
    assert status.exit_code == 0
    assert "50%" in status.output

    reset = invoke("reset")
    assert reset.exit_code == 0
    assert "kyc" not in json.loads(config_file.read_text())


def test_invalid_deposit_config(config_file):
    config_file.write_text(json.dumps({"deposit": {"amount": -1}}))
    result = invoke("run", "--fast")
    assert result.exit_code == 1
    assert "Invalid deposit config" in result.output


def test_charge_requires_backend(config_file):
    result = invoke("charge", "create")
    assert result.exit_code == 1
    assert "No charge backend configured" in result.output


def test_zero_attempt_is_rejected(config_file):
    result = invoke("run", "--fast", "--attempt", "0")
    assert result.exit_code == 1
    assert "Invalid attempt" in result.output
    assert not config_file.exists()
