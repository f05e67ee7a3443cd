"""CLI tests — click's CliRunner, no server started."""

import bcrypt
from click.testing import CliRunner

from roomchat.cli.main import main


def test_hash_password():
    runner = CliRunner()

    result = runner.invoke(main, ["hash-password", "--password", "secret", "--rounds", "4"])

    assert result.exit_code == 0
    password_hash = result.output.strip()
    assert bcrypt.checkpw(b"secret", password_hash.encode())


def test_hash_password_prompts():
    runner = CliRunner()

    result = runner.invoke(
        main, ["hash-password", "--rounds", "4"], input="secret\nsecret\n"
    )

    assert result.exit_code == 0
    password_hash = result.output.strip().splitlines()[-1]
    assert bcrypt.checkpw(b"secret", password_hash.encode())


def test_hash_password_too_long():
    runner = CliRunner()

    result = runner.invoke(main, ["hash-password", "--password", "p" * 129])

    assert result.exit_code == 1


def test_channels_lists_access():
    runner = CliRunner()

    result = runner.invoke(main, ["channels"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0].split() == ["CHANNEL", "ACCESS"]
    assert lines[2].split() == ["room-1", "public"]
    assert lines[3].split() == ["room-2", "private"]
