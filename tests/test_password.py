"""Password source and prompt tests."""

import click
import pytest
from click.testing import CliRunner

from keystore_cli.errors import PasswordMismatch
from keystore_cli.password import ConsolePrompter, get_password, read_password_from_file, verify_password
from keystore_cli.result import Failure, Success


def test_password_from_file(tmp_path):
    password_file = tmp_path / "pass.txt"
    password_file.write_text("  from-file  \n")
    assert get_password(password_file=password_file).unwrap() == "from-file"


def test_password_file_wins_over_environment(tmp_path, monkeypatch):
    password_file = tmp_path / "pass.txt"
    password_file.write_text("from-file")
    monkeypatch.setenv("TEST_STOREPASS", "from-env")
    assert get_password(password_file=password_file, env_var="TEST_STOREPASS").unwrap() == "from-file"


def test_password_from_environment(monkeypatch):
    monkeypatch.setenv("TEST_STOREPASS", "from-env")
    assert get_password(env_var="TEST_STOREPASS").unwrap() == "from-env"


def test_no_password_source(monkeypatch):
    monkeypatch.delenv("TEST_STOREPASS", raising=False)
    result = get_password(env_var="TEST_STOREPASS")
    assert isinstance(result, Success)
    assert result.unwrap() is None
    assert get_password().unwrap() is None


def test_empty_environment_variable_is_unset(monkeypatch):
    monkeypatch.setenv("TEST_STOREPASS", "")
    result = get_password(env_var="TEST_STOREPASS")
    assert isinstance(result, Success)
    assert result.unwrap() is None


def test_missing_password_file(tmp_path):
    result = read_password_from_file(tmp_path / "missing.txt")
    assert isinstance(result, Failure)
    assert "does not exist" in result.error


def test_verify_password():
    assert isinstance(verify_password("123456"), Success)
    result = verify_password("12345")
    assert isinstance(result, Failure)
    assert result.error == "Password must be at least 6 characters long"
    assert isinstance(verify_password("abc", min_length=3), Success)


@click.command()
@click.option("--confirm", is_flag=True)
def ask_command(confirm):
    click.echo(f"got {ConsolePrompter().ask_password('Password: ', confirm=confirm)}")


@click.command()
def ask_text_command():
    click.echo(f"got [{ConsolePrompter().ask('Name', default='IT')}]")


def test_prompter_password():
    result = CliRunner().invoke(ask_command, input="secret\n")
    assert result.exit_code == 0
    assert "got secret" in result.output


def test_prompter_password_confirmed():
    result = CliRunner().invoke(ask_command, ["--confirm"], input="secret\nsecret\n")
    assert result.exit_code == 0
    assert "Confirm password" in result.output
    assert "got secret" in result.output


def test_prompter_password_mismatch():
    result = CliRunner().invoke(ask_command, ["--confirm"], input="secret\nother\n")
    assert isinstance(result.exception, PasswordMismatch)


def test_prompter_text_default():
    result = CliRunner().invoke(ask_text_command, input="\n")
    assert "got [IT]" in result.output


@pytest.mark.parametrize(("answer", "expected"), [("Sales\n", "Sales"), ("Human Resources\n", "Human Resources")])
def test_prompter_text_answer(answer, expected):
    result = CliRunner().invoke(ask_text_command, input=answer)
    assert f"got [{expected}]" in result.output
