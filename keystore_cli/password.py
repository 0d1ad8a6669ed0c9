"""Password handling for keystore-cli."""

import os
from pathlib import Path

import click

from keystore_cli.errors import PasswordMismatch
from keystore_cli.result import Failure, Result, Success

# keytool refuses store passwords shorter than this
MIN_PASSWORD_LENGTH = 6


def get_password(password_file: str | Path | None = None, env_var: str | None = None) -> Result[str | None, str]:
    """Get a store password from non-interactive sources.

    The resolution order is:
    1. Password file if specified
    2. Environment variable if specified and not empty

    Args:
    ----
        password_file: Optional path to a file containing the password
        env_var: Optional environment variable name containing the password

    Returns:
    -------
        Result with the password, None if no source provided one, or error message

    """
    if password_file:
        return read_password_from_file(Path(password_file))

    if env_var and os.environ.get(env_var):
        return Success(os.environ[env_var])

    return Success(None)


def read_password_from_file(password_file: Path) -> Result[str, str]:
    """Read password from a file, ignoring surrounding whitespace."""
    try:
        if not password_file.exists():
            return Failure(f"Password file does not exist: {password_file}")

        with open(password_file, encoding="utf-8") as f:
            return Success(f.read().strip())
    except Exception as e:
        return Failure(f"Error reading password file: {e!s}")


def verify_password(password: str, min_length: int = MIN_PASSWORD_LENGTH) -> Result[str, str]:
    """Check a new store password against keytool's length requirement."""
    if len(password) < min_length:
        return Failure(f"Password must be at least {min_length} characters long")
    return Success(password)


class ConsolePrompter:
    """Prompter that asks on the terminal through click."""

    def ask_password(self, prompt: str, confirm: bool = False) -> str:
        password = click.prompt(prompt, hide_input=True, prompt_suffix="")
        if confirm:
            confirmation = click.prompt("Confirm password: ", hide_input=True, prompt_suffix="")
            if password != confirmation:
                raise PasswordMismatch("Passwords do not match")
        return password

    def ask(self, prompt: str, default: str | None = None) -> str:
        return click.prompt(prompt, default=default or "", show_default=bool(default))
