"""Execution of the keytool binary.

This module builds keytool argument vectors, runs keytool as a child
process and turns a non-zero exit status into an InvocationFailure.
"""

import logging
import os
import subprocess
import tempfile
from collections.abc import Iterable, Sequence
from contextlib import ExitStack
from typing import IO, Any

from keystore_cli.defaults import DEFAULT_KEYTOOL
from keystore_cli.errors import InvocationFailure
from keystore_cli.models import CommandResult, StoreReference

logger = logging.getLogger(__name__)

# Options whose value is a secret and must never reach the log
SECRET_OPTIONS = frozenset(
    {
        "-storepass",
        "-keypass",
        "-srcstorepass",
        "-srckeypass",
        "-deststorepass",
        "-destkeypass",
    }
)
REDACTED = "****"


def flatten_args(args: Iterable[Any]) -> list[str]:
    """Flatten nested argument groups into a single argv list.

    Lists and tuples are expanded in place, paths and other values are
    converted with ``str``. ``None`` values are dropped.
    """
    flat: list[str] = []
    for arg in args:
        if arg is None:
            continue
        if isinstance(arg, (list, tuple)):
            flat.extend(flatten_args(arg))
        elif isinstance(arg, os.PathLike):
            flat.append(os.fspath(arg))
        else:
            flat.append(str(arg))
    return flat


def redact(argv: Sequence[str]) -> list[str]:
    """Return a copy of argv with password values masked."""
    redacted = list(argv)
    for i, arg in enumerate(redacted[:-1]):
        if arg in SECRET_OPTIONS:
            redacted[i + 1] = REDACTED
    return redacted


def store_args(reference: StoreReference, prefix: str = "") -> list[str]:
    """Build the keystore options for a keytool command.

    Args:
    ----
        reference: The store to pass
        prefix: Option prefix, "src" or "dest" for -importkeystore

    Returns:
    -------
        ``-{prefix}keystore <path> -{prefix}storepass <password>
        -{prefix}storetype <type>``; the storepass pair is left out when
        the reference has no password

    """
    args = [f"-{prefix}keystore", str(reference.path)]
    if reference.password is not None:
        args += [f"-{prefix}storepass", reference.password.get_secret_value()]
    args += [f"-{prefix}storetype", str(reference.store_type)]
    return args


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _failure_message(stdout: str, stderr: str) -> str:
    return "\n".join(part for part in (stdout.strip(), stderr.strip()) if part)


class KeytoolRunner:
    """Runs keytool synchronously, one invocation at a time."""

    def __init__(self, executable: str | Sequence[str] = DEFAULT_KEYTOOL, timeout: float | None = None) -> None:
        """Initialize the runner.

        Args:
        ----
            executable: keytool binary, or a command prefix such as
                an interpreter and a script
            timeout: Seconds to wait before killing keytool, None to wait forever

        """
        self.executable = [executable] if isinstance(executable, str) else list(executable)
        self.timeout = timeout

    def run(self, *args: Any, stdin: bytes | None = None, sink: IO[str] | None = None) -> CommandResult:
        """Run keytool with the given arguments.

        Args:
        ----
            *args: keytool arguments; nested lists are flattened
            stdin: Bytes to pipe to keytool; without them keytool reads
                from the null device
            sink: Text stream receiving stdout; without one stdout is
                returned in the result

        Returns:
        -------
            CommandResult of a successful invocation

        Raises:
        ------
            InvocationFailure: keytool exited non-zero, timed out or could not
                be started. The message holds stdout followed by stderr.

        """
        argv = flatten_args([self.executable, args])
        logger.info(f"Running: {' '.join(redact(argv))}")

        with ExitStack() as stack:
            stderr_file = stack.enter_context(tempfile.TemporaryFile(prefix="keystore-cli-", suffix=".err"))
            if stdin is not None:
                stdin_file: IO[bytes] | int = stack.enter_context(
                    tempfile.TemporaryFile(prefix="keystore-cli-", suffix=".in")
                )
                stdin_file.write(stdin)
                stdin_file.flush()
                stdin_file.seek(0)
            else:
                stdin_file = subprocess.DEVNULL

            try:
                completed = subprocess.run(
                    argv,
                    stdin=stdin_file,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                    timeout=self.timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as e:
                message = f"{argv[0]} timed out after {self.timeout} seconds"
                logger.error(message)
                raise InvocationFailure(message) from e
            except OSError as e:
                message = f"Cannot run {argv[0]}: {e!s}"
                logger.error(message)
                raise InvocationFailure(message) from e

            stderr_file.seek(0)
            stderr = _decode(stderr_file.read())

        stdout = _decode(completed.stdout)
        if sink is not None:
            sink.write(stdout)

        if completed.returncode != 0:
            message = _failure_message(stdout, stderr) or f"{argv[0]} exited with status {completed.returncode}"
            logger.error(f"keytool failed (exit code {completed.returncode}): {message}")
            raise InvocationFailure(message, exit_code=completed.returncode, stdout=stdout, stderr=stderr)

        return CommandResult(exit_code=completed.returncode, stdout=None if sink is not None else stdout, stderr=stderr)
