"""keytool operations.

One function per keytool command. Every function takes the session of the
store it works on, runs keytool synchronously and raises a KeystoreError
subclass on failure. Nothing is cached: callers re-list the store after a
mutation to see its effect.
"""

import logging
from pathlib import Path
from typing import IO

from keystore_cli.errors import AuthenticationFailure, InvocationFailure
from keystore_cli.models import Entry
from keystore_cli.parser import parse_list
from keystore_cli.runner import KeytoolRunner
from keystore_cli.session import KeystoreSession
from keystore_cli.types import KeyAlgorithm

logger = logging.getLogger(__name__)

# Diagnostics keytool prints when the store password is wrong
PASSWORD_ERRORS = ("password was incorrect", "keystore was tampered with")


def is_password_error(output: str) -> bool:
    """Return True if keytool output reports a wrong store password."""
    lowered = output.lower()
    return any(marker in lowered for marker in PASSWORD_ERRORS)


def list_raw(
    session: KeystoreSession,
    verbose: bool = False,
    rfc: bool = False,
    alias: str | None = None,
    sink: IO[str] | None = None,
) -> str | None:
    """Run ``-list`` and return its text (or write it to sink)."""
    args: list[str | list[str]] = ["-list"]
    if verbose:
        args.append("-v")
    elif rfc:
        args.append("-rfc")
    if alias:
        args.append(["-alias", alias])
    return session.run(args, session.store_args(), sink=sink).stdout


def list_entries(session: KeystoreSession) -> list[Entry]:
    """List the store and parse the result into entries."""
    return parse_list(list_raw(session) or "")


def verify_password(session: KeystoreSession) -> None:
    """Check the session password with a list command.

    Raises
    ------
        AuthenticationFailure: keytool rejected the password
        InvocationFailure: keytool failed for any other reason, or never ran

    """
    try:
        list_raw(session)
    except InvocationFailure as e:
        if e.exit_code is None or not is_password_error(f"{e.stdout}\n{e.stderr}"):
            raise
        raise AuthenticationFailure(str(e), exit_code=e.exit_code, stdout=e.stdout, stderr=e.stderr) from e


def delete_entry(session: KeystoreSession, alias: str) -> None:
    session.run("-delete", ["-alias", alias], session.store_args())
    logger.info(f"Deleted {alias} from {session.path}")


def import_certificate(
    session: KeystoreSession, alias: str, file: Path | str | None = None, data: bytes | None = None
) -> None:
    """Import a trusted certificate from a file or from raw (PEM or DER) bytes."""
    if file is None and data is None:
        raise ValueError("Either file or data is required")
    file_args = ["-file", str(file)] if file is not None else []
    session.run("-importcert", ["-alias", alias], file_args, "-noprompt", session.store_args(), stdin=data)
    logger.info(f"Imported certificate {alias} into {session.path}")


def change_alias(session: KeystoreSession, alias: str, new_alias: str) -> None:
    session.run("-changealias", ["-alias", alias], ["-destalias", new_alias], session.store_args())
    logger.info(f"Renamed {alias} to {new_alias} in {session.path}")


def certificate_request(session: KeystoreSession, alias: str, csr_path: Path | str) -> None:
    """Write a certificate signing request for the key pair under alias."""
    session.run("-certreq", ["-alias", alias], ["-file", csr_path], session.store_args())
    logger.info(f"Wrote CSR for {alias} to {csr_path}")


def generate_certificate(
    session: KeystoreSession, alias: str, csr_path: Path | str, cert_path: Path | str
) -> None:
    """Sign the CSR in csr_path with the key under alias, writing a PEM certificate."""
    session.run(
        "-gencert",
        ["-alias", alias],
        ["-infile", csr_path],
        ["-outfile", cert_path],
        "-rfc",
        session.store_args(),
    )
    logger.info(f"Issued certificate {cert_path} from {csr_path} with {alias}")


def export_certificate(session: KeystoreSession, alias: str) -> str | None:
    """Export the certificate under alias as PEM."""
    return session.run("-exportcert", ["-alias", alias], "-rfc", session.store_args()).stdout


def generate_keypair(
    session: KeystoreSession,
    alias: str,
    dname: str,
    key_algorithm: KeyAlgorithm | str,
    key_size: int,
    validity_days: int,
) -> None:
    """Generate a key pair with a self-signed certificate.

    The key password is set to the store password; keytool would prompt for
    it otherwise.
    """
    password = session.password
    session.run(
        "-genkeypair",
        ["-keyalg", str(key_algorithm)],
        ["-keysize", key_size],
        ["-validity", validity_days],
        ["-alias", alias],
        ["-dname", dname],
        session.store_args(),
        ["-keypass", password],
    )
    logger.info(f"Generated {key_algorithm} key pair {alias} in {session.path}")


def import_keystore(source: KeystoreSession, destination: KeystoreSession) -> None:
    """Copy every entry of source into destination."""
    destination.run(
        "-importkeystore",
        source.store_args(prefix="src"),
        destination.store_args(prefix="dest"),
        "-noprompt",
    )
    logger.info(f"Imported {source.path} into {destination.path}")


def print_certificate(runner: KeytoolRunner, file: Path | str | None = None, data: bytes | None = None) -> str:
    """Describe a certificate file (or piped bytes) with ``-printcert``; no store is involved."""
    if file is None and data is None:
        raise ValueError("Either file or data is required")
    file_args = ["-file", str(file)] if file is not None else []
    return runner.run("-printcert", file_args, stdin=data).stdout or ""
