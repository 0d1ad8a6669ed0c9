"""Keystore commands for the CLI.

This module provides the functions behind the CLI commands. They call the
keytool layer, print to the console kept in the click context and report
errors as Failure values instead of exceptions.
"""

import json
from pathlib import Path
from typing import Any

import click
from click import Context
from rich.markup import escape
from rich.table import Table

from keystore_cli import keytool
from keystore_cli.certinfo import describe_certificate
from keystore_cli.errors import KeystoreError
from keystore_cli.parser import parse_details
from keystore_cli.result import Failure, Result, Success
from keystore_cli.runner import KeytoolRunner
from keystore_cli.session import KeystoreSession
from keystore_cli.types import KeyAlgorithm
from keystore_cli.utils import format_expiry_days


def _report_entries(ctx: Context, session: KeystoreSession) -> Result[None, str]:
    """Re-list the store after a mutation and report the entry count."""
    try:
        entries = keytool.list_entries(session)
    except KeystoreError as e:
        return Failure(f"Failed to list {session.path}: {e!s}")
    noun = "entry" if len(entries) == 1 else "entries"
    ctx.obj["console"].print(f"   Keystore [bold]{escape(str(session.path))}[/bold] contains {len(entries)} {noun}")
    return Success(None)


def get_entries_list(session: KeystoreSession) -> Result[list[dict[str, Any]], str]:
    """Get the entries of the store as a list of dictionaries."""
    try:
        return Success([entry.model_dump() for entry in keytool.list_entries(session)])
    except KeystoreError as e:
        return Failure(str(e))


def list_entries(ctx: Context, session: KeystoreSession, json_output: bool = False) -> Result[None, str]:
    """Show the entries of the store as a table (or JSON)."""
    console = ctx.obj["console"]
    result = get_entries_list(session)
    if isinstance(result, Failure):
        return result
    entries = result.unwrap()

    if json_output:
        click.echo(json.dumps(entries, indent=2))
        return Success(None)

    if not entries:
        console.print(f"Keystore {escape(str(session.path))} is empty.")
        return Success(None)

    table = Table(title=f"{session.path.name} ({session.store_type})", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Alias")
    table.add_column("Type")
    table.add_column("Fingerprint (SHA-256)", no_wrap=True)
    for entry in entries:
        table.add_row(str(entry["index"]), escape(entry["alias"]), entry["entry_type"], entry["fingerprint"])
    console.print(table)
    return Success(None)


def list_details(
    ctx: Context, session: KeystoreSession, rfc: bool = False, alias: str | None = None, json_output: bool = False
) -> Result[None, str]:
    """Print the verbose (or RFC) listing of the store or of a single alias."""
    try:
        if json_output:
            text = keytool.list_raw(session, verbose=True, alias=alias) or ""
            click.echo(json.dumps(parse_details(text), indent=2))
        else:
            text = keytool.list_raw(session, verbose=not rfc, rfc=rfc, alias=alias) or ""
            click.echo(text, nl=False)
    except KeystoreError as e:
        return Failure(str(e))
    return Success(None)


def show_certificate_info(
    ctx: Context, session: KeystoreSession, alias: str, json_output: bool = False
) -> Result[None, str]:
    """Export the certificate under alias and show what it contains."""
    console = ctx.obj["console"]
    try:
        pem = keytool.export_certificate(session, alias) or ""
    except KeystoreError as e:
        return Failure(f"Failed to export {alias}: {e!s}")

    info_result = describe_certificate(pem.encode())
    if isinstance(info_result, Failure):
        return info_result
    info = info_result.unwrap()

    if json_output:
        click.echo(json.dumps({"alias": alias, **info}, indent=2))
        return Success(None)

    console.print(f"[bold]Certificate {escape(alias)}[/bold]")
    console.print(f"Subject: {escape(info['subject'])}")
    console.print(f"Issuer: {escape(info['issuer'])}{' (self-signed)' if info['self_signed'] else ''}")
    console.print(f"Serial: {info['serial']}")
    console.print(f"Valid From: {info['not_before']}")
    console.print(f"Valid Until: {info['not_after']}")
    console.print(f"Days Remaining: {format_expiry_days(info['days_remaining'])}")
    console.print(f"Fingerprint (SHA-256): {info['fingerprint']}")
    console.print(f"Public Key Type: {info['public_key']}")
    return Success(None)


def delete_entries(ctx: Context, session: KeystoreSession, aliases: list[str]) -> Result[None, str]:
    """Delete the given aliases in order, stopping at the first failure."""
    console = ctx.obj["console"]
    for alias in aliases:
        try:
            keytool.delete_entry(session, alias)
        except KeystoreError as e:
            _report_entries(ctx, session)
            return Failure(f"Failed to delete {alias}: {e!s}")
        console.print(f"✅ Deleted [bold]{escape(alias)}[/bold]")
    return _report_entries(ctx, session)


def import_certificate(
    ctx: Context, session: KeystoreSession, alias: str, file: Path | None = None, data: bytes | None = None
) -> Result[None, str]:
    """Import a certificate from a file or from piped bytes."""
    try:
        keytool.import_certificate(session, alias, file=file, data=data)
    except KeystoreError as e:
        return Failure(f"Failed to import {alias}: {e!s}")
    ctx.obj["console"].print(f"✅ Certificate imported as [bold]{escape(alias)}[/bold]")
    return _report_entries(ctx, session)


def rename_entry(ctx: Context, session: KeystoreSession, alias: str, new_alias: str) -> Result[None, str]:
    try:
        keytool.change_alias(session, alias, new_alias)
    except KeystoreError as e:
        return Failure(f"Failed to rename {alias}: {e!s}")
    ctx.obj["console"].print(f"✅ Renamed [bold]{escape(alias)}[/bold] to [bold]{escape(new_alias)}[/bold]")
    return _report_entries(ctx, session)


def request_certificate(ctx: Context, session: KeystoreSession, alias: str, out_path: Path) -> Result[None, str]:
    """Write a CSR for the key pair under alias."""
    try:
        keytool.certificate_request(session, alias, out_path)
    except KeystoreError as e:
        return Failure(f"Failed to create CSR for {alias}: {e!s}")
    ctx.obj["console"].print(f"✅ Certificate request written to [bold]{escape(str(out_path))}[/bold]")
    return Success(None)


def issue_certificate(
    ctx: Context, session: KeystoreSession, alias: str, csr_path: Path, out_path: Path
) -> Result[None, str]:
    """Sign a CSR with the key pair under alias."""
    try:
        keytool.generate_certificate(session, alias, csr_path, out_path)
    except KeystoreError as e:
        return Failure(f"Failed to sign {csr_path}: {e!s}")
    ctx.obj["console"].print(f"✅ Certificate written to [bold]{escape(str(out_path))}[/bold]")
    return Success(None)


def export_certificate(
    ctx: Context, session: KeystoreSession, alias: str, out_path: Path | None = None
) -> Result[None, str]:
    """Export the certificate under alias as PEM, to a file or to stdout."""
    try:
        pem = keytool.export_certificate(session, alias) or ""
    except KeystoreError as e:
        return Failure(f"Failed to export {alias}: {e!s}")

    if out_path is None:
        click.echo(pem, nl=False)
        return Success(None)

    # Only a successful export touches the target file
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(pem, encoding="utf-8")
    except OSError as e:
        return Failure(f"Failed to write {out_path}: {e!s}")
    ctx.obj["console"].print(f"✅ Certificate exported to [bold]{escape(str(out_path))}[/bold]")
    return Success(None)


def create_keypair(
    ctx: Context,
    session: KeystoreSession,
    alias: str,
    dname: str,
    key_algorithm: KeyAlgorithm,
    key_size: int,
    validity_days: int,
) -> Result[None, str]:
    """Generate a key pair with a self-signed certificate."""
    if not dname:
        return Failure("A distinguished name needs at least one component")
    ctx.obj["console"].print(f"Generating {key_algorithm} {key_size} key pair [bold]{escape(alias)}[/bold]...")
    try:
        keytool.generate_keypair(session, alias, dname, key_algorithm, key_size, validity_days)
    except KeystoreError as e:
        return Failure(f"Failed to generate key pair {alias}: {e!s}")
    ctx.obj["console"].print(f"✅ Key pair [bold]{escape(alias)}[/bold] generated for {escape(dname)}")
    return _report_entries(ctx, session)


def merge_keystore(ctx: Context, source: KeystoreSession, destination: KeystoreSession) -> Result[None, str]:
    """Import all entries of source into destination."""
    try:
        keytool.import_keystore(source, destination)
    except KeystoreError as e:
        return Failure(f"Failed to import {source.path}: {e!s}")
    ctx.obj["console"].print(
        f"✅ Imported [bold]{escape(str(source.path))}[/bold] into [bold]{escape(str(destination.path))}[/bold]"
    )
    return _report_entries(ctx, destination)


def print_certificate(
    ctx: Context, runner: KeytoolRunner, file: Path | None = None, data: bytes | None = None
) -> Result[None, str]:
    try:
        click.echo(keytool.print_certificate(runner, file=file, data=data), nl=False)
    except KeystoreError as e:
        return Failure(str(e))
    return Success(None)
