#!/usr/bin/env python3
"""Main CLI entry point for keystore-cli.

This module provides a Click CLI interface for keystore-cli. It connects
user commands to the operations module, which drives keytool.
"""

import logging
import shlex
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console

from keystore_cli import __version__
from keystore_cli.config import create as create_config
from keystore_cli.config import init as init_config
from keystore_cli.config import validate as validate_config
from keystore_cli.defaults import CONFIG_ENV_VAR, DEFAULT_KEY_SIZES
from keystore_cli.dname import build_dname
from keystore_cli.errors import AuthenticationFailure, KeystoreError
from keystore_cli.keytool import verify_password as check_store_password
from keystore_cli.models import AppConfig, LoggingConfig
from keystore_cli.operations import (
    create_keypair,
    delete_entries,
    export_certificate,
    import_certificate,
    issue_certificate,
    list_details,
    list_entries,
    merge_keystore,
    print_certificate,
    rename_entry,
    request_certificate,
    show_certificate_info,
)
from keystore_cli.password import ConsolePrompter, get_password, verify_password
from keystore_cli.paths import get_log_path, resolve_config_path
from keystore_cli.result import Failure, Result
from keystore_cli.runner import KeytoolRunner
from keystore_cli.session import KeystoreSession
from keystore_cli.types import KeyAlgorithm, StoreType

STORE_TYPES = click.Choice([t.value for t in StoreType], case_sensitive=False)
KEY_ALGORITHMS = click.Choice([a.value for a in KeyAlgorithm], case_sensitive=False)


def _setup_logging(config_path: Path, logging_config: LoggingConfig) -> None:
    """Initializes logging for the application."""
    log_path = get_log_path(config_path, logging_config.file)
    if log_path is None:
        return
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=log_path,
        level=logging_config.level.upper(),
        format="[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _fail(ctx: click.Context, message: str) -> NoReturn:
    ctx.obj["console"].print(f"[bold red]Error:[/bold red] {message}")
    ctx.exit(1)


def _check(ctx: click.Context, result: Result[None, str]) -> None:
    if isinstance(result, Failure):
        _fail(ctx, result.error)


def _get_runner(ctx: click.Context) -> KeytoolRunner:
    config: AppConfig = ctx.obj["config"]
    return KeytoolRunner(shlex.split(config.keytool.executable), timeout=config.keytool.timeout)


def _unlock_interactively(ctx: click.Context, session: KeystoreSession) -> None:
    """Ask for the store password, re-asking up to the configured number of times."""
    config: AppConfig = ctx.obj["config"]
    console = ctx.obj["console"]
    prompter = ConsolePrompter()
    prompt = f"Password for {session.path.name}: "

    try:
        if not session.path.exists():
            password = prompter.ask_password(prompt, confirm=True)
            password_result = verify_password(password)
            if isinstance(password_result, Failure):
                _fail(ctx, password_result.error)
            session.set_password(password)
            return

        for attempt in range(1, config.password.retries + 1):
            session.set_password(prompter.ask_password(prompt))
            try:
                check_store_password(session)
                return
            except AuthenticationFailure as e:
                session.forget_password()
                console.print(f"[bold red]Error:[/bold red] {e!s}")
                if attempt < config.password.retries:
                    console.print("Please try again.")
    except KeystoreError as e:
        _fail(ctx, str(e))
    _fail(ctx, f"Could not open {session.path} after {config.password.retries} attempts")


def _open_session(
    ctx: click.Context,
    path: Path | None = None,
    store_type: str | None = None,
    password_file: Path | None = None,
    password_env: str | None = None,
) -> KeystoreSession:
    """Open a keystore session, resolving its password.

    Without explicit arguments the store given by the global options is
    opened, falling back to the configured password sources. Passwords from
    files or environment variables are used as they are; otherwise the user
    is asked.
    """
    config: AppConfig = ctx.obj["config"]
    if path is None:
        path = ctx.obj["keystore_path"]
        store_type = ctx.obj["store_type"]
        password_file = ctx.obj["storepass_file"]
        password_env = ctx.obj["storepass_env"]
        if password_file is None and password_env is None:
            password_file = Path(config.password.file) if config.password.file else None
            password_env = config.password.env_var
    if path is None:
        _fail(ctx, "No keystore given. Use --keystore or set KEYSTORE_PATH.")

    password_result = get_password(password_file, password_env)
    if isinstance(password_result, Failure):
        _fail(ctx, password_result.error)

    session = KeystoreSession(
        path,
        store_type=store_type,
        password=password_result.unwrap(),
        prompter=ConsolePrompter(),
        runner=_get_runner(ctx),
        default_type=config.store.default_type,
    )
    ctx.call_on_close(session.close)
    if not session.has_password:
        _unlock_interactively(ctx, session)
    return session


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    help="Path to the configuration file",
    envvar=CONFIG_ENV_VAR,
)
@click.option(
    "-k",
    "--keystore",
    "keystore_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    help="Keystore file to operate on",
    envvar="KEYSTORE_PATH",
)
@click.option("--storetype", "store_type", type=STORE_TYPES, help="Keystore type (inferred from the extension)")
@click.option(
    "--storepass-file",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    help="File containing the keystore password",
)
@click.option("--storepass-env", help="Environment variable containing the keystore password")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None = None,
    keystore_path: Path | None = None,
    store_type: str | None = None,
    storepass_file: Path | None = None,
    storepass_env: str | None = None,
) -> None:
    """keystore-cli - list and edit Java keystores with keytool."""
    ctx.ensure_object(dict)
    ctx.obj["console"] = Console()
    console = ctx.obj["console"]

    config_file = resolve_config_path(config_path)
    ctx.obj["config_path"] = config_file
    ctx.obj["keystore_path"] = keystore_path
    ctx.obj["store_type"] = store_type.upper() if store_type else None
    ctx.obj["storepass_file"] = storepass_file
    ctx.obj["storepass_env"] = storepass_env

    config_result = init_config(config_file)
    if isinstance(config_result, Failure):
        # Allow the config commands to repair a broken file
        if ctx.invoked_subcommand != "config":
            console.print(f"[bold red]Error:[/bold red] {config_result.error}")
            ctx.exit(1)
        ctx.obj["config"] = AppConfig()
    else:
        ctx.obj["config"] = config_result.unwrap()
        _setup_logging(config_file, ctx.obj["config"].logging)


# Configuration commands
@cli.group()
def config() -> None:
    """Manage the configuration file."""


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Write a configuration file with default values."""
    console = ctx.obj["console"]
    config_path = ctx.obj["config_path"]
    _check(ctx, create_config(config_path, force=force).map(lambda _config: None))
    console.print("✅ Configuration initialized successfully")
    console.print(f"   Config file: [bold]{config_path}[/bold]")


@config.command(name="validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate the configuration file."""
    if isinstance(validate_config(ctx.obj["config_path"]), Failure):
        ctx.exit(1)


# Listing
@cli.command(name="list")
@click.option("-v", "--verbose", is_flag=True, help="Show keytool's verbose listing")
@click.option("--rfc", is_flag=True, help="Show certificates in PEM form")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.pass_context
def list_command(ctx: click.Context, verbose: bool, rfc: bool, json_output: bool) -> None:
    """List the entries of the keystore."""
    if verbose and rfc:
        _fail(ctx, "Cannot specify both --verbose and --rfc")
    session = _open_session(ctx)
    if verbose or rfc:
        _check(ctx, list_details(ctx, session, rfc=rfc, json_output=json_output))
    else:
        _check(ctx, list_entries(ctx, session, json_output=json_output))


@cli.command(name="show")
@click.argument("alias")
@click.option("--rfc", is_flag=True, help="Show the certificate in PEM form")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.pass_context
def show(ctx: click.Context, alias: str, rfc: bool, json_output: bool) -> None:
    """Show keytool's detailed listing of one entry."""
    session = _open_session(ctx)
    _check(ctx, list_details(ctx, session, rfc=rfc, alias=alias, json_output=json_output))


@cli.command(name="info")
@click.argument("alias")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.pass_context
def info(ctx: click.Context, alias: str, json_output: bool) -> None:
    """Decode and summarize the certificate of an entry."""
    session = _open_session(ctx)
    _check(ctx, show_certificate_info(ctx, session, alias, json_output=json_output))


# Mutations
@cli.command(name="delete")
@click.argument("aliases", nargs=-1, required=True)
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, aliases: tuple[str, ...], yes: bool) -> None:
    """Delete one or more entries."""
    if not yes and not click.confirm(f"Delete {', '.join(aliases)}?", default=False):
        ctx.obj["console"].print("Nothing deleted.")
        return
    session = _open_session(ctx)
    _check(ctx, delete_entries(ctx, session, list(aliases)))


@cli.command(name="import-cert")
@click.argument("alias")
@click.option(
    "--file",
    "cert_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Certificate file (read from stdin if not provided)",
)
@click.pass_context
def import_cert(ctx: click.Context, alias: str, cert_path: Path | None) -> None:
    """Import a trusted certificate."""
    data = None
    if cert_path is None:
        data = click.get_binary_stream("stdin").read()
        if not data.strip():
            _fail(ctx, "No certificate given. Use --file or pipe one to stdin.")
    session = _open_session(ctx)
    _check(ctx, import_certificate(ctx, session, alias, file=cert_path, data=data))


@cli.command(name="rename")
@click.argument("alias")
@click.argument("new_alias")
@click.pass_context
def rename(ctx: click.Context, alias: str, new_alias: str) -> None:
    """Change the alias of an entry."""
    session = _open_session(ctx)
    _check(ctx, rename_entry(ctx, session, alias, new_alias))


@cli.command(name="certreq")
@click.argument("alias")
@click.option("--out", "out_path", required=True, type=click.Path(dir_okay=False, path_type=Path), help="CSR file")
@click.pass_context
def certreq(ctx: click.Context, alias: str, out_path: Path) -> None:
    """Create a certificate signing request for a key pair."""
    session = _open_session(ctx)
    _check(ctx, request_certificate(ctx, session, alias, out_path))


@cli.command(name="gencert")
@click.argument("alias")
@click.option(
    "--csr", "csr_path", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="CSR file"
)
@click.option(
    "--out", "out_path", required=True, type=click.Path(dir_okay=False, path_type=Path), help="Certificate file"
)
@click.pass_context
def gencert(ctx: click.Context, alias: str, csr_path: Path, out_path: Path) -> None:
    """Sign a certificate signing request with a key pair."""
    session = _open_session(ctx)
    _check(ctx, issue_certificate(ctx, session, alias, csr_path, out_path))


@cli.command(name="export")
@click.argument("alias")
@click.option(
    "--out", "out_path", type=click.Path(dir_okay=False, path_type=Path), help="Output file (stdout if not provided)"
)
@click.pass_context
def export(ctx: click.Context, alias: str, out_path: Path | None) -> None:
    """Export the certificate of an entry as PEM."""
    session = _open_session(ctx)
    _check(ctx, export_certificate(ctx, session, alias, out_path))


@cli.command(name="genkeypair")
@click.argument("alias")
@click.option("--keyalg", "key_algorithm", type=KEY_ALGORITHMS, help="Key algorithm")
@click.option("--keysize", "key_size", type=click.IntRange(min=1), help="Key size in bits")
@click.option("--validity", "validity_days", type=click.IntRange(min=1), help="Validity period in days")
@click.option("--dname", help="Full distinguished name, e.g. 'CN=host, O=Org'")
@click.option("--cn", help="Common name")
@click.option("--ou", help="Organizational unit")
@click.option("--o", "org", help="Organization")
@click.option("--l", "locality", help="Locality")
@click.option("--s", "state", help="State or province")
@click.option("--c", "country", help="Country code")
@click.pass_context
def genkeypair(
    ctx: click.Context,
    alias: str,
    key_algorithm: str | None,
    key_size: int | None,
    validity_days: int | None,
    dname: str | None,
    cn: str | None,
    ou: str | None,
    org: str | None,
    locality: str | None,
    state: str | None,
    country: str | None,
) -> None:
    """Generate a key pair with a self-signed certificate.

    Without --dname or any of the component options, each component is
    asked for, offering the configured subject as default.
    """
    config: AppConfig = ctx.obj["config"]
    subject = config.subject
    components = {
        "Common name (CN)": (cn, subject.common_name),
        "Organizational unit (OU)": (ou, subject.organizational_unit),
        "Organization (O)": (org, subject.organization),
        "Locality (L)": (locality, subject.locality),
        "State (S)": (state, subject.state),
        "Country (C)": (country, subject.country),
    }
    if dname is None:
        if any(given is not None for given, _default in components.values()):
            values = [given if given is not None else default for given, default in components.values()]
        else:
            prompter = ConsolePrompter()
            values = [prompter.ask(label, default=default) for label, (_given, default) in components.items()]
        dname = build_dname(*values)

    algorithm = KeyAlgorithm(key_algorithm.upper()) if key_algorithm else config.keypair.key_algorithm
    if key_size is None:
        key_size = config.keypair.key_size if algorithm == config.keypair.key_algorithm else DEFAULT_KEY_SIZES[algorithm]

    session = _open_session(ctx)
    _check(
        ctx,
        create_keypair(
            ctx, session, alias, dname, algorithm, key_size, validity_days or config.keypair.validity_days
        ),
    )


@cli.command(name="import-keystore")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--src-storetype", type=STORE_TYPES, help="Source keystore type (inferred from the extension)")
@click.option(
    "--src-storepass-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File containing the source keystore password",
)
@click.option("--src-storepass-env", help="Environment variable containing the source keystore password")
@click.pass_context
def import_keystore(
    ctx: click.Context,
    source: Path,
    src_storetype: str | None,
    src_storepass_file: Path | None,
    src_storepass_env: str | None,
) -> None:
    """Import every entry of another keystore."""
    destination = _open_session(ctx)
    source_session = _open_session(
        ctx,
        path=source,
        store_type=src_storetype.upper() if src_storetype else None,
        password_file=src_storepass_file,
        password_env=src_storepass_env,
    )
    _check(ctx, merge_keystore(ctx, source_session, destination))


@cli.command(name="printcert")
@click.option(
    "--file",
    "cert_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Certificate file (read from stdin if not provided)",
)
@click.pass_context
def printcert(ctx: click.Context, cert_path: Path | None) -> None:
    """Print the contents of a certificate file."""
    data = None if cert_path else click.get_binary_stream("stdin").read()
    _check(ctx, print_certificate(ctx, _get_runner(ctx), file=cert_path, data=data))


if __name__ == "__main__":
    cli()
