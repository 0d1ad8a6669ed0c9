"""Path management and store type inference for keystore-cli."""

import os
from pathlib import Path

import click

from keystore_cli.defaults import APP_NAME, CONFIG_ENV_VAR, DEFAULT_CONFIG_FILENAME, DEFAULT_LOG_FILENAME
from keystore_cli.types import StoreType

_SUFFIX_TYPES = {
    ".jks": StoreType.JKS,
    ".p12": StoreType.PKCS12,
    ".pkcs12": StoreType.PKCS12,
}


def resolve_config_path(config_path: Path | None = None) -> Path:
    """Resolve the configuration file path.

    The resolution order is:
    1. Explicitly provided argument
    2. The KEYSTORE_CLI_CONFIG environment variable
    3. keystore.yaml in the per-user application directory

    Args:
    ----
        config_path: Optional path to the configuration file

    Returns:
    -------
        Path of the configuration file (which need not exist)

    """
    if config_path:
        return Path(config_path)
    if os.environ.get(CONFIG_ENV_VAR):
        return Path(os.environ[CONFIG_ENV_VAR])
    return Path(click.get_app_dir(APP_NAME)) / DEFAULT_CONFIG_FILENAME


def get_log_path(config_path: Path, log_file: str | None = DEFAULT_LOG_FILENAME) -> Path | None:
    """Get the log file path; relative names live next to the config file."""
    if not log_file:
        return None
    path = Path(log_file).expanduser()
    if path.is_absolute():
        return path
    return config_path.parent / path


def infer_store_type(path: Path | str, default: StoreType | str = StoreType.JKS) -> StoreType:
    """Infer the keystore type from the file extension.

    ``.jks`` maps to JKS, ``.p12`` and ``.pkcs12`` map to PKCS12, matching
    case-insensitively. Any other extension gives ``default``. The file is
    never opened.
    """
    return _SUFFIX_TYPES.get(Path(path).suffix.lower(), StoreType(default))
