"""Configuration operations for keystore-cli."""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from ruamel.yaml import YAML

from keystore_cli.defaults import get_default_config
from keystore_cli.models import AppConfig
from keystore_cli.result import Failure, Result, Success

CONSOLE = Console()
yaml = YAML()
yaml.preserve_quotes = True
yaml.indent(mapping=2, sequence=4, offset=2)

CONFIG_HEADER = "# keystore-cli configuration\n\n"


def create(config_path: Path, force: bool = False) -> Result[AppConfig, str]:
    """Write a configuration file with default values.

    Args:
    ----
        config_path: Path of the configuration file
        force: If True, overwrite an existing file

    Returns:
    -------
        Result with the loaded AppConfig or error message

    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        if force or not config_path.exists():
            _write_config_file(get_default_config(), config_path)
            CONSOLE.print(f"Created config at {config_path}")
        else:
            CONSOLE.print(f"Config already exists at {config_path}, skipping.")
        return init(config_path)
    except Exception as e:
        return Failure(f"Failed to create configuration: {e!s}")


def init(config_path: Path) -> Result[AppConfig, str]:
    """Load the configuration; a missing file yields the built-in defaults."""
    if not config_path.exists():
        return Success(AppConfig())

    validation_result = _validate_yaml(config_path)
    if isinstance(validation_result, Failure):
        return Failure("Invalid configuration:\n" + "\n".join(validation_result.error))
    return Success(validation_result.unwrap())


def validate(config_path: Path) -> Result[None, str]:
    """Validate the configuration file, printing every problem found."""
    if not config_path.exists():
        CONSOLE.print(f"[bold red]Error:[/bold red] Config not found: {config_path}")
        return Failure("Validation failed")

    validation = _validate_yaml(config_path)
    if isinstance(validation, Failure):
        CONSOLE.print("[bold red]Configuration validation failed:[/bold red]")
        for error in validation.error:
            CONSOLE.print(f"  - {error}")
        return Failure("Validation failed")

    CONSOLE.print("✅ Configuration is valid")
    return Success(None)


def _validate_yaml(file_path: Path) -> Result[AppConfig, list[str]]:
    """Load a YAML file and validate it with the AppConfig model."""
    try:
        with file_path.open(encoding="utf-8") as f:
            data = yaml.load(f) or {}
        return Success(AppConfig.model_validate(data))
    except ValidationError as e:
        return Failure([f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in json.loads(e.json())])
    except Exception as e:
        return Failure([f"Error validating {file_path}: {e!s}"])


def _write_config_file(config_data: dict[str, Any], path: Path) -> None:
    """Write configuration dictionary to a YAML file with a header."""
    with path.open("w", encoding="utf-8") as f:
        f.write(CONFIG_HEADER)
        yaml.dump(config_data, f)
