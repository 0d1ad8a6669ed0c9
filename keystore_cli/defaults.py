"""Constants and default configuration for keystore-cli."""

from typing import Any

APP_NAME = "keystore-cli"
CONFIG_ENV_VAR = "KEYSTORE_CLI_CONFIG"
DEFAULT_CONFIG_FILENAME = "keystore.yaml"
DEFAULT_LOG_FILENAME = "keystore-cli.log"

DEFAULT_KEYTOOL = "keytool"
DEFAULT_STORE_TYPE = "JKS"
DEFAULT_PASSWORD_RETRIES = 3

# Key pair defaults
DEFAULT_KEY_ALGORITHM = "RSA"
DEFAULT_KEY_SIZE = 2048
DEFAULT_VALIDITY_DAYS = 365

# Key size used when --keyalg differs from the configured algorithm
DEFAULT_KEY_SIZES = {
    "RSA": 2048,
    "DSA": 2048,
    "EC": 256,
}

# Constants for expiration warnings
EXPIRY_CRITICAL_DAYS = 30
EXPIRY_WARNING_DAYS = 90


def get_default_config() -> dict[str, Any]:
    """Get default configuration dictionary."""
    return {
        "keytool": {
            "executable": DEFAULT_KEYTOOL,
            "timeout": 60,
        },
        "store": {
            "default_type": DEFAULT_STORE_TYPE,
        },
        "keypair": {
            "key_algorithm": DEFAULT_KEY_ALGORITHM,
            "key_size": DEFAULT_KEY_SIZE,
            "validity_days": DEFAULT_VALIDITY_DAYS,
        },
        "subject": {
            "organization": "Example Org",
            "organizational_unit": "IT",
            "country": "DE",
        },
        "password": {
            "env_var": "KEYSTORE_PASSWORD",
            "retries": DEFAULT_PASSWORD_RETRIES,
        },
        "logging": {
            "file": DEFAULT_LOG_FILENAME,
            "level": "INFO",
        },
    }
