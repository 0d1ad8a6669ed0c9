"""Data models for keystore-cli."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from keystore_cli.defaults import (
    DEFAULT_KEY_ALGORITHM,
    DEFAULT_KEY_SIZE,
    DEFAULT_KEYTOOL,
    DEFAULT_PASSWORD_RETRIES,
    DEFAULT_STORE_TYPE,
    DEFAULT_VALIDITY_DAYS,
)
from keystore_cli.dname import build_dname
from keystore_cli.types import KeyAlgorithm, StoreType

# Config


class KeytoolConfig(BaseModel):
    """How to invoke keytool."""

    executable: str = DEFAULT_KEYTOOL
    timeout: float | None = Field(default=None, gt=0)


class StoreConfig(BaseModel):
    """Keystore defaults."""

    default_type: StoreType = StoreType(DEFAULT_STORE_TYPE)


class KeyPairConfig(BaseModel):
    """Defaults for key pair generation."""

    key_algorithm: KeyAlgorithm = KeyAlgorithm(DEFAULT_KEY_ALGORITHM)
    key_size: int = Field(default=DEFAULT_KEY_SIZE, gt=0)
    validity_days: int = Field(default=DEFAULT_VALIDITY_DAYS, gt=0)


class DistinguishedName(BaseModel):
    """X.500 distinguished name components, all optional."""

    common_name: str | None = None
    organizational_unit: str | None = None
    organization: str | None = None
    locality: str | None = None
    state: str | None = None
    country: str | None = None

    def to_dname(self: "DistinguishedName") -> str:
        """Render as a keytool ``-dname`` value."""
        return build_dname(
            cn=self.common_name,
            ou=self.organizational_unit,
            o=self.organization,
            l=self.locality,
            s=self.state,
            c=self.country,
        )


class PasswordConfig(BaseModel):
    """Where store passwords come from."""

    file: str | None = None
    env_var: str | None = None
    retries: int = Field(default=DEFAULT_PASSWORD_RETRIES, ge=1)


class LoggingConfig(BaseModel):
    """Log file settings."""

    file: str | None = None
    level: str = "INFO"


class AppConfig(BaseModel):
    """Represents the runtime configuration."""

    keytool: KeytoolConfig = Field(default_factory=KeytoolConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    keypair: KeyPairConfig = Field(default_factory=KeyPairConfig)
    subject: DistinguishedName = Field(default_factory=DistinguishedName)
    password: PasswordConfig = Field(default_factory=PasswordConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# Keystore


class StoreReference(BaseModel):
    """A keystore as it is passed to one keytool command."""

    model_config = ConfigDict(frozen=True)

    path: Path
    store_type: StoreType
    password: SecretStr | None = None


class Entry(BaseModel):
    """One row of a keystore listing."""

    model_config = ConfigDict(frozen=True)

    index: int
    alias: str
    entry_type: str
    fingerprint: str


class CommandResult(BaseModel):
    """Outcome of a keytool invocation; stdout is None when it went to a sink."""

    model_config = ConfigDict(frozen=True)

    exit_code: int
    stdout: str | None = None
    stderr: str = ""

    @property
    def ok(self: "CommandResult") -> bool:
        return self.exit_code == 0
