"""Pytest configuration and shared fixtures for keystore-cli tests."""

import datetime
import json
import shlex
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID
from ruamel.yaml import YAML

from keystore_cli.cli import cli
from keystore_cli.defaults import get_default_config

# Long enough for keytool's six character minimum
TEST_PASSWORD = "changeit-for-testing"

FAKE_KEYTOOL = Path(__file__).parent / "fake_keytool.py"


def make_certificate(common_name: str, days: int = 365) -> bytes:
    """Create a self-signed EC certificate and return it as PEM."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.UTC)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=days))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


class KeystoreWorkspace:
    """A helper class to manage a test environment for keystore-cli."""

    def __init__(self, tmp_path: Path, runner: CliRunner, keytool: list[str]):
        self.root = tmp_path
        self.runner = runner
        self.config_path = self.root / "keystore.yaml"
        self.keystore = self.root / "store.jks"
        self.keytool_log = self.root / "keytool.log"
        self.yaml = YAML()

        config = get_default_config()
        config["keytool"]["executable"] = shlex.join(keytool)
        config["password"]["env_var"] = "KEYSTORE_PASSWORD"
        config["logging"]["file"] = None
        self.set_config(config)

    def run(self, args, input=None, password=TEST_PASSWORD, keystore=None, env=None):
        """Invoke the CLI against the workspace config and keystore.

        With password=None the KEYSTORE_PASSWORD variable is unset, so the
        CLI has to prompt for it.
        """
        base_args = ["--config", str(self.config_path), "-k", str(keystore or self.keystore)] + args
        full_env = {
            "KEYSTORE_PASSWORD": password,
            "KEYSTORE_PATH": None,
            "FAKE_KEYTOOL_LOG": str(self.keytool_log),
            "COLUMNS": "250",
        }
        full_env.update(env or {})
        return self.runner.invoke(cli, base_args, input=input, env=full_env)

    def get_config(self):
        """Read the configuration file."""
        with open(self.config_path) as f:
            return self.yaml.load(f)

    def set_config(self, config_data):
        """Write the configuration file."""
        with open(self.config_path, "w") as f:
            self.yaml.dump(config_data, f)

    def keytool_calls(self):
        """Every argv the fake keytool received, oldest first."""
        if not self.keytool_log.exists():
            return []
        return [json.loads(line) for line in self.keytool_log.read_text().splitlines()]

    def write_certificate(self, name: str, common_name: str | None = None) -> Path:
        """Write a fresh self-signed certificate into the workspace."""
        path = self.root / f"{name}.pem"
        path.write_bytes(make_certificate(common_name or name))
        return path

    def import_cert(self, alias, **kwargs):
        """Helper to run 'import-cert' with a freshly made certificate."""
        cert_path = self.write_certificate(alias)
        result = self.run(["import-cert", alias, "--file", str(cert_path)], **kwargs)
        assert result.exit_code == 0, result.output
        assert f"Certificate imported as {alias}" in result.output
        return cert_path

    def list_json(self, **kwargs):
        """Helper to run 'list --json' and decode its output."""
        result = self.run(["list", "--json"], **kwargs)
        assert result.exit_code == 0, result.output
        return json.loads(result.output)


@pytest.fixture
def runner() -> CliRunner:
    """Provides a Click CliRunner instance."""
    return CliRunner()


@pytest.fixture
def keytool_cmd() -> list[str]:
    """Command that runs the scripted keytool stand-in."""
    return [sys.executable, str(FAKE_KEYTOOL)]


@pytest.fixture
def workspace(tmp_path: Path, runner: CliRunner, keytool_cmd: list[str]) -> KeystoreWorkspace:
    """
    Provides a workspace in a temporary directory whose configuration points
    keytool at the scripted stand-in. The keystore does not exist yet.
    """
    return KeystoreWorkspace(tmp_path, runner, keytool_cmd)


@pytest.fixture
def populated_workspace(workspace: KeystoreWorkspace) -> KeystoreWorkspace:
    """
    Provides a workspace whose keystore holds a key pair ('server') and a
    trusted certificate ('partner').
    """
    result = workspace.run(["genkeypair", "server", "--cn", "server.example.com", "--keyalg", "EC"])
    assert result.exit_code == 0, result.output
    workspace.import_cert("partner")
    return workspace


@pytest.fixture
def cert_pem() -> bytes:
    """A self-signed certificate in PEM form."""
    return make_certificate("test.example.com")
