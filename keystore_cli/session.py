"""Per-store sessions.

A KeystoreSession is created when a store is opened and carries everything
the keytool commands for that store need: the path, the resolved store
type, the password once it is known, and the runner. Sessions never talk to
the user directly; when a password is needed they ask the Prompter they
were given.
"""

from pathlib import Path
from typing import Any, Protocol

from pydantic import SecretStr

from keystore_cli.errors import KeystoreError
from keystore_cli.models import CommandResult, StoreReference
from keystore_cli.paths import infer_store_type
from keystore_cli.runner import KeytoolRunner, store_args
from keystore_cli.types import StoreType


class Prompter(Protocol):
    """Answers the questions a session or command needs answered."""

    def ask_password(self, prompt: str, confirm: bool = False) -> str:
        """Return a password; with confirm, raise PasswordMismatch if both entries differ."""
        ...

    def ask(self, prompt: str, default: str | None = None) -> str:
        """Return a line of text."""
        ...


class KeystoreSession:
    """An open keystore."""

    def __init__(
        self,
        path: Path | str,
        store_type: StoreType | str | None = None,
        password: str | None = None,
        prompter: Prompter | None = None,
        runner: KeytoolRunner | None = None,
        default_type: StoreType | str = StoreType.JKS,
    ) -> None:
        self.path = Path(path)
        self.store_type = StoreType(store_type) if store_type else infer_store_type(self.path, default_type)
        self.prompter = prompter
        self.runner = runner or KeytoolRunner()
        self._password = SecretStr(password) if password is not None else None

    def __repr__(self) -> str:
        return f"KeystoreSession(path={str(self.path)!r}, store_type={self.store_type!s})"

    @property
    def has_password(self) -> bool:
        return self._password is not None

    @property
    def password(self) -> str:
        """The store password, asking the prompter the first time it is needed."""
        if self._password is None:
            if self.prompter is None:
                raise KeystoreError(f"No password available for {self.path}")
            confirm = not self.path.exists()
            self._password = SecretStr(self.prompter.ask_password(f"Password for {self.path.name}: ", confirm=confirm))
        return self._password.get_secret_value()

    def set_password(self, password: str) -> None:
        self._password = SecretStr(password)

    def forget_password(self) -> None:
        """Drop the cached password so that the next command asks again."""
        self._password = None

    def reference(
        self,
        path: Path | str | None = None,
        password: str | None = None,
        store_type: StoreType | str | None = None,
    ) -> StoreReference:
        """Build the StoreReference for one command, filling gaps from the session."""
        if path is not None:
            resolved_path = Path(path)
            resolved_type = StoreType(store_type) if store_type else infer_store_type(resolved_path, self.store_type)
        else:
            resolved_path = self.path
            resolved_type = StoreType(store_type) if store_type else self.store_type
        secret = password if password is not None else self.password
        return StoreReference(path=resolved_path, store_type=resolved_type, password=SecretStr(secret))

    def store_args(
        self,
        prefix: str = "",
        path: Path | str | None = None,
        password: str | None = None,
        store_type: StoreType | str | None = None,
    ) -> list[str]:
        """Keystore options for this session; see runner.store_args."""
        return store_args(self.reference(path=path, password=password, store_type=store_type), prefix=prefix)

    def run(self, *args: Any, **kwargs: Any) -> CommandResult:
        """Run keytool through this session's runner."""
        return self.runner.run(*args, **kwargs)

    def close(self) -> None:
        """Discard cached secrets; the session must not be used afterwards."""
        self._password = None
        self.prompter = None
