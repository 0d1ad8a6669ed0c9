"""Parsing of keytool's text output.

``keytool -list`` prints a banner followed by one record per entry::

    Keystore type: PKCS12
    Keystore provider: SUN

    Your keystore contains 2 entries

    mykey, Jan 1, 2020, PrivateKeyEntry,
    Certificate fingerprint (SHA-256): AB:CD:EF:01
    other, Feb 3, 2021, trustedCertEntry,
    Certificate fingerprint (SHA-256): 12:34:56:78

Older releases print the fingerprint on the same line as the entry. Both
forms reduce to five comma separated fields per entry; banner lines never
have five fields and are skipped.
"""

import re

from keystore_cli.errors import MalformedAliasReference
from keystore_cli.models import Entry
from keystore_cli.utils import is_blank

__all__ = ["extract_alias", "find_alias", "is_blank", "parse_details", "parse_list"]

ALIAS_LABEL = "Alias name: "
FINGERPRINT_LABEL = "Certificate fingerprint"
ENTRY_FIELD_COUNT = 5

# One or more blank (or whitespace-only) lines
_BLANK_LINES = re.compile(r"\n(?:[ \t]*\n)+")
_DETAIL_SEPARATOR = re.compile(r"^\*{5,}\s*$", re.MULTILINE)
_DETAIL_FIELD = re.compile(r"^([A-Za-z][A-Za-z0-9 ()#.-]*?):\s(.*)$")


def _split_blocks(text: str) -> list[str]:
    return _BLANK_LINES.split(text.replace("\r\n", "\n"))


def _join_fingerprint_lines(lines: list[str]) -> list[str]:
    joined: list[str] = []
    for line in lines:
        if joined and line.startswith(FINGERPRINT_LABEL) and joined[-1].rstrip().endswith(","):
            joined[-1] = f"{joined[-1].rstrip()} {line}"
        else:
            joined.append(line)
    return joined


def _fingerprint(field: str) -> str:
    _label, separator, digest = field.partition(": ")
    if not separator:
        return ""
    return digest.replace(":", "").strip()


def parse_list(text: str) -> list[Entry]:
    """Parse the compact output of ``keytool -list`` into entries.

    Args:
    ----
        text: Raw standard output of the list command

    Returns:
    -------
        Entries in the order keytool printed them, indexed from 1

    """
    entries: list[Entry] = []
    for block in _split_blocks(text):
        for line in _join_fingerprint_lines(block.split("\n")):
            fields = [field.strip() for field in line.split(",")]
            if len(fields) != ENTRY_FIELD_COUNT:
                continue
            entries.append(
                Entry(
                    index=len(entries) + 1,
                    alias=fields[0],
                    entry_type=fields[3],
                    fingerprint=_fingerprint(fields[4]),
                )
            )
    return entries


def find_alias(line: str) -> str | None:
    """Extract the alias from a line of list output, or None if there is none.

    A verbose line (``Alias name: foo``) yields everything after the label,
    a compact line (``foo, Jan 1, 2020, ...``) everything before the first
    comma.
    """
    line = line.rstrip("\r\n")
    if line.startswith(ALIAS_LABEL):
        alias = line[len(ALIAS_LABEL) :]
    elif "," in line:
        alias = line.split(",", 1)[0]
    else:
        return None
    return None if is_blank(alias) else alias


def extract_alias(line: str) -> str:
    """Like find_alias, but a missing alias raises MalformedAliasReference."""
    alias = find_alias(line)
    if alias is None:
        raise MalformedAliasReference(f"No alias found in line: {line.strip()!r}")
    return alias


def parse_details(text: str) -> list[dict[str, str]]:
    """Parse ``keytool -list -v`` output into one field mapping per entry.

    Entries are separated by lines of asterisks. Within an entry every
    ``Label: value`` line from ``Alias name`` onwards is recorded; a label
    seen twice (e.g. the owner of each certificate in a chain) keeps its
    first value. The banner and the trailing text carry no alias and are
    dropped.
    """
    details = []
    for block in _DETAIL_SEPARATOR.split(text.replace("\r\n", "\n")):
        fields: dict[str, str] = {}
        for line in block.split("\n"):
            line = line.strip()
            if not fields and not line.startswith(ALIAS_LABEL):
                continue
            match = _DETAIL_FIELD.match(line)
            if match and match.group(1) not in fields:
                fields[match.group(1)] = match.group(2).strip()
        if fields:
            details.append(fields)
    return details
