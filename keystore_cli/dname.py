"""Distinguished name assembly for ``keytool -dname``."""

from keystore_cli.utils import is_blank

DNAME_KEYS = ("CN", "OU", "O", "L", "S", "C")

# RFC 2253 special characters, backslash excluded
SPECIAL_CHARS = ',+="<>;'


def escape_value(value: str) -> str:
    """Backslash-escape the characters keytool treats as syntax inside a value."""
    escaped = value.replace("\\", "\\\\")
    for char in SPECIAL_CHARS:
        escaped = escaped.replace(char, f"\\{char}")
    return escaped


def build_dname(
    cn: str | None = None,
    ou: str | None = None,
    o: str | None = None,
    l: str | None = None,  # noqa: E741
    s: str | None = None,
    c: str | None = None,
) -> str:
    """Build a distinguished name from its components.

    Blank components are left out. The rest are emitted as ``KEY=value`` in
    the fixed order CN, OU, O, L, S, C and joined with ``", "``. Backslashes
    and the characters ``, + = " < > ;`` in a value are escaped so keytool
    keeps them inside the component.

    Args:
    ----
        cn: Common name
        ou: Organizational unit
        o: Organization
        l: Locality
        s: State or province
        c: Two-letter country code

    Returns:
    -------
        The distinguished name, or an empty string if every component is blank

    """
    segments = []
    for key, value in zip(DNAME_KEYS, (cn, ou, o, l, s, c), strict=True):
        if is_blank(value):
            continue
        assert value is not None
        segments.append(f"{key}={escape_value(value.strip())}")
    return ", ".join(segments)
