"""Type definitions for keystore-cli."""

from enum import StrEnum


class StoreType(StrEnum):
    """Keystore formats understood by keytool."""

    JKS = "JKS"
    PKCS12 = "PKCS12"


class KeyAlgorithm(StrEnum):
    """Key algorithms accepted by ``keytool -genkeypair``."""

    RSA = "RSA"
    DSA = "DSA"
    EC = "EC"
