"""keystore-cli - manage Java keystores through keytool."""

import logging

__version__ = "0.3.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
