"""Client-generated identifiers for toasts and error records."""

import secrets
import string

from .timestamps import epoch_millis

_BASE36 = string.digits + string.ascii_lowercase
SUFFIX_LENGTH = 9


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    """Return ``length`` random lowercase base-36 characters."""
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_id(prefix: str) -> str:
    """Return an identifier shaped ``<prefix>_<epoch ms>_<9 base-36 chars>``."""
    return f"{prefix}_{epoch_millis()}_{random_suffix()}"
