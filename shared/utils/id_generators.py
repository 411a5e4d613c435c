"""
Short random identifiers for slots and swap requests.
"""

import secrets
import string

ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 6  # matches the String(6) primary key columns


def generate_lowercase_id(length: int = ID_LENGTH) -> str:
    """Random id of digits and lowercase letters drawn from ``secrets``."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def generate_slot_id() -> str:
    return generate_lowercase_id()


def generate_swap_id() -> str:
    return generate_lowercase_id()
