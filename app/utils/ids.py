"""
Utility functions for generating short, URL-safe identifiers.

Canonical filenames use a lowercase base36 suffix so they stay readable in
bucket listings and FTP directory dumps.
"""
import random
import string
import uuid


# Base36 character set: [0-9a-z]
BASE36_CHARS = string.digits + string.ascii_lowercase


def b36encode(num: int) -> str:
    """
    Encode a number to base36 string.

    Args:
        num: Integer to encode

    Returns:
        Base36 encoded string

    Examples:
        >>> b36encode(12345)
        '9ix'
    """
    if num == 0:
        return BASE36_CHARS[0]

    base = len(BASE36_CHARS)
    encoded = []

    while num > 0:
        num, remainder = divmod(num, base)
        encoded.append(BASE36_CHARS[remainder])

    return "".join(reversed(encoded))


def generate_short_id(length: int = 7) -> str:
    """
    Generate a short lowercase ID using base36 encoding.

    Args:
        length: Length of the output string (default: 7 characters)

    Returns:
        Identifier using [0-9a-z] characters

    Notes:
        - 7 characters give ~36 bits of entropy; combined with the millisecond
          timestamp prefix of a filename this is collision-free in practice
    """
    num = int.from_bytes(uuid.uuid4().bytes, byteorder="big")
    encoded = b36encode(num)

    if len(encoded) < length:
        padding = "".join(random.choices(BASE36_CHARS, k=length - len(encoded)))
        return encoded + padding

    return encoded[:length]
