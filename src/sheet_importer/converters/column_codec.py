"""Column label <-> column number conversion.

Spreadsheet columns are named in bijective base 26: the letters A-Z are the
digits 1-26 and there is no zero digit, so "Z" is 26 and "AA" is 27.
"""

import string

from sheet_importer.models.data_models import InvalidFormatError

ALPHABET = string.ascii_uppercase
BASE = len(ALPHABET)


def to_number(label: str) -> int:
    """Convert a column label to its 1-based column number.

    Args:
        label: Column label such as "A", "z" or "AA" (case-insensitive)

    Returns:
        Column number; an empty label maps to 0

    Raises:
        InvalidFormatError: If the label contains anything but letters A-Z

    Example:
        >>> to_number("AA")
        27
    """
    if not isinstance(label, str):
        raise InvalidFormatError(f"Column label must be a string, got {type(label).__name__}")

    # str.upper() expands some letters, e.g. "ß" becomes "SS"
    if not label.isascii():
        raise InvalidFormatError(f"Invalid column label: {label!r}")

    number = 0
    for char in label.upper():
        if char not in ALPHABET:
            raise InvalidFormatError(f"Invalid column label: {label!r}")
        number = number * BASE + ALPHABET.index(char) + 1

    return number


def to_label(number: int) -> str:
    """Convert a 1-based column number to its column label.

    Args:
        number: Column number, 1 or greater

    Returns:
        Column label in upper case

    Raises:
        InvalidFormatError: If number is not a positive integer

    Example:
        >>> to_label(27)
        'AA'
    """
    if isinstance(number, bool) or not isinstance(number, int):
        raise InvalidFormatError(f"Column number must be an integer, got {number!r}")

    if number < 1:
        raise InvalidFormatError(f"Column number must be 1 or greater, got {number}")

    letters = []
    while number > 0:
        number, remainder = divmod(number - 1, BASE)
        letters.append(ALPHABET[remainder])

    return "".join(reversed(letters))
