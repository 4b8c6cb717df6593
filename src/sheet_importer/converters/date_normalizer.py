"""Normalization of day/month/year date strings to ISO format.

Recognized layouts, tried in order:

- ``21/06/2003``
- ``21-06-2003``
- ``21/06/03``
- ``21-06-03``

Two-digit years follow the POSIX ``%y`` pivot used by ``datetime.strptime``:
69-99 become 1969-1999 and 00-68 become 2000-2068.
"""

import re
from datetime import datetime
from typing import List, Optional, Pattern, Tuple

from sheet_importer.models.data_models import InvalidDateError

DATE_LAYOUTS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"[0-9]{1,2}/[0-9]{1,2}/[0-9]{4}"), "%d/%m/%Y"),
    (re.compile(r"[0-9]{1,2}-[0-9]{1,2}-[0-9]{4}"), "%d-%m-%Y"),
    (re.compile(r"[0-9]{1,2}/[0-9]{1,2}/[0-9]{2}"), "%d/%m/%y"),
    (re.compile(r"[0-9]{1,2}-[0-9]{1,2}-[0-9]{2}"), "%d-%m-%y"),
]


def normalize(text: str) -> Optional[str]:
    """Convert a day-first date string to ``YYYY-MM-DD``.

    Args:
        text: Date text such as "21/06/2003" or "21-06-03"

    Returns:
        ISO date string, or None when the text matches no known layout

    Raises:
        InvalidDateError: If the text matches a layout but is not a calendar date
    """
    if not isinstance(text, str):
        return None

    for pattern, date_format in DATE_LAYOUTS:
        if pattern.fullmatch(text):
            try:
                parsed = datetime.strptime(text, date_format)
            except ValueError as e:
                raise InvalidDateError(f"Invalid date {text!r}: {e}") from e
            return parsed.date().isoformat()

    return None
