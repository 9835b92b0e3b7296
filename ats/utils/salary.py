"""Salary parsing utilities for job entry forms.

Salary inputs arrive as free text ("$120,000", "80000 USD", 80000); only the digits
are kept.
"""

import re


def parse_salary(value: int | str | None) -> int | None:
    """Reduce a salary input to an integer, or None when nothing usable is left.

    Examples:
        >>> parse_salary("$120,000")
        120000
        >>> parse_salary("")
        None
        >>> parse_salary("competitive")
        None
    """
    if value is None or value == "" or value is False:
        return None
    if isinstance(value, int):
        return value

    digits = re.sub(r"[^\d]", "", str(value))
    if not digits:
        return None
    return int(digits)
