#!/usr/bin/env python3

import re
from typing import Optional, Union

from .tree_constants import RelationKind, RELATION_TYPES
from .tree_errors import InvalidInput


_YEAR_PATTERN = re.compile(r'^-?\d{1,4}$')


def normalize_name(value: str, field_name: str = "name") -> str:
    """Trim a user supplied name and reject it if nothing is left."""
    if not isinstance(value, str):
        raise InvalidInput(f"{field_name.capitalize()} must be text, got {type(value).__name__}")
    text = value.strip()
    if not text:
        raise InvalidInput(
            f"{field_name.capitalize()} must not be empty",
            recovery_suggestion=f"Enter a non-empty {field_name}."
        )
    return text


def text_value(value: Optional[str], field_name: str = "value") -> str:
    """Free text field: ``None`` becomes an empty string, anything but text is rejected."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidInput(f"{field_name.capitalize()} must be text, got {type(value).__name__}")
    return value


def parse_year(value: Union[int, str, None], field_name: str = "year") -> Optional[int]:
    """Convert prompt input into an optional year.

    ``None`` and blank strings mean "unknown" and give ``None``. Integers are
    passed through. Anything else must be a plain (optionally negative)
    number of up to four digits.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid {field_name}: {value!r}")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise InvalidInput(f"Invalid {field_name}: {value!r}")

    text = value.strip()
    if not text:
        return None
    if not _YEAR_PATTERN.match(text):
        raise InvalidInput(
            f"Invalid {field_name}: '{text}'",
            recovery_suggestion="Enter the year as digits, e.g. 1950, or leave it blank."
        )
    return int(text)


def relation_kind_from_code(code: Union[int, str, RelationKind]) -> RelationKind:
    """Map the numeric code typed by the user to a RelationKind."""
    if isinstance(code, RelationKind):
        return code
    if isinstance(code, str):
        text = code.strip()
        if not text.isdigit():
            raise InvalidInput(
                f"Invalid relation code: '{text}'",
                recovery_suggestion=f"Choose a number between 1 and {len(RELATION_TYPES)}."
            )
        code = int(text)
    if isinstance(code, bool) or not isinstance(code, int) or code not in RELATION_TYPES:
        raise InvalidInput(
            f"Invalid relation code: {code!r}",
            recovery_suggestion=f"Choose a number between 1 and {len(RELATION_TYPES)}."
        )
    return RelationKind(code)
