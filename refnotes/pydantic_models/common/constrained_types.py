import re
from typing import Annotated, Any

from pydantic import BeforeValidator

_CANONICAL_INT = re.compile(r"-?[1-9][0-9]*|0")


def normalize_note_code(v: Any) -> Any:
    """
    Canonical decimal strings ("1", "-3", "0") are the same code as the int they spell,
    so they are turned into that int. Any other string ("007", "1.5", " 1") stays as it is.
    """
    # bool is an int subclass, reject it explicitly
    if isinstance(v, bool) or not isinstance(v, (str, int)):
        raise ValueError("Expected str or int as note code")
    if isinstance(v, str) and _CANONICAL_INT.fullmatch(v):
        return int(v)
    return v


NoteCode = Annotated[str | int, BeforeValidator(normalize_note_code)]

# Opaque payload, the registry never looks inside.
NoteData = dict[str, Any]


def is_omitted_code(code: NoteCode | None) -> bool:
    """
    A code counts as 'not given' if it is None, the empty string, 0 or "0".
    Everything else is a real code.
    """
    return code is None or not normalize_note_code(code)
