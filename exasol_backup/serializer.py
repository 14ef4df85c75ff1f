"""
Serialization of object records into re-applicable SQL scripts.
"""

import re

from .ddl import bracket
from .exceptions import SerializationError
from .models import Fragment, ObjectRecord, Terminator

MASK = '********'

# A quoted literal following an identification clause
SECRET_PATTERN = re.compile(
    r"""(IDENTIFIED\s+BY\s+)("(?:[^"]|"")*"|'(?:[^']|'')*')""",
    re.IGNORECASE
)

BLOCK_START = '--/'
BLOCK_END = '/'
LINE_COMMENT = '--'


def redact(text: str) -> str:
    """Replace every secret literal after IDENTIFIED BY with the mask."""
    return SECRET_PATTERN.sub(lambda m: m.group(1) + MASK, text)


def _is_wrapped(text: str) -> bool:
    lines = text.strip().splitlines()
    return (
        len(lines) > 1
        and lines[0].strip() == BLOCK_START
        and lines[-1].strip() == BLOCK_END
    )


def _render_fragment(label: str, fragment: Fragment) -> str:
    if not isinstance(fragment, Fragment):
        raise SerializationError(label, f"unexpected fragment {fragment!r}")
    if not isinstance(fragment.text, str) or not fragment.text.strip():
        raise SerializationError(label, "fragment has no SQL text")

    text = redact(fragment.text)

    if fragment.terminator is Terminator.STATEMENT:
        text = text.strip()
        if LINE_COMMENT in text.splitlines()[-1]:
            # A trailing line comment would swallow the terminator
            text += '\n;'
        elif not text.endswith(';'):
            text += ';'
        return text + '\n'

    if fragment.terminator is Terminator.BLOCK:
        # Bodies may contain ';', so they are delimited as a raw block
        if _is_wrapped(text):
            return text.strip() + '\n'
        return f"{BLOCK_START}\n{text.strip()}\n{BLOCK_END}\n"

    raise SerializationError(label, f"unknown terminator {fragment.terminator!r}")


def serialize(record: ObjectRecord) -> str:
    """
    Convert an object record into script text.

    Fragments are emitted in order, preceded by an OPEN SCHEMA statement
    when the record needs an active schema. Secret literals are always
    masked. The output depends on the record alone.

    Raises:
        SerializationError: The record has no fragments or a malformed one.
    """
    if not record.fragments:
        raise SerializationError(record.label, "record has no fragments")

    parts = []
    if record.open_schema:
        parts.append(f"OPEN SCHEMA {bracket(record.open_schema)};\n")
    for fragment in record.fragments:
        parts.append(_render_fragment(record.label, fragment))
    return ''.join(parts)
