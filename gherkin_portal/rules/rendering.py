"""
Rendering rules for names, tags, multiline arguments and attachments.
"""

import mimetypes
from typing import Iterable, Optional

from ..errors import LookupFallback
from ..events.models import Statement, Step, Tag
from ..logging.config import get_logger

logger = get_logger(__name__)

COLON_INFIX = ": "
TABLE_SEPARATOR = "|"
TABLE_LINE_BREAK = "\r\n"
DOCSTRING_DECORATOR = '\n"""\n'
DEFAULT_ATTACHMENT_NAME = "embedding"


def build_statement_name(
    statement: Statement,
    prefix: Optional[str] = None,
    infix: str = COLON_INFIX,
    suffix: Optional[str] = None
) -> str:
    """
    Build the display name of a statement.

    Args:
        statement: Feature, scenario, background or step
        prefix: Prepended before the keyword (optional)
        infix: Inserted between keyword and name
        suffix: Appended after the name (optional)

    Returns:
        prefix + keyword + infix + name + suffix
    """
    return f"{prefix or ''}{statement.keyword}{infix}{statement.name}{suffix or ''}"


def extract_tags(tags: Iterable[Tag]) -> frozenset[str]:
    """Flatten declared tags into a set of tag names."""
    return frozenset(tag.name for tag in tags)


def build_multiline_argument(step: Step) -> str:
    """
    Render a step's data table and doc string.

    The table comes first, one '|'-delimited row per line between leading and
    trailing line breaks; the doc string follows wrapped in triple quotes.
    Either part contributes nothing when absent.
    """
    parts = []

    if step.rows is not None:
        parts.append(TABLE_LINE_BREAK)
        for row in step.rows:
            parts.append(TABLE_SEPARATOR)
            for cell in row.cells:
                parts.append(f" {cell} {TABLE_SEPARATOR}")
            parts.append(TABLE_LINE_BREAK)

    if step.doc_string is not None:
        parts.append(f"{DOCSTRING_DECORATOR}{step.doc_string.value}{DOCSTRING_DECORATOR}")

    return "".join(parts)


def _lookup_media_type(mime_type: str) -> str:
    """Top-level media type of a MIME type known to the registry."""
    normalized = mime_type.split(";", 1)[0].strip().lower()
    if mimetypes.guess_extension(normalized) is None:
        raise LookupFallback(
            f"Unknown mime-type: {mime_type!r}",
            lookup="mime_type",
            fallback_value=DEFAULT_ATTACHMENT_NAME,
        )
    return normalized.split("/", 1)[0]


def resolve_attachment_name(mime_type: str) -> str:
    """
    Human-readable name of an attachment, from its MIME type.

    Falls back to "embedding" when the registry does not know the type.
    """
    try:
        return _lookup_media_type(mime_type)
    except LookupFallback as e:
        logger.warning(
            "Mime-type not found",
            mime_type=mime_type,
            fallback=e.fallback_value,
        )
        return DEFAULT_ATTACHMENT_NAME
