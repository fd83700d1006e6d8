"""
Pure status and rendering rules used by the state machine.
"""
from .rendering import (
    build_multiline_argument,
    build_statement_name,
    extract_tags,
    resolve_attachment_name,
)
from .status import (
    build_issue_comment,
    issue_for,
    join_status,
    map_level,
    map_status,
)

__all__ = [
    "build_issue_comment",
    "build_multiline_argument",
    "build_statement_name",
    "extract_tags",
    "issue_for",
    "join_status",
    "map_level",
    "map_status",
    "resolve_attachment_name",
]
