"""
Parsers turning recorded event payloads into event models.

Payloads come from JSON event logs written by a host-side recorder. Every
parser validates just enough structure to build the model and raises
EventParseError otherwise.
"""

import base64
import binascii
from typing import Any, Optional

import orjson

from ..errors import EventParseError
from .models import (
    Background,
    DataTableRow,
    DocString,
    Examples,
    Feature,
    Match,
    Result,
    Scenario,
    ScenarioOutline,
    Step,
    Tag,
)


def parse_json_line(raw_data: str, line_number: Optional[int] = None) -> dict[str, Any]:
    """
    Parse one JSON-lines record into a dictionary.

    Args:
        raw_data: Raw JSON text of a single record
        line_number: Position of the record in its file, for error context

    Returns:
        Parsed dictionary

    Raises:
        EventParseError: If the text is not a JSON object
    """
    try:
        payload = orjson.loads(raw_data)
    except orjson.JSONDecodeError as e:
        raise EventParseError(f"Invalid JSON: {e}", raw_data=raw_data[:200],
                              line_number=line_number)

    if not isinstance(payload, dict):
        raise EventParseError("Event record must be a JSON object",
                              raw_data=raw_data[:200], line_number=line_number)

    return payload


def _require(payload: dict[str, Any], key: str, kind: str) -> Any:
    if key not in payload:
        raise EventParseError(f"Missing '{key}' in {kind} payload",
                              context={"payload_keys": sorted(payload)})
    return payload[key]


def _as_int(value: Any, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise EventParseError(f"'{field}' must be an integer, got {value!r}")


def _as_list(raw: Any, kind: str) -> list[Any]:
    if not isinstance(raw, (list, tuple)):
        raise EventParseError(f"{kind} must be a list, got {type(raw).__name__}")
    return list(raw)


def _as_mapping(payload: Any, kind: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise EventParseError(f"{kind} payload must be an object, got {type(payload).__name__}")
    return payload


def parse_tags(raw: Any) -> tuple[Tag, ...]:
    """Parse tags given as plain names or {"name", "line"} objects."""
    if not raw:
        return ()
    tags = []
    for item in _as_list(raw, "tags"):
        if isinstance(item, str):
            tags.append(Tag(name=item))
        elif isinstance(item, dict) and "name" in item:
            tags.append(Tag(name=str(item["name"]), line=_as_int(item.get("line", 0), "line")))
        else:
            raise EventParseError(f"Invalid tag entry: {item!r}")
    return tuple(tags)


def parse_rows(raw: Any) -> tuple[DataTableRow, ...]:
    """Parse table rows given as cell lists or {"cells", "line"} objects."""
    rows = []
    for item in _as_list(raw, "rows"):
        if isinstance(item, dict):
            cells = item.get("cells", [])
            line = _as_int(item.get("line", 0), "line")
        else:
            cells, line = item, 0
        if not isinstance(cells, (list, tuple)):
            raise EventParseError(f"Invalid table row: {item!r}")
        rows.append(DataTableRow(cells=tuple(str(cell) for cell in cells), line=line))
    return tuple(rows)


def _statement_fields(payload: dict[str, Any], kind: str) -> dict[str, Any]:
    return {
        "keyword": str(_require(payload, "keyword", kind)),
        "name": str(payload.get("name", "")),
        "line": _as_int(payload.get("line", 0), "line"),
    }


def parse_feature(payload: dict[str, Any]) -> Feature:
    return Feature(
        **_statement_fields(payload, "feature"),
        description=str(payload.get("description", "")),
        tags=parse_tags(payload.get("tags")),
    )


def parse_background(payload: dict[str, Any]) -> Background:
    return Background(
        **_statement_fields(payload, "background"),
        description=str(payload.get("description", "")),
    )


def parse_scenario(payload: dict[str, Any]) -> Scenario:
    return Scenario(
        **_statement_fields(payload, "scenario"),
        description=str(payload.get("description", "")),
        tags=parse_tags(payload.get("tags")),
    )


def parse_scenario_outline(payload: dict[str, Any]) -> ScenarioOutline:
    return ScenarioOutline(
        **_statement_fields(payload, "scenario outline"),
        description=str(payload.get("description", "")),
        tags=parse_tags(payload.get("tags")),
    )


def parse_examples(payload: dict[str, Any]) -> Examples:
    return Examples(
        **_statement_fields(payload, "examples"),
        rows=parse_rows(payload.get("rows", [])),
        tags=parse_tags(payload.get("tags")),
    )


def parse_step(payload: dict[str, Any]) -> Step:
    rows = payload.get("rows")
    doc_string = payload.get("doc_string")
    if isinstance(doc_string, str):
        doc_string = {"value": doc_string}
    elif doc_string is not None:
        doc_string = _as_mapping(doc_string, "doc string")
    return Step(
        **_statement_fields(payload, "step"),
        rows=parse_rows(rows) if rows is not None else None,
        doc_string=DocString(
            value=str(doc_string.get("value", "")),
            content_type=str(doc_string.get("content_type", "")),
            line=_as_int(doc_string.get("line", 0), "line"),
        ) if doc_string else None,
    )


def parse_match(payload: Optional[dict[str, Any]]) -> Match:
    if not payload:
        return Match()
    payload = _as_mapping(payload, "match")
    return Match(
        location=str(payload.get("location", "")),
        arguments=tuple(str(arg) for arg in _as_list(payload.get("arguments", []), "arguments")),
    )


def parse_result(payload: dict[str, Any]) -> Result:
    payload = _as_mapping(payload, "result")
    duration = payload.get("duration")
    return Result(
        status=str(_require(payload, "status", "result")),
        duration=_as_int(duration, "duration") if duration is not None else None,
        error_message=payload.get("error_message"),
    )


def decode_attachment(payload: dict[str, Any]) -> tuple[str, bytes]:
    """Return (mime_type, data) from an attachment record with base64 data."""
    mime_type = str(_require(payload, "mime_type", "attachment"))
    try:
        data = base64.b64decode(str(payload.get("data", "")), validate=True)
    except (binascii.Error, ValueError) as e:
        raise EventParseError(f"Attachment data is not valid base64: {e}")
    return mime_type, data
