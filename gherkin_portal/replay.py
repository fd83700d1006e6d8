"""
Replay of recorded lifecycle event logs.

An event log is a JSON-lines file, one event per line:

    {"event": "uri", "uri": "features/login.feature"}
    {"event": "feature", "keyword": "Feature", "name": "Login", "tags": ["@smoke"]}
    {"event": "result", "status": "passed"}
    {"event": "embedding", "mime_type": "image/png", "data": "<base64>"}

Malformed lines and unknown events are logged and skipped.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Union

from .errors import EventParseError
from .events import parsers
from .logging.config import get_logger
from .reporter import GherkinReporter

logger = get_logger(__name__)

Dispatcher = Callable[[GherkinReporter, dict[str, Any]], None]


def _embedding(reporter: GherkinReporter, payload: dict[str, Any]) -> None:
    mime_type, data = parsers.decode_attachment(payload)
    reporter.embedding(mime_type, data)


DISPATCH: dict[str, Dispatcher] = {
    "uri": lambda r, p: r.uri(str(p.get("uri", ""))),
    "feature": lambda r, p: r.feature(parsers.parse_feature(p)),
    "scenario_outline": lambda r, p: r.scenario_outline(parsers.parse_scenario_outline(p)),
    "examples": lambda r, p: r.examples(parsers.parse_examples(p)),
    "start_of_scenario_lifecycle": lambda r, p: r.start_of_scenario_lifecycle(parsers.parse_scenario(p)),
    "background": lambda r, p: r.background(parsers.parse_background(p)),
    "scenario": lambda r, p: r.scenario(parsers.parse_scenario(p)),
    "step": lambda r, p: r.step(parsers.parse_step(p)),
    "match": lambda r, p: r.match(parsers.parse_match(p)),
    "result": lambda r, p: r.result(parsers.parse_result(p)),
    "before": lambda r, p: r.before(parsers.parse_match(p.get("match")),
                                    parsers.parse_result(p.get("result") or {})),
    "after": lambda r, p: r.after(parsers.parse_match(p.get("match")),
                                  parsers.parse_result(p.get("result") or {})),
    "hooks_begin": lambda r, p: r.hooks_begin(bool(p.get("is_before", True))),
    "hooks_end": lambda r, p: r.hooks_end(bool(p.get("is_before", True))),
    "embedding": _embedding,
    "write": lambda r, p: r.write(str(p.get("text", ""))),
    "end_of_scenario_lifecycle": lambda r, p: r.end_of_scenario_lifecycle(parsers.parse_scenario(p)),
    "eof": lambda r, p: r.eof(),
    "done": lambda r, p: r.done(),
    "close": lambda r, p: r.close(),
}


@dataclass
class ReplayStats:
    """Counts of a replay run."""
    dispatched: int = 0
    skipped: int = 0


def replay_records(reporter: GherkinReporter, records: Iterable[dict[str, Any]]) -> ReplayStats:
    """Dispatch already-decoded event records to the reporter."""
    stats = ReplayStats()
    for record in records:
        name = record.get("event")
        dispatcher = DISPATCH.get(str(name))
        if dispatcher is None:
            logger.warning("Unknown event skipped", lifecycle_event=name)
            stats.skipped += 1
            continue
        try:
            dispatcher(reporter, record)
        except EventParseError as e:
            logger.warning("Malformed event skipped", lifecycle_event=name, reason=str(e))
            stats.skipped += 1
            continue
        stats.dispatched += 1
    return stats


def _read_records(lines: Iterable[str]) -> Iterable[dict[str, Any]]:
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            yield parsers.parse_json_line(line, line_number)
        except EventParseError as e:
            logger.warning("Unreadable event line skipped", line=line_number, reason=str(e))


def replay_file(path: Union[str, Path], reporter: GherkinReporter) -> ReplayStats:
    """Replay a JSON-lines event log into the reporter."""
    with open(path, encoding="utf-8") as f:
        stats = replay_records(reporter, _read_records(f))

    logger.info("Event log replayed", path=str(path),
                dispatched=stats.dispatched, skipped=stats.skipped)
    return stats
