"""
Canonical models for Gherkin lifecycle event payloads.

This module defines immutable data structures for the statements and results
the host test engine hands to the reporter: features, scenarios, backgrounds,
steps with their multiline arguments, example tables, hook matches and step
results.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Tag:
    """A tag attached to a feature, scenario or outline."""
    name: str           # Including the leading '@'
    line: int = 0


@dataclass(frozen=True)
class DataTableRow:
    """One row of a step's data table."""
    cells: tuple[str, ...]
    line: int = 0


@dataclass(frozen=True)
class DocString:
    """A step's doc string argument."""
    value: str
    content_type: str = ""
    line: int = 0


@dataclass(frozen=True)
class Statement:
    """Common shape of every keyword statement."""
    keyword: str
    name: str
    line: int = 0


@dataclass(frozen=True)
class Feature(Statement):
    """A feature declaration."""
    description: str = ""
    tags: tuple[Tag, ...] = ()


@dataclass(frozen=True)
class Background(Statement):
    """Shared setup block run before each scenario of a feature."""
    description: str = ""


@dataclass(frozen=True)
class Scenario(Statement):
    """A concrete scenario, possibly instantiated from an outline."""
    description: str = ""
    tags: tuple[Tag, ...] = ()


@dataclass(frozen=True)
class ScenarioOutline(Statement):
    """A parameterized scenario template."""
    description: str = ""
    tags: tuple[Tag, ...] = ()


@dataclass(frozen=True)
class Examples(Statement):
    """Example rows of an outline; the first row is the header."""
    rows: tuple[DataTableRow, ...] = ()
    tags: tuple[Tag, ...] = ()


@dataclass(frozen=True)
class Step(Statement):
    """A declared step with its optional multiline argument."""
    rows: Optional[tuple[DataTableRow, ...]] = None
    doc_string: Optional[DocString] = None


@dataclass(frozen=True)
class Match:
    """Glue code matched for a step or hook."""
    location: str = ""
    arguments: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Result:
    """Outcome of a step or hook as reported by the engine."""
    status: str                          # passed, failed, skipped, pending, undefined, ...
    duration: Optional[int] = None       # Nanoseconds
    error_message: Optional[str] = None
