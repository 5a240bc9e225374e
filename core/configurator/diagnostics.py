"""Diagnostics for dangling references and other recoverable problems.

Resolution never raises for bad data. Each problem is resolved to a safe
default and reported here instead.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class DiagnosticKind(str, Enum):
    """Category of a recoverable problem."""

    DANGLING_OPTION = "dangling_option"
    DANGLING_COMPONENT = "dangling_component"
    INCONSISTENT_SELECTION = "inconsistent_selection"
    UNKNOWN_OPERATOR = "unknown_operator"
    MALFORMED_RULE = "malformed_rule"
    INVALID_COLOR = "invalid_color"
    UNRESOLVED_DEFAULT = "unresolved_default"


@dataclass
class Diagnostic:
    """A single recoverable problem found while resolving."""

    kind: DiagnosticKind
    message: str
    option_id: Optional[str] = None
    value_id: Optional[str] = None
    component: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "option_id": self.option_id,
            "value_id": self.value_id,
            "component": self.component,
        }


DiagnosticsSink = Callable[[Diagnostic], None]


class DiagnosticsCollector:
    """List-backed sink that keeps every reported diagnostic."""

    def __init__(self):
        self.diagnostics: List[Diagnostic] = []

    def __call__(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def __len__(self) -> int:
        return len(self.diagnostics)

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        """Get diagnostics of a single kind."""
        return [d for d in self.diagnostics if d.kind == kind]

    def clear(self) -> None:
        self.diagnostics.clear()


def report(
    sink: Optional[DiagnosticsSink],
    kind: DiagnosticKind,
    message: str,
    option_id: Optional[str] = None,
    value_id: Optional[str] = None,
    component: Optional[str] = None,
    level: int = logging.WARNING,
) -> Diagnostic:
    """Log a diagnostic and forward it to the sink, if one is attached."""
    diagnostic = Diagnostic(
        kind=kind,
        message=message,
        option_id=option_id,
        value_id=value_id,
        component=component,
    )
    logger.log(level, f"[{kind.value}] {message}")

    if sink is not None:
        sink(diagnostic)
    return diagnostic
