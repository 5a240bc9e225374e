"""Fallback handling when selected values become unavailable."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .diagnostics import DiagnosticsSink
from .rules import RuleEvaluator
from .types import Option

logger = logging.getLogger(__name__)


@dataclass
class SelectionChange:
    """A selection replaced by a fallback value."""

    option_id: str
    old_value: Optional[str]
    new_value: str
    reason: str

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "option_id": self.option_id,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "reason": self.reason,
        }


def _find_option(options: Sequence[Option], option_id: str) -> Optional[Option]:
    for option in options:
        if option.id == option_id:
            return option
    return None


def first_available_value(
    option: Option,
    options: Sequence[Option],
    selections: Mapping[str, str],
    diagnostics: Optional[DiagnosticsSink] = None,
) -> Optional[str]:
    """Get the id of the first selectable value of an option."""
    values = RuleEvaluator(diagnostics).visible_values(option, selections, options)
    return values[0].id if values else None


def is_value_available(
    option_id: str,
    value_id: str,
    options: Sequence[Option],
    selections: Mapping[str, str],
    diagnostics: Optional[DiagnosticsSink] = None,
) -> bool:
    """Check whether a value can currently be selected."""
    option = _find_option(options, option_id)
    if option is None:
        return False

    values = RuleEvaluator(diagnostics).visible_values(option, selections, options)
    return any(value.id == value_id for value in values)


def available_values(
    option_id: str,
    options: Sequence[Option],
    selections: Mapping[str, str],
    diagnostics: Optional[DiagnosticsSink] = None,
) -> List[Dict[str, str]]:
    """Get the currently selectable values of an option as {id, name} pairs."""
    option = _find_option(options, option_id)
    if option is None:
        return []

    values = RuleEvaluator(diagnostics).visible_values(option, selections, options)
    return [{"id": value.id, "name": value.name} for value in values]


def correct_selections(
    options: Sequence[Option],
    selections: Mapping[str, str],
    diagnostics: Optional[DiagnosticsSink] = None,
) -> Tuple[Dict[str, str], List[SelectionChange]]:
    """
    Replace missing or no-longer-visible selections with the first visible value.

    Option visibility is computed once from the incoming selections; value
    eligibility sees corrections made earlier in the same pass.

    Args:
        options: Flat option list in authored order
        selections: Current option id -> value id map (not modified)

    Returns:
        Tuple of (corrected selections, list of changes made)
    """
    evaluator = RuleEvaluator(diagnostics)
    corrected = dict(selections)
    changes: List[SelectionChange] = []

    visibility = evaluator.resolve_visibility(options, selections)

    for option in options:
        if not visibility.is_option_visible(option.id):
            continue

        current = corrected.get(option.id)
        values = evaluator.visible_values(option, corrected, options)
        if not values:
            continue
        if current is not None and any(v.id == current for v in values):
            continue

        fallback = values[0]
        corrected[option.id] = fallback.id
        changes.append(
            SelectionChange(
                option_id=option.id,
                old_value=current,
                new_value=fallback.id,
                reason="Selected value no longer visible" if current else "No value selected",
            )
        )
        logger.info(
            f"Fallback applied for '{option.name}': {current or 'none'} -> {fallback.name}"
        )

    return corrected, changes
