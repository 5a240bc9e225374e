"""Conditional logic evaluation for options and option values."""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .diagnostics import DiagnosticKind, DiagnosticsSink, report
from .types import (
    ConditionalLogic,
    ConditionalRule,
    LogicCombinator,
    Option,
    OptionValue,
    RuleOperator,
    VisibilityResult,
)

logger = logging.getLogger(__name__)

SelectionState = Mapping[str, str]


class RuleEvaluator:
    """Decides which options and values are eligible for the current selections.

    Rules only compare raw selections, never another option's computed
    visibility, so evaluation is a single pass with no recursion.
    """

    def __init__(self, diagnostics: Optional[DiagnosticsSink] = None):
        """
        Initialize the evaluator.

        Args:
            diagnostics: Optional sink receiving dangling or malformed rule reports
        """
        self.diagnostics = diagnostics

    def evaluate_rule(
        self,
        rule: ConditionalRule,
        selections: SelectionState,
        known_option_ids: Optional[set] = None,
    ) -> bool:
        """
        Evaluate a single rule against the current selections.

        An unset selection fails equals/in and satisfies not_equals/not_in.
        A missing or empty selection counts as unset.

        Args:
            rule: Rule to evaluate
            selections: Current option id -> value id map
            known_option_ids: Ids of every option in the configurator, used to
                detect dangling references

        Returns:
            True if the rule is satisfied
        """
        if known_option_ids is not None and rule.option_id not in known_option_ids:
            report(
                self.diagnostics,
                DiagnosticKind.DANGLING_OPTION,
                f"Rule {rule.id} references unknown option '{rule.option_id}'",
                option_id=rule.option_id,
            )
            return False

        selected = selections.get(rule.option_id)
        operator = rule.operator

        if operator == RuleOperator.EQUALS:
            return bool(selected) and selected == rule.value

        if operator == RuleOperator.NOT_EQUALS:
            return not selected or selected != rule.value

        if operator in (RuleOperator.IN, RuleOperator.NOT_IN):
            if not isinstance(rule.value, (list, tuple)):
                report(
                    self.diagnostics,
                    DiagnosticKind.MALFORMED_RULE,
                    f"Rule {rule.id} uses '{operator.value}' with a non-list value",
                    option_id=rule.option_id,
                )
                return False
            if operator == RuleOperator.IN:
                return bool(selected) and selected in rule.value
            return not selected or selected not in rule.value

        report(
            self.diagnostics,
            DiagnosticKind.UNKNOWN_OPERATOR,
            f"Unknown conditional operator: {operator}",
            option_id=rule.option_id,
        )
        return False

    def evaluate_logic(
        self,
        logic: Optional[ConditionalLogic],
        selections: SelectionState,
        known_option_ids: Optional[set] = None,
    ) -> bool:
        """Evaluate a rule set. Absent or disabled logic is always eligible."""
        if logic is None or not logic.enabled:
            return True

        results = (
            self.evaluate_rule(rule, selections, known_option_ids) for rule in logic.rules
        )
        if logic.operator == LogicCombinator.OR:
            return any(results)
        return all(results)

    def should_show_option(
        self,
        option: Option,
        selections: SelectionState,
        options: Sequence[Option],
    ) -> bool:
        """Check whether an option is currently eligible."""
        return self.evaluate_logic(
            option.conditional_logic, selections, _option_ids(options)
        )

    def should_show_value(
        self,
        value: OptionValue,
        selections: SelectionState,
        options: Sequence[Option],
    ) -> bool:
        """Check whether a single option value is currently selectable."""
        return self.evaluate_logic(
            value.conditional_logic, selections, _option_ids(options)
        )

    def visible_values(
        self,
        option: Option,
        selections: SelectionState,
        options: Sequence[Option],
    ) -> List[OptionValue]:
        """Get the option's selectable values, in authored order."""
        known = _option_ids(options)
        return [
            value
            for value in option.values
            if self.evaluate_logic(value.conditional_logic, selections, known)
        ]

    def resolve_visibility(
        self,
        options: Sequence[Option],
        selections: SelectionState,
    ) -> VisibilityResult:
        """
        Compute visible options and their selectable values.

        Groups are evaluated on their own logic only; a hidden group does
        not hide its children.

        Args:
            options: Flat option list in authored order
            selections: Current option id -> value id map

        Returns:
            VisibilityResult preserving the input order
        """
        known = _option_ids(options)
        visible_option_ids: List[str] = []
        visible_value_ids: Dict[str, List[str]] = {}

        for option in options:
            if not self.evaluate_logic(option.conditional_logic, selections, known):
                continue

            visible_option_ids.append(option.id)
            visible_value_ids[option.id] = [
                value.id
                for value in option.values
                if self.evaluate_logic(value.conditional_logic, selections, known)
            ]

        logger.debug(
            f"Visible options: {len(visible_option_ids)}/{len(options)}"
        )
        return VisibilityResult(
            visible_option_ids=visible_option_ids,
            visible_value_ids=visible_value_ids,
        )


def _option_ids(options: Sequence[Option]) -> set:
    return {option.id for option in options}


def resolve_visibility(
    options: Sequence[Option],
    selections: SelectionState,
    diagnostics: Optional[DiagnosticsSink] = None,
) -> VisibilityResult:
    """Compute visible options and values with a one-off evaluator."""
    return RuleEvaluator(diagnostics).resolve_visibility(options, selections)
