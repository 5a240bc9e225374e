"""Editor-time checks for configurator definitions.

These checks help authors while building a configurator. The resolver
never relies on them and never rejects data because of them.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Set

from .types import ConditionalLogic, Option, RuleOperator


@dataclass
class ValidationResult:
    """Outcome of a validation check."""

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"is_valid": self.is_valid, "errors": list(self.errors)}


def _result(errors: List[str]) -> ValidationResult:
    return ValidationResult(is_valid=not errors, errors=errors)


def available_condition_options(
    current_option_id: str, options: Sequence[Option]
) -> List[Option]:
    """Options a rule on current_option_id may reference."""
    return [o for o in options if o.id != current_option_id and not o.is_group]


def validate_conditional_logic(
    logic: ConditionalLogic, options: Sequence[Option]
) -> ValidationResult:
    """
    Check that every rule references an existing option and existing values.

    Args:
        logic: Rule set to check
        options: All options of the configurator

    Returns:
        ValidationResult with one message per problem
    """
    errors: List[str] = []

    if not logic.rules:
        return _result(["At least one rule is required"])

    by_id = {o.id: o for o in options}

    for number, rule in enumerate(logic.rules, start=1):
        referenced = by_id.get(rule.option_id)
        if referenced is None:
            errors.append(f"Rule {number}: Referenced option not found")
            continue

        value_ids = set(referenced.value_ids())

        if rule.operator in (RuleOperator.EQUALS, RuleOperator.NOT_EQUALS):
            if not isinstance(rule.value, str) or rule.value not in value_ids:
                errors.append(
                    f'Rule {number}: Referenced value not found in option "{referenced.name}"'
                )
        elif rule.operator in (RuleOperator.IN, RuleOperator.NOT_IN):
            if not isinstance(rule.value, (list, tuple)):
                errors.append(
                    f"Rule {number}: Value must be an array for 'in' and 'not_in' operators"
                )
            else:
                invalid = [v for v in rule.value if v not in value_ids]
                if invalid:
                    errors.append(f"Rule {number}: Invalid values: {', '.join(invalid)}")
        else:
            errors.append(f"Rule {number}: Unknown operator '{rule.operator}'")

    return _result(errors)


def has_circular_dependency(
    option_id: str,
    logic: ConditionalLogic,
    options: Sequence[Option],
    visited: Optional[Set[str]] = None,
) -> bool:
    """
    Check whether following rule references from option_id leads back to it.

    Resolution does not need this (rules only read raw selections); it
    warns authors about rule chains that can lock each other out.
    """
    visited = set(visited or ())
    if option_id in visited:
        return True
    visited.add(option_id)

    by_id = {o.id: o for o in options}
    for rule in logic.rules:
        referenced = by_id.get(rule.option_id)
        if referenced is None or referenced.conditional_logic is None:
            continue
        if not referenced.conditional_logic.enabled:
            continue
        if has_circular_dependency(
            rule.option_id, referenced.conditional_logic, options, visited
        ):
            return True

    return False


def validate_configurator(options: Sequence[Option]) -> ValidationResult:
    """
    Check id uniqueness, group references and every enabled rule set.

    Option ids and value ids must be unique across the whole configurator.
    """
    errors: List[str] = []
    option_ids: Set[str] = set()
    value_ids: Set[str] = set()
    group_ids = {o.id for o in options if o.is_group}

    for option in options:
        if option.id in option_ids:
            errors.append(f"Duplicate option id: {option.id}")
        option_ids.add(option.id)

        for value in option.values:
            if value.id in value_ids:
                errors.append(f"Duplicate value id: {value.id} (option {option.id})")
            value_ids.add(value.id)

        if option.group_id is not None and option.group_id not in group_ids:
            errors.append(f'Option "{option.name}": group {option.group_id} not found')

    for option in options:
        logic = option.conditional_logic
        if logic is not None and logic.enabled:
            for message in validate_conditional_logic(logic, options).errors:
                errors.append(f'Option "{option.name}": {message}')
            if has_circular_dependency(option.id, logic, options):
                errors.append(f'Option "{option.name}": circular conditional logic')

        for value in option.values:
            value_logic = value.conditional_logic
            if value_logic is not None and value_logic.enabled:
                for message in validate_conditional_logic(value_logic, options).errors:
                    errors.append(f'Value "{value.name}" of "{option.name}": {message}')

    return _result(errors)


def validate_selections(
    options: Sequence[Option], selections: Mapping[str, str]
) -> ValidationResult:
    """Check that every selection names an existing option and one of its values."""
    errors: List[str] = []
    by_id = {o.id: o for o in options}

    for option_id, value_id in selections.items():
        option = by_id.get(option_id)
        if option is None:
            errors.append(f"Selection for unknown option: {option_id}")
        elif not option.values:
            errors.append(f"Selection for option without values: {option_id}")
        elif option.get_value(value_id) is None:
            errors.append(f"Unknown value {value_id} for option {option_id}")

    return _result(errors)
