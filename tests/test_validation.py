"""Tests for editor-time validation checks."""

import pytest

from core.configurator import (
    ConditionalLogic,
    ConditionalRule,
    Option,
    OptionValue,
    RuleOperator,
    available_condition_options,
    has_circular_dependency,
    validate_conditional_logic,
    validate_configurator,
    validate_selections,
)


def logic(*rules):
    return ConditionalLogic(enabled=True, rules=list(rules))


@pytest.fixture
def options():
    return [
        Option(id="size", name="Size", values=[OptionValue(id="s"), OptionValue(id="l")]),
        Option(id="color", name="Color", values=[OptionValue(id="red")]),
        Option(id="group", name="Extras", is_group=True),
    ]


class TestValidateConditionalLogic:
    """Tests for rule set validation."""

    def test_valid(self, options):
        result = validate_conditional_logic(
            logic(
                ConditionalRule(option_id="size", value="s"),
                ConditionalRule(option_id="size", operator=RuleOperator.IN, value=["s", "l"]),
            ),
            options,
        )

        assert result.is_valid
        assert result.errors == []

    def test_requires_a_rule(self, options):
        result = validate_conditional_logic(logic(), options)

        assert not result.is_valid
        assert result.errors == ["At least one rule is required"]

    def test_missing_option(self, options):
        result = validate_conditional_logic(
            logic(ConditionalRule(option_id="ghost", value="x")), options
        )
        assert result.errors == ["Rule 1: Referenced option not found"]

    def test_missing_value(self, options):
        result = validate_conditional_logic(
            logic(ConditionalRule(option_id="size", value="xl")), options
        )
        assert result.errors == ['Rule 1: Referenced value not found in option "Size"']

    def test_in_requires_list(self, options):
        result = validate_conditional_logic(
            logic(ConditionalRule(option_id="size", operator=RuleOperator.NOT_IN, value="s")),
            options,
        )
        assert "must be an array" in result.errors[0]

    def test_in_reports_invalid_values(self, options):
        result = validate_conditional_logic(
            logic(ConditionalRule(option_id="size", operator=RuleOperator.IN, value=["s", "m", "xl"])),
            options,
        )
        assert result.errors == ["Rule 1: Invalid values: m, xl"]


class TestCircularDependency:
    """Tests for rule cycle detection."""

    def test_detects_cycle(self):
        a = Option(id="a", values=[OptionValue(id="a1")])
        b = Option(id="b", values=[OptionValue(id="b1")])
        a.conditional_logic = logic(ConditionalRule(option_id="b", value="b1"))
        b.conditional_logic = logic(ConditionalRule(option_id="a", value="a1"))

        assert has_circular_dependency("a", a.conditional_logic, [a, b])

    def test_chain_without_cycle(self):
        a = Option(id="a", values=[OptionValue(id="a1")])
        b = Option(id="b", values=[OptionValue(id="b1")], conditional_logic=logic(
            ConditionalRule(option_id="a", value="a1")
        ))
        c = Option(id="c", conditional_logic=logic(ConditionalRule(option_id="b", value="b1")))

        assert not has_circular_dependency("c", c.conditional_logic, [a, b, c])

    def test_disabled_logic_breaks_cycle(self):
        a = Option(id="a", values=[OptionValue(id="a1")])
        b = Option(id="b", values=[OptionValue(id="b1")])
        a.conditional_logic = logic(ConditionalRule(option_id="b", value="b1"))
        b.conditional_logic = ConditionalLogic(
            enabled=False, rules=[ConditionalRule(option_id="a", value="a1")]
        )

        assert not has_circular_dependency("a", a.conditional_logic, [a, b])


class TestValidateConfigurator:
    """Tests for whole-configurator checks."""

    def test_valid(self, options):
        assert validate_configurator(options).is_valid

    def test_duplicate_ids(self):
        options = [
            Option(id="a", values=[OptionValue(id="v")]),
            Option(id="a", values=[OptionValue(id="v")]),
        ]
        errors = validate_configurator(options).errors

        assert "Duplicate option id: a" in errors
        assert "Duplicate value id: v (option a)" in errors

    def test_unknown_group(self):
        options = [Option(id="a", name="A", group_id="nowhere")]
        errors = validate_configurator(options).errors

        assert errors == ['Option "A": group nowhere not found']

    def test_invalid_rules_are_prefixed(self, options):
        options.append(
            Option(
                id="trim",
                name="Trim",
                values=[
                    OptionValue(
                        id="t1",
                        name="Gold",
                        conditional_logic=logic(ConditionalRule(option_id="ghost", value="x")),
                    )
                ],
                conditional_logic=logic(ConditionalRule(option_id="size", value="xl")),
            )
        )
        errors = validate_configurator(options).errors

        assert 'Option "Trim": Rule 1: Referenced value not found in option "Size"' in errors
        assert 'Value "Gold" of "Trim": Rule 1: Referenced option not found' in errors


class TestValidateSelections:
    """Tests for selection map checks."""

    def test_valid(self, options):
        assert validate_selections(options, {"size": "l", "color": "red"}).is_valid

    def test_problems(self, options):
        result = validate_selections(
            options, {"ghost": "x", "group": "g1", "size": "xl"}
        )

        assert result.errors == [
            "Selection for unknown option: ghost",
            "Selection for option without values: group",
            "Unknown value xl for option size",
        ]


def test_available_condition_options(options):
    available = available_condition_options("size", options)
    assert [o.id for o in available] == ["color"]
