"""Tests for selection fallback helpers."""

import pytest

from core.configurator import (
    ConditionalLogic,
    ConditionalRule,
    Option,
    OptionValue,
    available_values,
    correct_selections,
    first_available_value,
    is_value_available,
)


def gated(option_id, value_id):
    return ConditionalLogic(
        enabled=True, rules=[ConditionalRule(option_id=option_id, value=value_id)]
    )


@pytest.fixture
def options():
    return [
        Option(
            id="material",
            name="Material",
            values=[OptionValue(id="wood", name="Wood"), OptionValue(id="steel", name="Steel")],
        ),
        Option(
            id="finish",
            name="Finish",
            values=[
                OptionValue(id="oiled", name="Oiled", conditional_logic=gated("material", "wood")),
                OptionValue(id="brushed", name="Brushed", conditional_logic=gated("material", "steel")),
                OptionValue(id="painted", name="Painted"),
            ],
        ),
        Option(
            id="legs",
            name="Legs",
            values=[OptionValue(id="four", name="Four")],
            conditional_logic=gated("material", "steel"),
        ),
    ]


class TestAvailability:
    """Tests for availability lookups."""

    def test_first_available_value(self, options):
        finish = options[1]

        assert first_available_value(finish, options, {"material": "wood"}) == "oiled"
        assert first_available_value(finish, options, {"material": "steel"}) == "brushed"
        assert first_available_value(finish, options, {}) == "painted"

    def test_is_value_available(self, options):
        assert is_value_available("finish", "oiled", options, {"material": "wood"})
        assert not is_value_available("finish", "oiled", options, {"material": "steel"})
        assert not is_value_available("missing", "oiled", options, {})

    def test_available_values(self, options):
        values = available_values("finish", options, {"material": "steel"})

        assert values == [
            {"id": "brushed", "name": "Brushed"},
            {"id": "painted", "name": "Painted"},
        ]
        assert available_values("missing", options, {}) == []


class TestCorrectSelections:
    """Tests for fallback correction."""

    def test_fills_missing_selections(self, options):
        corrected, changes = correct_selections(options, {})

        assert corrected == {"material": "wood", "finish": "oiled"}
        assert [c.option_id for c in changes] == ["material", "finish"]
        assert changes[0].reason == "No value selected"
        assert changes[0].old_value is None

    def test_replaces_invisible_selection(self, options):
        selections = {"material": "steel", "finish": "oiled", "legs": "four"}
        corrected, changes = correct_selections(options, selections)

        assert corrected["finish"] == "brushed"
        assert len(changes) == 1
        assert changes[0].to_dict() == {
            "option_id": "finish",
            "old_value": "oiled",
            "new_value": "brushed",
            "reason": "Selected value no longer visible",
        }

    def test_keeps_valid_selections(self, options):
        selections = {"material": "wood", "finish": "painted"}
        corrected, changes = correct_selections(options, selections)

        assert corrected == selections
        assert changes == []

    def test_input_not_modified(self, options):
        selections = {"material": "steel", "finish": "oiled"}
        correct_selections(options, selections)

        assert selections == {"material": "steel", "finish": "oiled"}
