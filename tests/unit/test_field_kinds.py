"""Unit tests for the field-kind capability table."""

import pytest

from form_engine.engine.field_kinds import (
    FIELD_KINDS,
    default_value_for,
    get_field_kind,
    is_multi_value_kind,
    is_numeric_kind,
)
from form_engine.schemas.fields import FieldType


class TestCapabilityTable:
    """Every kind has exactly one entry."""

    def test_covers_every_kind(self):
        assert set(FIELD_KINDS) == set(FieldType)

    def test_lookup_by_value(self):
        assert get_field_kind("SHORT_TEXT").widget == "Input"

    @pytest.mark.parametrize("field_type,widget", [
        (FieldType.LONG_TEXT, "Textarea"),
        (FieldType.SINGLE_SELECT, "Select"),
        (FieldType.CHECKBOX_GROUP, "CheckboxGroup"),
        (FieldType.DATA_TABLE_SELECTOR, "DataTableSelector"),
        (FieldType.SCORING_0_3, "ScoringComponent"),
    ])
    def test_widgets(self, field_type, widget):
        assert get_field_kind(field_type).widget == widget


class TestDefaults:
    """Tests for blank values of a fresh form."""

    @pytest.mark.parametrize("field_type", [
        FieldType.SHORT_TEXT, FieldType.LONG_TEXT, FieldType.DATE, FieldType.SINGLE_SELECT,
    ])
    def test_text_kinds_blank_string(self, field_type):
        assert default_value_for(field_type) == ""

    @pytest.mark.parametrize("field_type", [
        FieldType.INTEGER, FieldType.SCORING_0_3, FieldType.SCORING_MATRIX,
    ])
    def test_numeric_kinds_zero(self, field_type):
        assert default_value_for(field_type) == 0

    def test_multi_value_kinds_fresh_list(self):
        first = default_value_for(FieldType.MULTI_SELECT)
        second = default_value_for(FieldType.MULTI_SELECT)
        assert first == [] and second == []
        assert first is not second

    def test_flags(self):
        assert is_multi_value_kind(FieldType.REPEATABLE_GROUP)
        assert not is_multi_value_kind(FieldType.SHORT_TEXT)
        assert is_numeric_kind(FieldType.INTEGER)
        assert not is_numeric_kind(FieldType.DATE)


class TestShapeChecks:
    """Tests for the value representation each kind expects."""

    @pytest.mark.parametrize("value,expected", [(2, True), ("3", True), ("", True), ("two", False), ([1], False)])
    def test_integer(self, value, expected):
        assert get_field_kind(FieldType.INTEGER).validate_shape(value) is expected

    @pytest.mark.parametrize("value,expected", [(0, True), (3, True), ("1.5", True), (4, False), (-1, False), ("x", False)])
    def test_score(self, value, expected):
        assert get_field_kind(FieldType.SCORING_0_3).validate_shape(value) is expected

    def test_matrix_non_null(self):
        kind = get_field_kind(FieldType.SCORING_MATRIX)
        assert kind.validate_shape({"x": 1})
        assert not kind.validate_shape(None)

    @pytest.mark.parametrize("field_type", [
        FieldType.MULTI_SELECT, FieldType.CHECKBOX_GROUP, FieldType.REPEATABLE_GROUP, FieldType.DATA_TABLE_SELECTOR,
    ])
    def test_multi_value_kinds_need_lists(self, field_type):
        kind = get_field_kind(field_type)
        assert kind.validate_shape([])
        assert not kind.validate_shape("a")

    @pytest.mark.parametrize("value", ["text", 3, None, ["x"]])
    def test_text_kinds_accept_anything(self, value):
        assert get_field_kind(FieldType.SHORT_TEXT).validate_shape(value)
