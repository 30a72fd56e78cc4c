"""Unit tests for the validation engine.

Tests:
- Single-rule semantics and empty handling
- First-failure-wins ordering
- Kind baselines (number, 0-3 range, required)
- Data-table-selector and repeatable-group post-checks
- Whole-form validation and rule builders
"""

import logging

import pytest

from form_engine.engine import validation as v
from form_engine.engine.validation import (
    build_effective_rules,
    is_valid_url,
    validate_field,
    validate_form_submission,
    validate_question,
    validate_rule,
)
from form_engine.schemas.fields import FieldType
from form_engine.schemas.validation import (
    ValidationConfig,
    ValidationRule,
    ValidationRuleType,
)

from form_test_helpers import PATENTS_LAYOUT, make_field


def make_rule(rule_type, value=None, message="failed"):
    return ValidationRule(type=ValidationRuleType(rule_type), value=value, message=message)


class TestRequiredRule:
    """Tests for the required rule."""

    @pytest.mark.parametrize("value", [None, "", []])
    def test_empty_values_fail(self, value):
        assert validate_rule(make_rule("required"), value) == "failed"

    @pytest.mark.parametrize("value", [0, False, " ", ["x"], "x"])
    def test_present_values_pass(self, value):
        assert validate_rule(make_rule("required"), value) is None


class TestOptionalValuesSkipFormatChecks:
    """Non-required rules pass on empty values."""

    @pytest.mark.parametrize("rule_type,value", [
        ("min", 5), ("max", 1), ("pattern", "^x$"), ("email", None), ("url", None), ("number", None),
    ])
    @pytest.mark.parametrize("empty", [None, "", []])
    def test_skipped(self, rule_type, value, empty):
        assert validate_rule(make_rule(rule_type, value), empty) is None


class TestBounds:
    """Tests for min/max."""

    def test_string_length(self):
        assert validate_rule(make_rule("min", 3), "ab") == "failed"
        assert validate_rule(make_rule("min", 3), "abc") is None
        assert validate_rule(make_rule("max", 3), "abcd") == "failed"

    def test_list_length(self):
        assert validate_rule(make_rule("min", 2), ["a"]) == "failed"
        assert validate_rule(make_rule("max", 2), ["a", "b"]) is None

    def test_numeric_values_compare_numerically(self):
        assert validate_rule(make_rule("max", 3), 4) == "failed"
        assert validate_rule(make_rule("min", 0), -1) == "failed"
        assert validate_rule(make_rule("max", 3), 3) is None

    def test_numeric_kind_compares_strings_numerically(self):
        assert validate_rule(make_rule("max", 3), "10", numeric=True) == "failed"
        assert validate_rule(make_rule("max", 3), "10") is None

    def test_non_numeric_bound_skipped(self):
        assert validate_rule(make_rule("min", "many"), "a") is None

    def test_numeric_kind_with_text_skipped(self):
        """The number rule reports non-numeric input, not the range."""
        assert validate_rule(make_rule("max", 3), "lots", numeric=True) is None


class TestPattern:
    """Tests for pattern rules."""

    def test_search_semantics(self):
        assert validate_rule(make_rule("pattern", r"\d{4}"), "US-2024-1") is None
        assert validate_rule(make_rule("pattern", r"^\d+$"), "12a") == "failed"

    def test_malformed_regex_passes(self, caplog):
        with caplog.at_level(logging.WARNING, logger="form_engine.engine.validation"):
            assert validate_rule(make_rule("pattern", "([unclosed"), "anything") is None
        assert "invalid validation pattern" in caplog.text

    def test_non_string_value_skipped(self):
        assert validate_rule(make_rule("pattern", r"^\d+$"), 12) is None


class TestFormats:
    """Tests for email, url and number rules."""

    @pytest.mark.parametrize("value", ["a@b.co", "first.last+tag@example.org"])
    def test_valid_email(self, value):
        assert validate_rule(make_rule("email"), value) is None

    @pytest.mark.parametrize("value", ["plain", "a@b", "a b@c.de", "@x.io"])
    def test_invalid_email(self, value):
        assert validate_rule(make_rule("email"), value) == "failed"

    @pytest.mark.parametrize("value", ["https://example.org/path?q=1", "ftp://files.example.com", "mailto:x@y.z"])
    def test_valid_url(self, value):
        assert is_valid_url(value)
        assert validate_rule(make_rule("url"), value) is None

    @pytest.mark.parametrize("value", ["example.org", "https://", "http:// spaced.com", "not a url"])
    def test_invalid_url(self, value):
        assert not is_valid_url(value)
        assert validate_rule(make_rule("url"), value) == "failed"

    @pytest.mark.parametrize("value", [3, "2.5", " 7 ", "1e3", "0x1F", True])
    def test_number_accepts(self, value):
        assert validate_rule(make_rule("number"), value) is None

    @pytest.mark.parametrize("value", ["abc", "Infinity", ["1"], {"a": 1}, float("nan")])
    def test_number_rejects(self, value):
        assert validate_rule(make_rule("number"), value) == "failed"

    def test_custom_is_noop(self):
        assert validate_rule(make_rule("custom"), "anything") is None


class TestFirstFailureWins:
    """The first failing rule supplies the only error."""

    def test_required_before_pattern(self):
        config = ValidationConfig(rules=[
            make_rule("required", message="Required!"),
            make_rule("pattern", r"^\d+$", message="Digits only"),
        ])
        assert validate_field(config, "") == "Required!"

    def test_pattern_before_min(self):
        config = ValidationConfig(rules=[
            make_rule("pattern", r"^\d+$", message="Digits only"),
            make_rule("min", 5, message="Too short"),
        ])
        assert validate_field(config, "ab") == "Digits only"
        assert validate_field(config, "12") == "Too short"

    def test_no_config(self):
        assert validate_field(None, "") is None


class TestEffectiveRules:
    """Tests for kind baselines."""

    def test_score_kind_rule_order(self):
        field = make_field("S", FieldType.SCORING_0_3, label="Score")
        rules = build_effective_rules(field, is_required=True).rules
        assert [r.type for r in rules] == [
            ValidationRuleType.REQUIRED,
            ValidationRuleType.NUMBER,
            ValidationRuleType.MIN,
            ValidationRuleType.MAX,
        ]
        assert rules[0].message == "Score is required"
        assert rules[2].message == "Score must be between 0 and 3"

    def test_integer_kind_has_number_rule_only(self):
        rules = build_effective_rules(make_field("I", FieldType.INTEGER)).rules
        assert [r.type for r in rules] == [ValidationRuleType.NUMBER]

    def test_custom_rules_appended(self):
        custom = ValidationConfig(rules=[make_rule("email")])
        rules = build_effective_rules(make_field("E"), True, custom).rules
        assert [r.type for r in rules] == [ValidationRuleType.REQUIRED, ValidationRuleType.EMAIL]


class TestValidateQuestion:
    """Tests for per-question validation."""

    def test_score_out_of_range(self):
        field = make_field("S", FieldType.SCORING_0_3, label="Unmet need")
        assert validate_question(field, 4) == "Unmet need must be between 0 and 3"
        assert validate_question(field, "x") == "Unmet need must be a valid number"
        assert validate_question(field, 2) is None

    def test_required_flag_from_field(self):
        field = make_field("T", label="Title", is_required=True)
        assert validate_question(field, "") == "Title is required"

    def test_explicit_requiredness_overrides_base(self):
        field = make_field("T", label="Title", is_required=True)
        assert validate_question(field, "", is_required=False) is None
        optional = make_field("O", label="Other")
        assert validate_question(optional, None, is_required=True) == "Other is required"

    def test_custom_rule_messages(self):
        field = make_field("E", validation={"rules": [{"type": "email", "message": "Enter a valid email"}]})
        assert validate_question(field, "nope") == "Enter a valid email"
        assert validate_question(field, "") is None

    def test_info_box_never_fails(self):
        field = make_field("I", is_required=True, validation={"isInfoBox": True})
        assert validate_question(field, None) is None

    def test_integer_min_compares_value(self):
        field = make_field("N", FieldType.INTEGER, validation={"rules": [{"type": "min", "value": 10, "message": "At least 10"}]})
        assert validate_question(field, "9") == "At least 10"
        assert validate_question(field, "12") is None


class TestSelectorPostCheck:
    """Data-table-selector structural checks."""

    @pytest.fixture
    def table(self):
        return make_field("F2.3", FieldType.DATA_TABLE_SELECTOR, label="Stakeholders")

    def rows(self, **included):
        return [
            {"__rowId": row_id, "rowLabel": row_id.title(), "include": row_id in included,
             "benefit": included.get(row_id, "")}
            for row_id in ("patients", "caregivers", "clinicians")
        ]

    def test_required_needs_one_included_row(self, table):
        assert validate_question(table, self.rows(), is_required=True) == (
            "Stakeholders: select at least one row"
        )

    def test_optional_with_nothing_included_passes(self, table):
        assert validate_question(table, self.rows(), is_required=False) is None

    def test_included_row_needs_note(self, table):
        error = validate_question(table, self.rows(caregivers="  "), is_required=True)
        assert error == "How do they benefit? is required for 'Caregivers'"

    def test_included_rows_with_notes_pass(self, table):
        assert validate_question(
            table, self.rows(patients="Faster diagnosis", clinicians="Less paperwork"), is_required=True
        ) is None

    def test_required_and_no_rows(self, table):
        assert validate_question(table, [], is_required=True) == "Stakeholders is required"

    def test_unlabelled_row_named_by_position(self, table):
        rows = [{"include": True, "benefit": ""}]
        assert validate_question(table, rows) == "How do they benefit? is required for 'row 1'"

    def test_custom_selector_and_note_columns(self):
        field = make_field(
            "T",
            FieldType.DATA_TABLE_SELECTOR,
            repeatable_config={
                "mode": "predefined",
                "selectorColumnKey": "use",
                "columns": [{"key": "use", "label": "Use", "type": "checkbox"}, {"key": "reason", "label": "Reason"}],
                "rows": [{"id": "a", "label": "A"}],
            },
        )
        assert validate_question(field, [{"__rowId": "a", "rowLabel": "A", "use": True, "reason": ""}]) == (
            "Reason is required for 'A'"
        )
        assert validate_question(field, [{"__rowId": "a", "rowLabel": "A", "use": True, "reason": "ok"}]) is None


class TestRepeatableGroupPostCheck:
    """User-mode repeatable-group structural checks."""

    @pytest.fixture
    def patents(self):
        return make_field("F3.3", FieldType.REPEATABLE_GROUP, label="Patents", repeatable_config=PATENTS_LAYOUT)

    def test_required_group_needs_rows(self, patents):
        layout = dict(PATENTS_LAYOUT, minRows=2)
        field = make_field("G", FieldType.REPEATABLE_GROUP, label="Partners", repeatable_config=layout)
        rows = [{"number": "1", "jurisdiction": ""}]
        assert validate_question(field, rows, is_required=True) == "Partners requires at least 2 rows"

    def test_partially_filled_row_needs_required_columns(self, patents):
        rows = [{"number": "", "jurisdiction": "EU"}]
        assert validate_question(patents, rows) == "Row 1: Patent number is required"

    def test_blank_rows_ignored_when_optional(self, patents):
        assert validate_question(patents, [{"number": "", "jurisdiction": ""}]) is None

    def test_blank_rows_checked_when_required(self, patents):
        rows = [{"number": "US123", "jurisdiction": ""}, {"number": "", "jurisdiction": ""}]
        assert validate_question(patents, rows, is_required=True) == "Row 2: Patent number is required"

    def test_complete_rows_pass(self, patents):
        assert validate_question(patents, [{"number": "US123", "jurisdiction": "US"}], is_required=True) is None


class TestValidateFormSubmission:
    """Tests for whole-form validation."""

    def test_collects_errors_by_code(self):
        fields = [
            make_field("A", label="Name", is_required=True),
            make_field("B", FieldType.SCORING_0_3, label="Score"),
            make_field("C", label="Notes"),
        ]
        errors = validate_form_submission(fields, {"B": 5, "C": "fine"})
        assert errors == {"A": "Name is required", "B": "Score must be between 0 and 3"}

    def test_required_overrides(self):
        fields = [make_field("C", label="Notes")]
        assert validate_form_submission(fields, {}, required_fields={"C"}) == {"C": "Notes is required"}

    def test_row_kinds_read_rows(self):
        fields = [make_field("P", FieldType.REPEATABLE_GROUP, label="Patents", repeatable_config=PATENTS_LAYOUT)]
        rows = {"P": [{"number": "", "jurisdiction": "JP"}]}
        assert validate_form_submission(fields, {}, rows=rows) == {"P": "Row 1: Patent number is required"}

    def test_valid_form(self):
        fields = [make_field("A", is_required=True)]
        assert validate_form_submission(fields, {"A": "ok"}) == {}


class TestBuilders:
    """Tests for validation rule builder helpers."""

    def test_required(self):
        assert v.required().type == ValidationRuleType.REQUIRED
        assert v.required("Needed").message == "Needed"

    def test_lengths(self):
        assert validate_rule(v.min_length(2), "a") == "Minimum length is 2"
        assert validate_rule(v.max_length(2), "abc") == "Maximum length is 2"

    def test_formats(self):
        assert validate_rule(v.email(), "x") == "Invalid email address"
        assert validate_rule(v.url(), "x") == "Invalid URL"
        assert validate_rule(v.pattern("^A", "Starts with A"), "B") == "Starts with A"

    def test_value_range(self):
        low, high = v.value_range(1, 5)
        config = ValidationConfig(rules=[low, high])
        assert validate_field(config, 0) == "Value must be between 1 and 5"
        assert validate_field(config, 6) == "Value must be between 1 and 5"
        assert validate_field(config, 3) is None
