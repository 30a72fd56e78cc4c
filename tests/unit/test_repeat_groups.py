"""Unit tests for repeatable-group row operations."""

import pytest

from form_engine.engine.normalizer import default_group_config, parse_repeatable_group_config
from form_engine.schemas.fields import FieldType
from form_engine.state import repeat_groups as rg


@pytest.fixture
def user_group():
    return parse_repeatable_group_config(
        {
            "columns": [
                {"key": "name", "label": "Name", "required": True},
                {"key": "active", "label": "Active", "type": "checkbox"},
            ],
            "minRows": 1,
            "maxRows": 3,
        }
    )


@pytest.fixture
def stakeholders():
    return default_group_config(FieldType.DATA_TABLE_SELECTOR)


class TestDefaults:
    """Tests for the rows a fresh form starts with."""

    def test_blank_row_values(self, user_group):
        assert rg.blank_row(user_group) == {"name": "", "active": False}

    def test_user_group_starts_at_min_rows(self, user_group):
        rows = rg.default_rows(user_group)
        assert rows == [{"name": "", "active": False}]

    def test_predefined_rows_seeded(self, stakeholders):
        rows = rg.default_rows(stakeholders)
        assert rows[0] == {"__rowId": "patients", "rowLabel": "Patients", "include": False, "benefit": ""}
        assert [r["__rowId"] for r in rows] == ["patients", "caregivers", "clinicians"]


class TestAddRemove:
    """Row counts stay within minRows/maxRows."""

    def test_add_until_full(self, user_group):
        rows = rg.default_rows(user_group)
        rows = rg.add_row(user_group, rows)
        rows = rg.add_row(user_group, rows)
        assert len(rows) == 3
        full = rg.add_row(user_group, rows)
        assert full is rows
        assert len(full) == 3

    def test_remove_stops_at_min_rows(self, user_group):
        rows = rg.default_rows(user_group)
        assert rg.remove_row(user_group, rows, 0) is rows

    def test_remove_by_index(self, user_group):
        rows = [{"name": "a"}, {"name": "b"}, {"name": "c"}]
        assert rg.remove_row(user_group, rows, 1) == [{"name": "a"}, {"name": "c"}]

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_remove_out_of_range_is_noop(self, user_group, index):
        rows = [{"name": "a"}, {"name": "b"}, {"name": "c"}]
        assert rg.remove_row(user_group, rows, index) is rows

    def test_unbounded_group(self):
        config = parse_repeatable_group_config({"columns": ["A"]})
        rows = [rg.blank_row(config) for _ in range(30)]
        assert rg.can_add_row(config, rows)

    def test_predefined_refuses_structure_edits(self, stakeholders):
        rows = rg.default_rows(stakeholders)
        assert rg.add_row(stakeholders, rows) is rows
        assert rg.remove_row(stakeholders, rows, 0) is rows


class TestUpdateAndToggle:
    """Tests for editing row values."""

    def test_update_merges_patch(self, user_group):
        rows = [{"name": "", "active": False}]
        updated = rg.update_row(rows, 0, {"name": "Acme"})
        assert updated == [{"name": "Acme", "active": False}]
        assert rows == [{"name": "", "active": False}]

    def test_update_bad_index(self):
        rows = [{"name": ""}]
        assert rg.update_row(rows, 4, {"name": "x"}) is rows

    def test_toggle_by_row_id(self, stakeholders):
        rows = rg.default_rows(stakeholders)
        toggled = rg.toggle_row(stakeholders, rows, "caregivers", True)
        assert toggled[1]["include"] is True
        assert rg.included_rows(stakeholders, toggled) == [toggled[1]]

    def test_toggle_unknown_row(self, stakeholders):
        rows = rg.default_rows(stakeholders)
        assert rg.toggle_row(stakeholders, rows, "payers", True) is rows


class TestMergePredefinedRows:
    """Saved rows are aligned with the current row templates."""

    def test_saved_values_kept_and_missing_templates_added(self, stakeholders):
        saved = [{"__rowId": "clinicians", "rowLabel": "Clinicians", "include": True, "benefit": "Time"}]
        merged = rg.merge_predefined_rows(stakeholders, saved)
        assert [r["__rowId"] for r in merged] == ["patients", "caregivers", "clinicians"]
        assert merged[2]["benefit"] == "Time"
        assert merged[0]["include"] is False

    def test_retired_rows_kept_at_end(self, stakeholders):
        saved = [{"__rowId": "payers", "rowLabel": "Payers", "include": True, "benefit": "Cost"}]
        merged = rg.merge_predefined_rows(stakeholders, saved)
        assert merged[-1]["__rowId"] == "payers"
        assert len(merged) == 4
