"""Capability table for the closed set of field kinds.

Each kind maps to one ``FieldKind`` entry describing the widget that renders
it, the blank value a fresh form starts with and the value shape a widget
must hand back through ``on_change``.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict

from form_engine.engine.coercion import to_number
from form_engine.schemas.fields import FieldType

ShapeCheck = Callable[[Any], bool]


def _any_shape(value: Any) -> bool:
    return True


def _numeric_shape(value: Any) -> bool:
    return not math.isnan(to_number(value))


def _score_shape(value: Any) -> bool:
    number = to_number(value)
    return not math.isnan(number) and 0 <= number <= 3


def _not_null_shape(value: Any) -> bool:
    return value is not None


def _list_shape(value: Any) -> bool:
    return isinstance(value, list)


@dataclass(frozen=True)
class FieldKind:
    """What the engine knows about one field kind."""

    type: FieldType
    widget: str
    default_factory: Callable[[], Any]
    is_multi_value: bool = False
    is_numeric: bool = False
    shape_check: ShapeCheck = _any_shape

    def default_value(self) -> Any:
        return self.default_factory()

    def validate_shape(self, value: Any) -> bool:
        """Whether a widget value has the representation this kind expects."""
        return self.shape_check(value)


FIELD_KINDS: Dict[FieldType, FieldKind] = {
    FieldType.SHORT_TEXT: FieldKind(FieldType.SHORT_TEXT, "Input", str),
    FieldType.LONG_TEXT: FieldKind(FieldType.LONG_TEXT, "Textarea", str),
    FieldType.INTEGER: FieldKind(
        FieldType.INTEGER, "NumberInput", int, is_numeric=True, shape_check=_numeric_shape
    ),
    FieldType.SINGLE_SELECT: FieldKind(FieldType.SINGLE_SELECT, "Select", str),
    FieldType.MULTI_SELECT: FieldKind(
        FieldType.MULTI_SELECT, "MultiSelect", list, is_multi_value=True, shape_check=_list_shape
    ),
    FieldType.CHECKBOX_GROUP: FieldKind(
        FieldType.CHECKBOX_GROUP, "CheckboxGroup", list, is_multi_value=True, shape_check=_list_shape
    ),
    FieldType.DATE: FieldKind(FieldType.DATE, "DateInput", str),
    FieldType.REPEATABLE_GROUP: FieldKind(
        FieldType.REPEATABLE_GROUP,
        "RepeatableGroup",
        list,
        is_multi_value=True,
        shape_check=_list_shape,
    ),
    FieldType.DATA_TABLE_SELECTOR: FieldKind(
        FieldType.DATA_TABLE_SELECTOR,
        "DataTableSelector",
        list,
        is_multi_value=True,
        shape_check=_list_shape,
    ),
    FieldType.SCORING_0_3: FieldKind(
        FieldType.SCORING_0_3, "ScoringComponent", int, is_numeric=True, shape_check=_score_shape
    ),
    FieldType.SCORING_MATRIX: FieldKind(
        FieldType.SCORING_MATRIX,
        "ScoringMatrixComponent",
        int,
        is_numeric=True,
        shape_check=_not_null_shape,
    ),
}


def get_field_kind(field_type: FieldType) -> FieldKind:
    return FIELD_KINDS[FieldType(field_type)]


def is_numeric_kind(field_type: FieldType) -> bool:
    return get_field_kind(field_type).is_numeric


def is_multi_value_kind(field_type: FieldType) -> bool:
    return get_field_kind(field_type).is_multi_value


def default_value_for(field_type: FieldType) -> Any:
    return get_field_kind(field_type).default_value()


__all__ = [
    "FIELD_KINDS",
    "FieldKind",
    "default_value_for",
    "get_field_kind",
    "is_multi_value_kind",
    "is_numeric_kind",
]
