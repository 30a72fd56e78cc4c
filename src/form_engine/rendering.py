"""Field-kind to renderer dispatch.

The engine does not draw widgets. It hands each renderer a ``FieldProps``
bundle and expects ``on_change`` to be called with a value shaped for the
field kind: a scalar for text/select kinds, a list of scalars for
multi-select/checkbox kinds and a list of row records for row kinds.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

from form_engine.engine.field_kinds import get_field_kind
from form_engine.errors import FormEngineError
from form_engine.schemas.fields import FieldConfig, FieldType
from form_engine.state.session import FormSession

logger = logging.getLogger(__name__)


@dataclass
class FieldProps:
    """Everything a renderer receives for one field."""

    configuration: FieldConfig
    current_value: Any
    on_change: Callable[[Any], None]
    error: Optional[str] = None
    disabled: bool = False


class FieldRenderer(Protocol):
    """Protocol for anything that renders one field kind."""

    def render(self, props: FieldProps) -> Any:
        ...


class RendererRegistry:
    """Maps each field kind to the renderer responsible for it."""

    def __init__(self) -> None:
        self._renderers: Dict[FieldType, FieldRenderer] = {}

    def register(self, field_type: FieldType, renderer: FieldRenderer) -> None:
        self._renderers[FieldType(field_type)] = renderer

    def get(self, field_type: FieldType) -> FieldRenderer:
        renderer = self._renderers.get(FieldType(field_type))
        if renderer is None:
            raise FormEngineError(
                f"No renderer registered for field kind '{FieldType(field_type).value}'. "
                f"Registered: {sorted(t.value for t in self._renderers)}"
            )
        return renderer

    def missing_kinds(self) -> List[FieldType]:
        return [field_type for field_type in FieldType if field_type not in self._renderers]

    def ensure_complete(self) -> None:
        """Raise when any field kind lacks a renderer."""
        missing = self.missing_kinds()
        if missing:
            raise FormEngineError(
                f"Missing renderers for field kinds: {[t.value for t in missing]}"
            )

    def render(self, props: FieldProps) -> Any:
        return self.get(props.configuration.type).render(props)


class SummaryRenderer:
    """Renders a field as one line of text: label, widget and current value."""

    def render(self, props: FieldProps) -> str:
        field = props.configuration
        widget = get_field_kind(field.type).widget
        line = f"{field.label} [{widget}]: {props.current_value!r}"
        if props.error:
            line += f" ! {props.error}"
        return line


def default_registry() -> RendererRegistry:
    """A registry with ``SummaryRenderer`` for every kind."""
    registry = RendererRegistry()
    renderer = SummaryRenderer()
    for field_type in FieldType:
        registry.register(field_type, renderer)
    return registry


def build_field_props(session: FormSession, field_code: str, disabled: bool = False) -> FieldProps:
    """Assemble renderer props for one field of a session.

    Info-box fields are always disabled since they collect no answer.
    """
    field = session.get_field(field_code)
    kind = get_field_kind(field.type)

    def on_change(value: Any) -> None:
        if not kind.validate_shape(value):
            logger.warning(
                f"Value for '{field_code}' does not match the {field.type.value} shape: {value!r}"
            )
        session.set_field_value(field_code, value)

    return FieldProps(
        configuration=field,
        current_value=session.get_value(field_code),
        on_change=on_change,
        error=session.errors.get(field_code),
        disabled=disabled or session.is_info_box(field_code),
    )


def render_section(
    session: FormSession,
    registry: RendererRegistry,
    section_index: Optional[int] = None,
    disabled: bool = False,
) -> List[Any]:
    """Render the visible fields of a section (the current one by default)."""
    index = session.current_section if section_index is None else section_index
    return [
        registry.render(build_field_props(session, field.field_code, disabled=disabled))
        for field in session.visible_fields(index)
    ]
