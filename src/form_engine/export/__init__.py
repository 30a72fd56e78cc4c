"""Export payloads for document rendering."""

from form_engine.export.printable import (
    PrintableForm,
    PrintableQuestion,
    PrintableSection,
    build_printable_form,
    format_answer,
    format_value,
)

__all__ = [
    "PrintableForm",
    "PrintableQuestion",
    "PrintableSection",
    "build_printable_form",
    "format_answer",
    "format_value",
]
