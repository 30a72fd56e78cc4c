"""Template and draft loading."""

from form_engine.templates.loader import load_draft, load_template, read_structured_file

__all__ = ["load_draft", "load_template", "read_structured_file"]
