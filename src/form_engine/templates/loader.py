"""Load form templates and saved drafts from YAML or JSON files.

This is the file-reading edge around the pure engine; the engine itself only
ever sees already-parsed ``FormTemplate`` and ``DraftSnapshot`` objects.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from form_engine.errors import TemplateLoadError
from form_engine.schemas.fields import FormTemplate
from form_engine.schemas.submission import DraftSnapshot

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_YAML_SUFFIXES = {".yaml", ".yml"}


def read_structured_file(path: PathLike) -> Dict[str, Any]:
    """Read a YAML or JSON file whose top level is a mapping.

    Raises:
        TemplateLoadError: If the file is missing, unparseable or not a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise TemplateLoadError("File not found", str(path))

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in _YAML_SUFFIXES:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except yaml.YAMLError as e:
        raise TemplateLoadError(f"Invalid YAML ({e})", str(path)) from e
    except json.JSONDecodeError as e:
        raise TemplateLoadError(f"Invalid JSON ({e.msg} at line {e.lineno})", str(path)) from e

    if not isinstance(data, dict):
        raise TemplateLoadError("Expected a mapping at the top level", str(path))
    return data


def load_template(path: PathLike) -> FormTemplate:
    """Load and validate a form template.

    Args:
        path: A ``.yaml``/``.yml`` or ``.json`` file.

    Returns:
        The validated FormTemplate.

    Raises:
        TemplateLoadError: If the file cannot be read or fails validation.
    """
    data = read_structured_file(path)
    try:
        template = FormTemplate.model_validate(data)
    except ValidationError as e:
        raise TemplateLoadError(
            f"Invalid template ({e.error_count()} errors: {e.errors()[0]['msg']})", str(path)
        ) from e

    logger.debug(
        f"Loaded template '{template.id}' v{template.version} from {path}: "
        f"{template.section_count} sections, {len(template.all_fields())} fields"
    )
    return template


def load_draft(path: PathLike) -> DraftSnapshot:
    """Load a saved draft.

    The file holds either ``{"answers": {...}, "rows": {...}}`` or a bare
    answer mapping.

    Raises:
        TemplateLoadError: If the file cannot be read or fails validation.
    """
    data = read_structured_file(path)
    if not ({"answers", "rows"} & set(data)):
        data = {"answers": data}
    try:
        return DraftSnapshot.model_validate(data)
    except ValidationError as e:
        raise TemplateLoadError(f"Invalid draft ({e.errors()[0]['msg']})", str(path)) from e
