"""Row operations for repeatable groups and data-table selectors.

All functions are pure: they take the current row list and return the next
one. A refused operation (adding past ``max_rows``, removing at
``min_rows``, structural edits on a predefined group) returns the input list
object itself so callers can detect the no-op with ``is``.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from form_engine.schemas.repeatable import ROW_ID_KEY, ROW_LABEL_KEY, RepeatableGroupConfig

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def blank_row(config: RepeatableGroupConfig) -> Row:
    """A row with every column at its blank value."""
    return {column.key: column.blank_value() for column in config.columns}


def seed_predefined_rows(config: RepeatableGroupConfig) -> List[Row]:
    """One unselected row per row template, tagged with its id and label."""
    selector = config.selector_key
    rows = []
    for template in config.rows:
        row: Row = {ROW_ID_KEY: template.id, ROW_LABEL_KEY: template.label, selector: False}
        for column in config.columns:
            if column.key != selector:
                row[column.key] = column.blank_value()
        rows.append(row)
    return rows


def default_rows(config: RepeatableGroupConfig) -> List[Row]:
    """Rows a fresh form starts with."""
    if config.is_predefined:
        return seed_predefined_rows(config)
    return [blank_row(config) for _ in range(config.min_rows)]


def merge_predefined_rows(config: RepeatableGroupConfig, saved: List[Row]) -> List[Row]:
    """Align saved rows with the current row templates.

    Saved rows keep their values; templates missing from the saved list are
    appended unselected. Saved rows whose template was removed are kept at
    the end so no entered text is lost.
    """
    by_id = {row.get(ROW_ID_KEY): row for row in saved if row.get(ROW_ID_KEY)}
    merged: List[Row] = []
    for seeded in seed_predefined_rows(config):
        existing = by_id.pop(seeded[ROW_ID_KEY], None)
        merged.append({**seeded, **existing} if existing is not None else seeded)
    merged.extend(row for row in saved if row.get(ROW_ID_KEY) in by_id)
    return merged


def can_add_row(config: RepeatableGroupConfig, rows: List[Row]) -> bool:
    if config.is_predefined:
        return False
    return config.max_rows is None or len(rows) < config.max_rows


def can_remove_row(config: RepeatableGroupConfig, rows: List[Row]) -> bool:
    if config.is_predefined:
        return False
    return len(rows) > config.min_rows


def add_row(config: RepeatableGroupConfig, rows: List[Row]) -> List[Row]:
    """Append a blank row unless the group is full."""
    if not can_add_row(config, rows):
        logger.debug(f"Refusing to add row: {len(rows)} rows, max {config.max_rows}")
        return rows
    return [*rows, blank_row(config)]


def remove_row(config: RepeatableGroupConfig, rows: List[Row], index: int) -> List[Row]:
    """Remove the row at ``index`` unless that would go below ``min_rows``."""
    if not can_remove_row(config, rows) or not 0 <= index < len(rows):
        logger.debug(f"Refusing to remove row {index}: {len(rows)} rows, min {config.min_rows}")
        return rows
    return [row for i, row in enumerate(rows) if i != index]


def update_row(rows: List[Row], index: int, patch: Mapping[str, Any]) -> List[Row]:
    """Merge ``patch`` into the row at ``index``."""
    if not 0 <= index < len(rows):
        return rows
    updated = list(rows)
    updated[index] = {**rows[index], **patch}
    return updated


def find_row_index(rows: List[Row], row_id: str) -> Optional[int]:
    for index, row in enumerate(rows):
        if row.get(ROW_ID_KEY) == row_id:
            return index
    return None


def toggle_row(
    config: RepeatableGroupConfig, rows: List[Row], row_id: str, included: bool
) -> List[Row]:
    """Mark a predefined row as included or excluded."""
    index = find_row_index(rows, row_id)
    if index is None:
        logger.debug(f"No row with id '{row_id}'")
        return rows
    return update_row(rows, index, {config.selector_key: bool(included)})


def included_rows(config: RepeatableGroupConfig, rows: List[Row]) -> List[Row]:
    return [row for row in rows if row.get(config.selector_key) is True]
