"""Form session: the single owner of mutable form state.

``FormSession`` wires the pure components together. Every change goes
through ``dispatch`` and the reducer; after each edit the session

1. recomputes derived scores synchronously when the answer set changed,
2. schedules a debounced validation of the edited field against its live
   requiredness,
3. revisits fields whose conditional rules read the edited field: errors of
   fields that became hidden are cleared, fields still showing an error are
   revalidated.

Field configuration blobs are normalized once per template and cached.
"""

import copy
import hashlib
import json
import logging
import threading
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from form_engine.config.settings import EngineSettings
from form_engine.engine.conditional import should_require_field, should_show_field
from form_engine.engine.normalizer import NormalizedField, normalize_field
from form_engine.engine.validation import FieldErrors, validate_question
from form_engine.errors import FormEngineError, UnknownFieldError
from form_engine.schemas.fields import ROW_FIELD_TYPES, FieldConfig, FormTemplate
from form_engine.schemas.repeatable import RepeatableGroupConfig
from form_engine.schemas.scores import DerivedScores
from form_engine.schemas.submission import DraftSnapshot, SubmissionPayload, SubmissionStatus
from form_engine.scoring.calculator import calculate_scores_from_answers
from form_engine.state import repeat_groups
from form_engine.state.actions import (
    FormAction,
    HydrateInitialData,
    Reset,
    SetAnswer,
    SetCurrentSection,
    SetDerivedScores,
    SetError,
    SetLoading,
    SetRepeatRows,
    SetTemplate,
)
from form_engine.state.debounce import Debouncer
from form_engine.state.reducer import FormState, clamp_section, form_reducer, initial_state

logger = logging.getLogger(__name__)

Listener = Callable[[FormState], None]
Row = Dict[str, Any]


def snapshot_fingerprint(answers: Mapping[str, Any], rows: Mapping[str, List[Row]]) -> str:
    """SHA-256 of the canonical JSON form of a draft snapshot."""
    canonical = json.dumps(
        {"answers": answers, "rows": rows},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class FormSession:
    """Form state container for one reviewer editing one template.

    Args:
        template: The questionnaire being filled in.
        settings: Engine settings; defaults when omitted.
        initial_data: Optional saved draft to hydrate from.
    """

    def __init__(
        self,
        template: FormTemplate,
        settings: Optional[EngineSettings] = None,
        initial_data: Optional[Union[DraftSnapshot, Mapping[str, Any]]] = None,
    ):
        self.settings = settings or EngineSettings()
        self._lock = threading.RLock()
        self._state = initial_state()
        self._fields: Dict[str, NormalizedField] = {}
        self._dependents: Dict[str, List[str]] = {}
        self._listeners: List[Listener] = []
        self._debouncer = Debouncer(self.settings.validation_debounce_seconds)

        self.set_template(template)
        if initial_data is not None:
            self.hydrate(initial_data)

    # ── State access ─────────────────────────────────────────────────

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def template(self) -> FormTemplate:
        return self._state.template

    @property
    def answers(self) -> Dict[str, Any]:
        return dict(self._state.answers)

    @property
    def errors(self) -> Dict[str, str]:
        return dict(self._state.errors)

    @property
    def derived_scores(self) -> Optional[DerivedScores]:
        return self._state.derived_scores

    @property
    def current_section(self) -> int:
        return self._state.current_section

    @property
    def is_dirty(self) -> bool:
        return self._state.is_dirty

    def dispatch(self, action: FormAction) -> FormState:
        """Run one action through the reducer and notify listeners."""
        with self._lock:
            self._state = form_reducer(self._state, action)
            state = self._state
            listeners = list(self._listeners)
        for listener in listeners:
            listener(state)
        return state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every dispatch.

        Returns:
            A function that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ── Template ─────────────────────────────────────────────────────

    def set_template(self, template: FormTemplate) -> None:
        """Load a template, discarding answers, rows and errors."""
        with self._lock:
            self._debouncer.cancel_all()
            self._compile(template)
            self.dispatch(SetTemplate(template=template))
            self._recompute_scores()
        logger.debug(
            f"Loaded template '{template.id}' with {len(self._fields)} fields "
            f"in {template.section_count} sections"
        )

    def _compile(self, template: FormTemplate) -> None:
        fields: Dict[str, NormalizedField] = {}
        dependents: Dict[str, List[str]] = {}
        for field in template.all_fields():
            normalized = self._apply_limits(normalize_field(field))
            fields[field.field_code] = normalized
            if normalized.conditional is None:
                continue
            for source in normalized.conditional.referenced_fields():
                dependents.setdefault(source, []).append(field.field_code)
        self._fields = fields
        self._dependents = dependents

    def _apply_limits(self, normalized: NormalizedField) -> NormalizedField:
        group = normalized.repeatable
        if group is None:
            return normalized
        max_rows = self.settings.max_repeatable_rows
        limited = group.model_copy(
            update={
                "columns": group.columns[: self.settings.max_repeatable_columns],
                "min_rows": min(group.min_rows, max_rows),
                "max_rows": max_rows if group.max_rows is None else min(group.max_rows, max_rows),
                "rows": group.rows[:max_rows],
            }
        )
        return replace(normalized, repeatable=limited)

    def get_field(self, field_code: str) -> FieldConfig:
        return self._normalized(field_code).field

    def _normalized(self, field_code: str) -> NormalizedField:
        normalized = self._fields.get(field_code)
        if normalized is None:
            raise UnknownFieldError(field_code)
        return normalized

    def dependents_of(self, field_code: str) -> List[str]:
        """Fields whose conditional rules read ``field_code``."""
        return list(self._dependents.get(field_code, []))

    # ── Answers ──────────────────────────────────────────────────────

    def set_answer(self, field_code: str, value: Any) -> None:
        """Store an answer and run the post-edit pipeline."""
        with self._lock:
            if field_code not in self._fields:
                logger.debug(f"Storing answer for unknown field '{field_code}'")
            self.dispatch(SetAnswer(field_code=field_code, value=value))
            self._recompute_scores()
            self._after_edit(field_code)

    def set_repeat_rows(self, field_code: str, rows: List[Row]) -> None:
        """Replace the row list of a repeatable group or data-table selector."""
        with self._lock:
            if field_code not in self._fields:
                logger.debug(f"Storing rows for unknown field '{field_code}'")
            self.dispatch(SetRepeatRows(field_code=field_code, rows=rows))
            self._after_edit(field_code)

    def set_field_value(self, field_code: str, value: Any) -> None:
        """Widget entry point: route row kinds to the row set, others to answers."""
        normalized = self._fields.get(field_code)
        if normalized is not None and normalized.field.type in ROW_FIELD_TYPES:
            self.set_repeat_rows(field_code, value if isinstance(value, list) else [])
        else:
            self.set_answer(field_code, value)

    def get_value(self, field_code: str) -> Any:
        normalized = self._fields.get(field_code)
        if normalized is not None and normalized.field.type in ROW_FIELD_TYPES:
            return self.get_rows(field_code)
        return self._state.answers.get(field_code)

    def get_rows(self, field_code: str) -> List[Row]:
        """Stored rows, or the group's default rows when none were stored yet."""
        stored = self._state.rows.get(field_code)
        if stored is not None:
            return [dict(row) for row in stored]
        group = self._fields[field_code].group_config if field_code in self._fields else None
        return repeat_groups.default_rows(group) if group is not None else []

    def _recompute_scores(self) -> None:
        scores = calculate_scores_from_answers(self._state.answers, self.settings.scoring_fields)
        if scores != self._state.derived_scores:
            self.dispatch(SetDerivedScores(scores=scores))

    def _after_edit(self, field_code: str) -> None:
        self._schedule_validation(field_code)
        for dependent in self._dependents.get(field_code, []):
            if not self.is_visible(dependent):
                self._debouncer.cancel(dependent)
                if dependent in self._state.errors:
                    self.dispatch(SetError(field_code=dependent, message=None))
            elif dependent in self._state.errors:
                self._schedule_validation(dependent)

    def _schedule_validation(self, field_code: str) -> None:
        if field_code not in self._fields:
            return
        self._debouncer.schedule(field_code, lambda: self.validate_field_now(field_code))

    # ── Repeatable groups ────────────────────────────────────────────

    def _group(self, field_code: str) -> RepeatableGroupConfig:
        group = self._normalized(field_code).group_config
        if group is None:
            raise FormEngineError(f"Field '{field_code}' has no row layout")
        return group

    def _apply_rows(self, field_code: str, rows: List[Row], updated: List[Row]) -> bool:
        if updated is rows:
            return False
        self.set_repeat_rows(field_code, updated)
        return True

    def add_row(self, field_code: str) -> bool:
        """Append a blank row; False when the group is full or predefined."""
        with self._lock:
            group = self._group(field_code)
            rows = self.get_rows(field_code)
            return self._apply_rows(field_code, rows, repeat_groups.add_row(group, rows))

    def remove_row(self, field_code: str, index: int) -> bool:
        """Remove a row; False at ``min_rows``, for a bad index or a predefined group."""
        with self._lock:
            group = self._group(field_code)
            rows = self.get_rows(field_code)
            return self._apply_rows(field_code, rows, repeat_groups.remove_row(group, rows, index))

    def update_row(self, field_code: str, index: int, patch: Mapping[str, Any]) -> bool:
        with self._lock:
            self._group(field_code)
            rows = self.get_rows(field_code)
            return self._apply_rows(field_code, rows, repeat_groups.update_row(rows, index, patch))

    def toggle_row(self, field_code: str, row_id: str, included: bool) -> bool:
        """Include or exclude a predefined row by its row id."""
        with self._lock:
            group = self._group(field_code)
            rows = self.get_rows(field_code)
            updated = repeat_groups.toggle_row(group, rows, row_id, included)
            return self._apply_rows(field_code, rows, updated)

    # ── Visibility and requiredness ──────────────────────────────────

    def is_visible(self, field_code: str) -> bool:
        normalized = self._fields.get(field_code)
        if normalized is None:
            return True
        return should_show_field(normalized.conditional, self._state.answers)

    def is_required(self, field_code: str) -> bool:
        normalized = self._fields.get(field_code)
        if normalized is None:
            return False
        return should_require_field(
            normalized.conditional, normalized.field.is_required, self._state.answers
        )

    def is_info_box(self, field_code: str) -> bool:
        normalized = self._fields.get(field_code)
        return normalized is not None and normalized.is_info_box

    def visible_fields(self, section_index: Optional[int] = None) -> List[FieldConfig]:
        """Visible fields of one section, or of the whole template when None."""
        template = self._state.template
        if template is None:
            return []
        if section_index is None:
            candidates = template.all_fields()
        else:
            sections = template.ordered_sections()
            if not 0 <= section_index < len(sections):
                return []
            candidates = sections[section_index].ordered_fields()
        return [field for field in candidates if self.is_visible(field.field_code)]

    # ── Navigation ───────────────────────────────────────────────────

    def go_to_section(self, index: int) -> int:
        return self.dispatch(SetCurrentSection(index=index)).current_section

    def next_section(self) -> int:
        """Move forward one section; stays put on the last section."""
        return self.go_to_section(self._state.current_section + 1)

    def previous_section(self) -> int:
        """Move back one section; stays put on the first section."""
        return self.go_to_section(self._state.current_section - 1)

    def advance(self) -> bool:
        """Move forward only when the current section validates."""
        with self._lock:
            if self.validate_section(self._state.current_section):
                return False
            before = self._state.current_section
            return self.next_section() != before

    def set_loading(self, is_loading: bool) -> None:
        self.dispatch(SetLoading(is_loading=is_loading))

    # ── Validation ───────────────────────────────────────────────────

    def _check(self, field_code: str) -> Optional[str]:
        normalized = self._fields[field_code]
        return validate_question(
            normalized.field,
            self.get_value(field_code),
            is_required=self.is_required(field_code),
            normalized=normalized,
        )

    def validate_field_now(self, field_code: str) -> Optional[str]:
        """Validate one field immediately and record the outcome in the error map."""
        with self._lock:
            self._normalized(field_code)
            self._debouncer.cancel(field_code)
            error = self._check(field_code) if self.is_visible(field_code) else None
            if error != self._state.errors.get(field_code):
                self.dispatch(SetError(field_code=field_code, message=error))
            return error

    def _validate_fields(self, fields: List[FieldConfig]) -> FieldErrors:
        errors: FieldErrors = {}
        for field in fields:
            code = field.field_code
            self._debouncer.cancel(code)
            error = self._check(code) if self.is_visible(code) else None
            if error:
                errors[code] = error
            if error != self._state.errors.get(code):
                self.dispatch(SetError(field_code=code, message=error))
        return errors

    def validate_section(self, index: Optional[int] = None) -> FieldErrors:
        """Validate every field of a section; hidden fields have their errors cleared."""
        with self._lock:
            template = self._state.template
            index = self._state.current_section if index is None else index
            sections = template.ordered_sections()
            index = clamp_section(index, len(sections))
            if not sections:
                return {}
            return self._validate_fields(sections[index].ordered_fields())

    def validate_all(self) -> FieldErrors:
        """Validate the whole form against live visibility and requiredness."""
        with self._lock:
            return self._validate_fields(self._state.template.all_fields())

    def can_submit(self) -> bool:
        """True when no visible field fails validation; refreshes the error map."""
        self.flush_pending_validations()
        return not self.validate_all()

    def flush_pending_validations(self) -> int:
        return self._debouncer.flush()

    @property
    def pending_validations(self) -> List[str]:
        return self._debouncer.pending_keys

    # ── Drafts and payloads ──────────────────────────────────────────

    def hydrate(self, snapshot: Union[DraftSnapshot, Mapping[str, Any]]) -> bool:
        """Replace answers and rows with a saved draft.

        A snapshot identical to the last one applied is ignored, so repeated
        deliveries of the same draft cannot clobber newer edits.

        Returns:
            True when the snapshot was applied.
        """
        if not isinstance(snapshot, DraftSnapshot):
            snapshot = DraftSnapshot.model_validate(snapshot)

        fingerprint = snapshot_fingerprint(snapshot.answers, snapshot.rows)
        with self._lock:
            if fingerprint == self._state.hydrated_fingerprint:
                logger.debug(f"Draft {fingerprint[:12]} already applied, skipping")
                return False

            self._debouncer.cancel_all()
            self.dispatch(
                HydrateInitialData(
                    answers=copy.deepcopy(snapshot.answers),
                    rows=self._align_rows(snapshot.rows),
                    fingerprint=fingerprint,
                )
            )
            self._recompute_scores()
        logger.debug(
            f"Hydrated draft {fingerprint[:12]}: {len(snapshot.answers)} answers, "
            f"{len(snapshot.rows)} row groups"
        )
        return True

    def _align_rows(self, rows: Mapping[str, List[Row]]) -> Dict[str, List[Row]]:
        aligned = {}
        for code, saved in rows.items():
            normalized = self._fields.get(code)
            group = normalized.group_config if normalized is not None else None
            if group is not None and group.is_predefined:
                aligned[code] = repeat_groups.merge_predefined_rows(group, copy.deepcopy(saved))
            else:
                aligned[code] = copy.deepcopy(saved)
        return aligned

    def reset(self) -> None:
        """Return to a blank form for the same template."""
        with self._lock:
            self._debouncer.cancel_all()
            template = self._state.template
            self.dispatch(Reset())
            self.dispatch(SetTemplate(template=template))
            self._recompute_scores()

    def to_payload(self, status: SubmissionStatus = SubmissionStatus.DRAFT) -> SubmissionPayload:
        """Answers, rows and derived scores as plain records for persistence."""
        with self._lock:
            state = self._state
            return SubmissionPayload(
                template_id=state.template.id,
                answers=copy.deepcopy(state.answers),
                rows=copy.deepcopy(state.rows),
                derived_scores=state.derived_scores,
                status=status,
            )

    def submit(self) -> Optional[SubmissionPayload]:
        """A SUBMITTED payload, or None while the form has validation errors."""
        if not self.can_submit():
            logger.info(f"Submission blocked by {len(self._state.errors)} field error(s)")
            return None
        return self.to_payload(SubmissionStatus.SUBMITTED)

    # ── Lifecycle ────────────────────────────────────────────────────

    def close(self) -> None:
        """Drop pending validations."""
        self._debouncer.cancel_all()

    def __enter__(self) -> "FormSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
