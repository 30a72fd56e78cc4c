"""Form session state: reducer, actions, debouncing and the session container."""

from form_engine.state.actions import (
    ActionType,
    ClearErrors,
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
from form_engine.state.reducer import FormState, form_reducer, initial_state
from form_engine.state.session import FormSession, snapshot_fingerprint

__all__ = [
    "ActionType",
    "ClearErrors",
    "Debouncer",
    "FormAction",
    "FormSession",
    "FormState",
    "HydrateInitialData",
    "Reset",
    "SetAnswer",
    "SetCurrentSection",
    "SetDerivedScores",
    "SetError",
    "SetLoading",
    "SetRepeatRows",
    "SetTemplate",
    "form_reducer",
    "initial_state",
    "snapshot_fingerprint",
]
