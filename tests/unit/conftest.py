"""Fixtures built on the shared template factories."""

import pytest

from form_test_helpers import build_evaluation_template

from form_engine.state.session import FormSession


@pytest.fixture
def evaluation_template():
    return build_evaluation_template()


@pytest.fixture
def session(evaluation_template, sync_settings):
    """A synchronous session over the evaluation template."""
    with FormSession(evaluation_template, settings=sync_settings) as form_session:
        yield form_session
