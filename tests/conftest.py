"""Shared fixtures for the stage engine tests."""

import pytest

from tripstage.config import Config, PlanCompletionMode
from tripstage.state import clear_all_states


@pytest.fixture(autouse=True)
def _clean_state_store():
    clear_all_states()
    yield
    clear_all_states()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def every_config():
    return Config(plan_completion=PlanCompletionMode.EVERY)
