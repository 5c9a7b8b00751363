# tests/test_config.py
from dataclasses import FrozenInstanceError

import pytest

from rollcall.config import ConfigurationError, SchedulingConfig, Settings


def test_scheduling_config_from_settings_normalizes_tokens():
    settings = Settings(
        YES_TOKEN=" Yes ",
        NO_TOKEN="NO",
        MAYBE_TOKEN="Maybe",
        MIN_EVENT_DURATION_HOURS=3,
        SHORT_EVENT_WARNING_HOURS=4,
    )
    config = SchedulingConfig.from_settings(settings)

    assert config.yes_token == "yes"
    assert config.no_token == "no"
    assert config.maybe_token == "maybe"
    assert config.min_event_duration_hours == 3
    assert config.short_event_warning_hours == 4


def test_defaults_are_valid():
    assert SchedulingConfig().validate() == SchedulingConfig()


def test_validate_lists_every_problem():
    config = SchedulingConfig(
        min_event_duration_hours=0,
        player_combination_threshold_percentage=1.5,
        yes_token="x",
        no_token="x",
    )
    with pytest.raises(ConfigurationError) as excinfo:
        config.validate()

    message = str(excinfo.value)
    assert "MIN_EVENT_DURATION_HOURS" in message
    assert "PLAYER_COMBINATION_THRESHOLD_PERCENTAGE" in message
    assert "distinct" in message


def test_config_is_immutable():
    config = SchedulingConfig()
    with pytest.raises(FrozenInstanceError):
        config.min_event_duration_hours = 1


def test_consideration_minimum_must_not_exceed_event_minimum():
    config = SchedulingConfig(
        min_event_duration_hours=2,
        min_consideration_duration_hours=3,
    )
    with pytest.raises(ConfigurationError) as excinfo:
        config.validate()

    assert "must not exceed MIN_EVENT_DURATION_HOURS" in str(excinfo.value)
    # equal bars are fine
    SchedulingConfig(min_event_duration_hours=3, min_consideration_duration_hours=3).validate()
