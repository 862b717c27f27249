import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.schemas.suggestion import SuggestionCriteria


def make_settings(**overrides):
    return Settings(_env_file=None, database_url="sqlite+pysqlite://", **overrides)


@pytest.mark.parametrize("value", [0, -5, 101, 1000])
def test_suggestion_cap_outside_criteria_range_is_rejected(value):
    with pytest.raises(ValidationError):
        make_settings(suggestion_max_results=value)


@pytest.mark.parametrize("value", [1, 100])
def test_suggestion_cap_bounds_build_criteria(value):
    criteria = SuggestionCriteria.from_settings(make_settings(suggestion_max_results=value))

    assert criteria.max_suggestions == value


def test_required_count_must_be_positive():
    with pytest.raises(ValidationError):
        make_settings(elective_required_count=0)

    assert make_settings(elective_required_count=250).elective_required_count == 250


def test_cors_origins_accept_comma_separated_string():
    settings = make_settings(cors_origins="http://a.test, http://b.test,")

    assert settings.cors_origins == ["http://a.test", "http://b.test"]
