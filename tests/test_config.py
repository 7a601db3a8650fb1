"""
Tests for environment-driven engine settings.
"""

import pytest

from league_engine.config import EngineSettings, load_engine_settings
from league_engine.models import ScoringMode

ENV_VARS = [
    "LEAGUE_POINTS_FOR_WIN",
    "LEAGUE_POINTS_FOR_DRAW",
    "LEAGUE_POINTS_FOR_LOSS",
    "LEAGUE_SCORING_MODE",
    "LEAGUE_ALLOW_TIES",
    "LEAGUE_SETS_TO_WIN",
    "LEAGUE_TIEBREAK_POINTS",
    "LEAGUE_DEFAULT_COURTS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = load_engine_settings()
    assert settings == EngineSettings()
    points = settings.points_config()
    assert (points.points_win, points.points_draw, points.points_loss) == (3, 2, 1)


def test_overrides(monkeypatch):
    monkeypatch.setenv("LEAGUE_POINTS_FOR_WIN", "2")
    monkeypatch.setenv("LEAGUE_POINTS_FOR_LOSS", "0")
    monkeypatch.setenv("LEAGUE_SCORING_MODE", "STRICT")
    monkeypatch.setenv("LEAGUE_ALLOW_TIES", "false")
    monkeypatch.setenv("LEAGUE_SETS_TO_WIN", "3")

    settings = load_engine_settings()
    scoring = settings.scoring_config()

    assert settings.points_config().points_win == 2
    assert settings.points_config().points_loss == 0
    assert scoring.mode == ScoringMode.strict
    assert not scoring.allow_ties
    assert scoring.max_sets == 5


def test_blank_value_uses_default(monkeypatch):
    monkeypatch.setenv("LEAGUE_DEFAULT_COURTS", "  ")
    assert load_engine_settings().default_courts == 1


def test_invalid_integer(monkeypatch):
    monkeypatch.setenv("LEAGUE_TIEBREAK_POINTS", "seven")
    with pytest.raises(ValueError, match="LEAGUE_TIEBREAK_POINTS"):
        load_engine_settings()


def test_invalid_scoring_mode(monkeypatch):
    monkeypatch.setenv("LEAGUE_SCORING_MODE", "casual")
    with pytest.raises(ValueError, match="LEAGUE_SCORING_MODE"):
        load_engine_settings()


def test_schedule_config_uses_default_courts(monkeypatch):
    monkeypatch.setenv("LEAGUE_DEFAULT_COURTS", "3")
    monkeypatch.setenv("LEAGUE_SCORING_MODE", "strict")

    config = load_engine_settings().schedule_config(matches_per_team=2)

    assert config.courts == 3
    assert config.matches_per_team == 2
    assert config.scoring.mode == ScoringMode.strict


def test_schedule_config_override_wins():
    config = EngineSettings(default_courts=4).schedule_config(courts=2)
    assert config.courts == 2


def test_package_exports_settings_loader():
    import league_engine

    assert league_engine.load_engine_settings is load_engine_settings
    assert "load_engine_settings" in league_engine.__all__
