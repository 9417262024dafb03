"""
Модульные тесты проверки настроек при старте.
"""

import pytest
from pydantic import ValidationError

from fittrack.core.config import Settings
from fittrack.services.streak_calculator import BackdatedPolicy

pytestmark = pytest.mark.unit


def test_defaults():
    config = Settings(_env_file=None)
    assert config.TIMEZONE == "UTC"
    assert config.BACKDATED_STREAK_POLICY is BackdatedPolicy.ignore


def test_policy_parsed_from_string():
    config = Settings(_env_file=None, BACKDATED_STREAK_POLICY="recompute")
    assert config.BACKDATED_STREAK_POLICY is BackdatedPolicy.recompute


def test_unknown_policy_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, BACKDATED_STREAK_POLICY="sometimes")


def test_known_timezone_accepted():
    assert Settings(_env_file=None, TIMEZONE="Europe/Moscow").TIMEZONE == "Europe/Moscow"


@pytest.mark.parametrize("tz", ["Mars/Olympus_Mons", "Europe/Atlantis"])
def test_unknown_timezone_rejected(tz):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, TIMEZONE=tz)
