"""Starting and restarting a challenge."""

import pytest

from conftest import FIRST_DAY, TODAY, day
from exceptions import ConfigurationError, ConsistencyError, ValidationError
from services.challenge_config import ChallengeConfig
from services.challenge_setup import ChallengeSetup
from services.day_log import DayLog
from services.edit_coordinator import EditCoordinator
from services.settings_store import SettingsStore


@pytest.fixture
def setup(db, clock) -> ChallengeSetup:
    return ChallengeSetup(db, clock)


def test_start_writes_settings_and_seeds(setup, db):
    config = setup.start(["Read", "Run", "Write"], first_challenge_date="2024-01-01",
                         boost_interval_days=5, default_buffer_per_habit=2)

    assert setup.current() == config
    assert config.habit_count == 3
    stored = SettingsStore(db).get_all()
    assert stored["first_challenge_date"] == "2024-01-01"
    assert stored["habits"] == ["Read", "Run", "Write"]
    assert config.habits == ("Read", "Run", "Write")
    first = DayLog(db, config).get_record(FIRST_DAY).to_dict()
    assert first["buffer"] == [2, 2, 2]
    assert first["completion"] == [None, None, None]


def test_defaults_come_from_environment(setup):
    config = setup.start(["Read"])

    assert config.first_challenge_date == TODAY
    assert config.boost_interval_days == 7
    assert config.default_buffer_per_habit == 1


def test_restart_same_day_discards_stray_record(setup, db):
    setup.start(["Read"])
    config = setup.start(["Read", "Run"])

    day_log = DayLog(db, config)
    assert day_log.count() == 1
    assert day_log.get_record(TODAY).to_dict()["buffer"] == [1, 1]


def test_restart_with_history_is_refused(setup, db, clock):
    setup.start(["Read", "Run"], first_challenge_date=FIRST_DAY)
    EditCoordinator.from_settings(db, clock).ensure_date_visible(TODAY)

    with pytest.raises(ConsistencyError):
        setup.start(["Swim"])
    assert setup.current().habits == ("Read", "Run")


def test_single_older_record_is_not_a_stray(setup):
    setup.start(["Read"], first_challenge_date=day(3))
    with pytest.raises(ConsistencyError):
        setup.start(["Read"])


@pytest.mark.parametrize(
    "kwargs",
    [
        {"habits": []},
        {"habits": ["Read", " "]},
        {"habits": ["Read", "Read"]},
        {"habits": ["Read"], "boost_interval_days": 0},
        {"habits": ["Read"], "default_buffer_per_habit": -1},
        {"habits": ["Read"], "first_challenge_date": "2024-01-11"},
        {"habits": ["Read"], "first_challenge_date": "01/01/2024"},
    ],
)
def test_invalid_setup(setup, db, kwargs):
    with pytest.raises(ValidationError):
        setup.start(**kwargs)
    with pytest.raises(ConfigurationError):
        setup.current()


def test_config_rejects_malformed_settings(db):
    SettingsStore(db).set_many({
        "boost_interval_days": 7,
        "first_challenge_date": "not a date",
        "habit_count": 2,
    })
    with pytest.raises(ConfigurationError):
        ChallengeConfig.load(SettingsStore(db))


def test_failed_seed_leaves_no_settings(setup, db, monkeypatch):
    def refuse(self, records, repairs=None):
        raise ConsistencyError("append refused")

    monkeypatch.setattr(DayLog, "append_records", refuse)

    with pytest.raises(ConsistencyError):
        setup.start(["Read"], first_challenge_date=FIRST_DAY)
    assert SettingsStore(db).get_all() == {}
    with pytest.raises(ConfigurationError):
        setup.current()
