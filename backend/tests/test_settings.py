from timetabling.core.config import Settings
from timetabling.schemas.generator import GenerationConstraints


def test_list_settings_accept_comma_and_json_strings():
    settings = Settings(cors_origins="http://a.test, http://b.test", schedule_working_days='["Monday", "Tuesday"]')
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.schedule_working_days == ["monday", "tuesday"]


def test_generation_defaults_come_from_settings():
    constraints = GenerationConstraints()
    assert constraints.start_time == "08:00"
    assert constraints.end_time == "15:00"
    assert constraints.break_duration_minutes == 15
    assert [day.value for day in constraints.working_days] == [
        "monday",
        "tuesday",
        "wednesday",
        "thursday",
        "friday",
    ]
