from src.untis.config import DEFAULT_BASE_URL, UntisConfig
from src.untis.timecodec import HOUR_OFFSET


def test_defaults(monkeypatch):
    for name in ("UNTIS_BASE_URL", "UNTIS_SCHOOL", "UNTIS_HOUR_OFFSET", "LOG_JSON"):
        monkeypatch.delenv(name, raising=False)

    config = UntisConfig(_env_file=None)

    assert config.untis_base_url == DEFAULT_BASE_URL
    assert config.untis_school == ""
    assert config.untis_hour_offset == HOUR_OFFSET
    assert config.log_json is False


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("UNTIS_SCHOOL", "borglinz")
    monkeypatch.setenv("UNTIS_HOUR_OFFSET", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = UntisConfig(_env_file=None)

    assert config.untis_school == "borglinz"
    assert config.untis_hour_offset == 0
    assert config.log_level == "debug"
