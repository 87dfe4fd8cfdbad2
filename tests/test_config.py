import pytest

from apextux.config import Settings, load_settings


def test_dotted_lookup():
    settings = Settings({"clock": {"twelve_hour": True}})
    assert settings.get("clock.twelve_hour") is True
    assert settings.get_bool("clock.twelve_hour") is True


def test_missing_key_raises_key_error():
    settings = Settings({"clock": {}})
    with pytest.raises(KeyError):
        settings.get("clock.twelve_hour")
    with pytest.raises(KeyError):
        settings.get_int("interval.refresh")


def test_string_conversions():
    settings = Settings({"a": "true", "b": "off", "c": "42", "d": "2.5", "e": 7})
    assert settings.get_bool("a") is True
    assert settings.get_bool("b") is False
    assert settings.get_int("c") == 42
    assert settings.get_float("d") == 2.5
    assert settings.get_str("e") == "7"
    assert settings.get_float("e") == 7.0


def test_bad_values_raise_value_error():
    settings = Settings({"a": "maybe", "b": "many", "c": {"x": 1}})
    with pytest.raises(ValueError):
        settings.get_bool("a")
    with pytest.raises(ValueError):
        settings.get_int("b")
    with pytest.raises(ValueError):
        settings.get_str("c")


def test_load_files_and_environment(tmp_path):
    user = tmp_path / "user.toml"
    user.write_text('[crypto]\ncurrency = "EUR"\n[interval]\nrefresh = 30\n')
    local = tmp_path / "settings.toml"
    local.write_text("[interval]\nrefresh = 10\n")
    settings = load_settings(
        [user, tmp_path / "settings", tmp_path / "absent"],
        {"APEX_CLOCK__TWELVE_HOUR": "true", "HOME": "/nowhere", "APEX_DEBUG": "1"},
    )
    assert settings.get_str("crypto.currency") == "EUR"
    assert settings.get_int("interval.refresh") == 10
    assert settings.get_bool("clock.twelve_hour") is True
    assert settings.get_bool("debug") is True
    with pytest.raises(KeyError):
        settings.get("home")


def test_environment_overrides_files(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text("[sysinfo]\npolling_interval = 2000\n")
    settings = load_settings([path], {"APEX_SYSINFO__POLLING_INTERVAL": "500"})
    assert settings.get_int("sysinfo.polling_interval") == 500


def test_no_sources_gives_empty_settings():
    settings = load_settings([], {})
    with pytest.raises(KeyError):
        settings.get("anything")