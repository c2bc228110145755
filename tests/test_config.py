import pytest

from app.config import env_flag, normalize_database_url, parse_flag


@pytest.mark.unit
class TestFlags:
    @pytest.mark.parametrize("value", [True, "true", "TRUE", " yes ", "1", "on", 1])
    def test_truthy(self, value):
        assert parse_flag(value) is True

    @pytest.mark.parametrize("value", [False, "false", "no", "0", "off", "", 0])
    def test_falsy(self, value):
        assert parse_flag(value, default=True) is False

    def test_missing_uses_default(self):
        assert parse_flag(None, default=True) is True
        assert parse_flag(None) is False

    def test_env_flag(self, monkeypatch):
        monkeypatch.setenv("ALLOW_MANUAL_CONFIRMATION", "yes")
        assert env_flag("ALLOW_MANUAL_CONFIRMATION") is True
        monkeypatch.delenv("ALLOW_MANUAL_CONFIRMATION")
        assert env_flag("ALLOW_MANUAL_CONFIRMATION") is False


@pytest.mark.unit
def test_postgres_scheme_is_normalised():
    assert normalize_database_url("postgres://u:p@db/app") == "postgresql://u:p@db/app"
    assert normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"
