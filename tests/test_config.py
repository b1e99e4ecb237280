import pytest
from pydantic import ValidationError

from colombo.core.config import EnvironmentMode, Settings


def test_env_mode_is_case_insensitive(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "Production")

    settings = Settings(_env_file=None)

    assert settings.env_mode == EnvironmentMode.PRODUCTION
    assert settings.is_production
    assert not settings.is_development


def test_invalid_env_mode_is_rejected(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "qa")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_production_flags_unsafe_defaults():
    settings = Settings(
        _env_file=None,
        env_mode="production",
        database_url="sqlite+aiosqlite:///./colombo.db",
    )

    assert settings.validate_production_config() == ["SECRET_KEY", "DATABASE_URL"]


def test_production_config_complete():
    settings = Settings(
        _env_file=None,
        env_mode="production",
        secret_key="s3cret",
        database_url="postgresql+psycopg://colombo:pw@db:5432/colombo",
    )

    assert settings.validate_production_config() == []
    assert not settings.is_sqlite


def test_statistics_report_path():
    settings = Settings(_env_file=None, data_directory="exports", statistics_filename="daily.xlsx")

    assert settings.statistics_report_path.as_posix() == "exports/daily.xlsx"


@pytest.mark.parametrize(
    "url",
    ["mysql+aiomysql://colombo:pw@db:3306/colombo", "not a url"],
)
def test_unsupported_database_url_is_rejected(url):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, database_url=url)


def test_catalog_is_seeded_by_default_in_every_mode(monkeypatch):
    monkeypatch.delenv("SEED_CATALOG", raising=False)
    for mode in EnvironmentMode:
        assert Settings(_env_file=None, env_mode=mode.value).seed_catalog
