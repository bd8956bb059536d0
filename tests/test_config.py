import pytest
from pydantic import ValidationError
from drivectl.config import Settings, get_settings


@pytest.fixture
def clean_env(monkeypatch):
    """Removes DRIVECTL_* variables so only explicit values are validated."""
    for key in [
        "DRIVECTL_CONFIG_DIR",
        "DRIVECTL_LOG_LEVEL",
        "DRIVECTL_DEFAULT_PROVIDER",
        "DRIVECTL_GDRIVE_CREDENTIALS_JSON",
    ]:
        monkeypatch.delenv(key, raising=False)


def test_settings_defaults(clean_env, tmp_path):
    settings = Settings(CONFIG_DIR=tmp_path)

    assert settings.DEFAULT_PROVIDER == "gdrive"
    assert settings.LOG_LEVEL == "WARNING"
    assert settings.LOG_FILE is None
    assert settings.ACCOUNTS_DIR == tmp_path / "accounts"
    assert settings.CURRENT_ACCOUNT_FILE == tmp_path / "current_account"


def test_settings_invalid_provider_raises_error(clean_env, tmp_path):
    with pytest.raises(ValidationError, match="Invalid DEFAULT_PROVIDER"):
        Settings(CONFIG_DIR=tmp_path, DEFAULT_PROVIDER="ftp")


def test_settings_log_level_is_normalized(clean_env, tmp_path):
    settings = Settings(CONFIG_DIR=tmp_path, LOG_LEVEL="debug")

    assert settings.LOG_LEVEL == "DEBUG"


def test_settings_invalid_log_level_raises_error(clean_env, tmp_path):
    with pytest.raises(ValidationError, match="Invalid LOG_LEVEL"):
        Settings(CONFIG_DIR=tmp_path, LOG_LEVEL="chatty")


def test_settings_read_from_environment(clean_env, monkeypatch, tmp_path):
    monkeypatch.setenv("DRIVECTL_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("DRIVECTL_DEFAULT_PROVIDER", "dropbox")

    settings = Settings()

    assert settings.CONFIG_DIR == tmp_path
    assert settings.DEFAULT_PROVIDER == "dropbox"


def test_settings_gdrive_credentials_from_file(clean_env, tmp_path):
    (tmp_path / "credentials.json").write_text('{"installed": {}}\n')

    settings = Settings(CONFIG_DIR=tmp_path)

    assert settings.GDRIVE_CREDENTIALS_JSON == '{"installed": {}}'


def test_settings_env_credentials_take_precedence(clean_env, tmp_path):
    (tmp_path / "credentials.json").write_text('{"from": "file"}')

    settings = Settings(CONFIG_DIR=tmp_path, GDRIVE_CREDENTIALS_JSON='{"from": "env"}')

    assert settings.GDRIVE_CREDENTIALS_JSON == '{"from": "env"}'


def test_get_settings_is_cached_and_creates_config_dir(mock_settings):
    first = get_settings()

    assert first is get_settings()
    assert mock_settings.CONFIG_DIR.is_dir()
