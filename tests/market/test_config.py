from market.config import Settings


def test_settings_read_declared_env_file(tmp_path, monkeypatch):
    monkeypatch.delenv("DELIVERY_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text(
        "DELIVERY_TIMEOUT_SECONDS=2.5\n"
        "CORS_ORIGINS=https://market.example, https://admin.market.example\n"
    )

    settings = Settings(_env_file=env_file)

    assert settings.delivery_timeout_seconds == 2.5
    assert settings.cors_origin_list == [
        "https://market.example",
        "https://admin.market.example",
    ]


def test_settings_accept_unknown_env_file_keys(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("FEATURE_FLAG=on\n")

    settings = Settings(_env_file=env_file)

    assert settings.model_extra["feature_flag"] == "on"


def test_settings_defaults_env_file_to_project_root():
    assert Settings.model_config["env_file"].endswith(".env")
    assert Settings.model_config["extra"] == "allow"


def test_test_environment_uses_test_database(monkeypatch):
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("TEST_DATABASE_URL", "sqlite:///./other_test.db")

    settings = Settings()

    assert settings.is_test
    assert settings.database_url == "sqlite:///./other_test.db"
