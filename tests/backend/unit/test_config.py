from testiflow.backend.config import load_settings


def test_load_settings_reads_expected_env(monkeypatch) -> None:
    monkeypatch.setenv("TESTIFLOW_SERVER_SALT", "salt-1")
    monkeypatch.setenv("TESTIFLOW_DATABASE_URL", "postgresql://local")
    monkeypatch.setenv("TESTIFLOW_HOST", "localhost")
    monkeypatch.setenv("TESTIFLOW_PORT", "9000")
    monkeypatch.setenv("TESTIFLOW_CORS_ORIGINS", "http://localhost:3000, http://localhost:5173")

    settings = load_settings()

    assert settings.server_salt == "salt-1"
    assert settings.database_url == "postgresql://local"
    assert settings.host == "localhost"
    assert settings.port == 9000
    assert settings.cors_origins == ("http://localhost:3000", "http://localhost:5173")


def test_load_settings_applies_defaults(monkeypatch) -> None:
    monkeypatch.delenv("TESTIFLOW_SERVER_SALT", raising=False)
    monkeypatch.delenv("TESTIFLOW_DATABASE_URL", raising=False)
    monkeypatch.delenv("TESTIFLOW_HOST", raising=False)
    monkeypatch.delenv("TESTIFLOW_PORT", raising=False)
    monkeypatch.delenv("TESTIFLOW_CORS_ORIGINS", raising=False)

    settings = load_settings()

    assert settings.server_salt == "dev-salt"
    assert settings.database_url is None
    assert settings.host == "127.0.0.1"
    assert settings.port == 8080
    assert settings.cors_origins == ("http://localhost:3000",)
