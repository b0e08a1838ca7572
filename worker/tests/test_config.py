from leadfinder.core import config


def setup_function(function):
    config.get_settings.cache_clear()


def teardown_function(function):
    config.get_settings.cache_clear()


def test_get_settings_reads_env(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "abc123")
    monkeypatch.setenv("LEADS_MAX_RESULTS", "30")
    monkeypatch.setenv("LEADS_RETRY_ATTEMPTS", "5")
    monkeypatch.setenv("LEADS_RETRY_DELAY", "0.5")
    monkeypatch.setenv("LEADS_COUNTRY", "Indonesia")

    settings = config.get_settings()

    assert settings.gemini_api_key == "abc123"
    assert settings.has_credential is True
    assert settings.max_results == 30
    assert settings.retry_attempts == 5
    assert settings.retry_delay == 0.5
    assert settings.country == "Indonesia"


def test_api_key_fallback(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "legacy-key")

    assert config.get_settings().gemini_api_key == "legacy-key"


def test_get_settings_warns_when_missing(monkeypatch, caplog):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "undefined")

    with caplog.at_level("WARNING"):
        settings = config.get_settings()

    assert "GEMINI_API_KEY is not configured" in " ".join(caplog.messages)
    assert settings.has_credential is False
    assert settings.max_results == 15
    assert settings.retry_attempts == 3
    assert settings.contact_min_length == 5
    assert settings.general_min_length == 1


def test_bad_numbers_fall_back_to_defaults(monkeypatch, caplog):
    monkeypatch.setenv("GEMINI_API_KEY", "abc123")
    monkeypatch.setenv("LEADS_MAX_RESULTS", "lots")
    monkeypatch.setenv("LEADS_RETRY_DELAY", "soon")

    with caplog.at_level("WARNING"):
        settings = config.get_settings()

    assert settings.max_results == 15
    assert settings.retry_delay == 2.0
    assert "LEADS_MAX_RESULTS" in " ".join(caplog.messages)
