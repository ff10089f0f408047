from dashboard.core.config import Config


def test_defaults_point_to_local_service(monkeypatch):
    monkeypatch.delenv("API_BASE_URL", raising=False)
    cfg = Config()
    assert cfg.api_base_url == "http://127.0.0.1:8000"
    assert cfg.request_timeout > 0


def test_base_url_from_environment_loses_trailing_slash(monkeypatch):
    monkeypatch.setenv("API_BASE_URL", "https://detector.example.com/")
    assert Config().api_base_url == "https://detector.example.com"


def test_session_cookie_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SESSION_NAME", "sid")
    monkeypatch.setenv("SESSION_SECURE", "true")
    from dashboard.core.config import SessionCookieConfig

    cookie = SessionCookieConfig()
    assert cookie.name == "sid"
    assert cookie.secure is True
