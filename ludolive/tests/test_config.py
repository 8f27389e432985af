"""
Tests for environment settings.
"""

from ..config import Settings, load_settings


class TestLoadSettings:
    """Tests for reading settings from the environment."""

    def test_defaults(self, monkeypatch):
        for name in (
            "LUDOLIVE_ENV",
            "ALLOWED_ORIGINS",
            "LUDOLIVE_FORCED_PASS_DELAY",
            "LUDOLIVE_LOG_LEVEL",
            "LUDOLIVE_HOST",
            "PORT",
        ):
            monkeypatch.delenv(name, raising=False)

        assert load_settings() == Settings()

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("LUDOLIVE_ENV", "production")
        monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example,")
        monkeypatch.setenv("LUDOLIVE_FORCED_PASS_DELAY", "0.25")
        monkeypatch.setenv("LUDOLIVE_LOG_LEVEL", "debug")
        monkeypatch.setenv("PORT", "8080")

        settings = load_settings()

        assert settings.allowed_origins == ["https://a.example", "https://b.example"]
        assert settings.forced_pass_delay == 0.25
        assert settings.log_level == "DEBUG"
        assert settings.port == 8080
        assert not settings.debug
