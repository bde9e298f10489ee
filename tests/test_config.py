"""
Tests for environment-driven settings.
"""

from pathlib import Path

from theme_amender.config import DEFAULT_MODEL, DEFAULT_TIMEOUT, AmenderSettings


class TestAmenderSettings:
    def test_defaults(self, monkeypatch):
        for name in ("GEMINI_API_KEY", "THEME_AMENDER_MODEL", "THEME_AMENDER_TIMEOUT",
                     "THEME_AMENDER_CACHE_TTL", "THEME_AMENDER_STORE_DIR"):
            monkeypatch.delenv(name, raising=False)
        settings = AmenderSettings.from_env(load_env_file=False)
        assert settings.api_key == ""
        assert settings.model == DEFAULT_MODEL
        assert settings.timeout == DEFAULT_TIMEOUT
        assert settings.store_dir == Path("themes")

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        monkeypatch.setenv("THEME_AMENDER_MODEL", "gemini-2.5-pro")
        monkeypatch.setenv("THEME_AMENDER_TIMEOUT", "12.5")
        monkeypatch.setenv("THEME_AMENDER_CACHE_TTL", "60")
        monkeypatch.setenv("THEME_AMENDER_STORE_DIR", "/tmp/themes")
        settings = AmenderSettings.from_env(load_env_file=False)
        assert settings.api_key == "k"
        assert settings.model == "gemini-2.5-pro"
        assert settings.timeout == 12.5
        assert settings.cache_ttl == 60.0
        assert settings.store_dir == Path("/tmp/themes")

    def test_bad_numbers_fall_back(self, monkeypatch, caplog):
        monkeypatch.setenv("THEME_AMENDER_TIMEOUT", "soon")
        monkeypatch.setenv("THEME_AMENDER_CACHE_TTL", "-5")
        with caplog.at_level("WARNING", logger="theme_amender.config"):
            settings = AmenderSettings.from_env(load_env_file=False)
        assert settings.timeout == DEFAULT_TIMEOUT
        assert settings.cache_ttl == 3600.0
        assert "not a number" in caplog.text
        assert "must be positive" in caplog.text
