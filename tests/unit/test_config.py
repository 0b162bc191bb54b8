"""
Unit tests for environment configuration.
"""

import pytest

from classboard.utils.config import Config


ENV_VARS = [
    "CLASSBOARD_GAP_MINUTES",
    "CLASSBOARD_STEP_DURATION",
    "CLASSBOARD_MIN_DURATION",
    "CLASSBOARD_MAX_DURATION",
    "CLASSBOARD_SUBMIT_TIME",
    "CLASSBOARD_LOCATION",
    "CLASSBOARD_LOCATION_OPTIONS",
    "CLASSBOARD_CURRENCY",
    "OUTPUT_DIR",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Environment without any classboard variables."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfig:
    """Test suite for Config."""

    def test_defaults(self, clean_env):
        """Test values when nothing is set."""
        config = Config()

        assert config.gap_minutes == 0
        assert config.step_duration == 30
        assert config.min_duration == 60
        assert config.max_duration == 180
        assert config.submit_time == "09:00"
        assert config.location == "Beach"
        assert "Lake" in config.location_options
        assert config.currency == "EUR"
        assert config.log_level == "INFO"
        assert config.validate()

    def test_environment_overrides(self, clean_env):
        """Test values are read from the environment."""
        clean_env.setenv("CLASSBOARD_GAP_MINUTES", "15")
        clean_env.setenv("CLASSBOARD_LOCATION_OPTIONS", "Beach, Lake,,")
        clean_env.setenv("CLASSBOARD_CURRENCY", "usd")
        clean_env.setenv("LOG_LEVEL", "debug")

        config = Config()

        assert config.gap_minutes == 15
        assert config.location_options == ["Beach", "Lake"]
        assert config.currency == "USD"
        assert config.log_level == "DEBUG"

    def test_validate_collects_errors(self, clean_env):
        """Test every invalid value is reported at once."""
        clean_env.setenv("CLASSBOARD_GAP_MINUTES", "-5")
        clean_env.setenv("CLASSBOARD_SUBMIT_TIME", "noon")
        clean_env.setenv("CLASSBOARD_CURRENCY", "EURO")

        config = Config()

        with pytest.raises(ValueError) as exc_info:
            config.validate()

        message = str(exc_info.value)
        assert "CLASSBOARD_GAP_MINUTES must not be negative" in message
        assert "CLASSBOARD_SUBMIT_TIME" in message
        assert "CLASSBOARD_CURRENCY" in message

    def test_invalid_log_level(self, clean_env):
        """Test an unknown log level is refused."""
        clean_env.setenv("LOG_LEVEL", "VERBOSE")

        with pytest.raises(ValueError, match="LOG_LEVEL"):
            Config().validate()

    def test_controller_settings(self, clean_env):
        """Test the controller settings follow the environment."""
        clean_env.setenv("CLASSBOARD_GAP_MINUTES", "10")
        clean_env.setenv("CLASSBOARD_MIN_DURATION", "30")

        settings = Config().controller_settings()

        assert settings.gap_minutes == 10
        assert settings.min_duration == 30
        assert isinstance(settings.location_options, tuple)

    def test_to_dict(self, clean_env):
        """Test the report header dictionary."""
        data = Config().to_dict()

        assert data["controller"]["gap_minutes"] == 0
        assert data["currency"] == "EUR"

    def test_create_output_directories(self, clean_env, tmp_path):
        """Test logs, reports and ledgers directories are created."""
        clean_env.setenv("OUTPUT_DIR", str(tmp_path / "out"))

        Config().create_output_directories()

        assert (tmp_path / "out" / "logs").is_dir()
        assert (tmp_path / "out" / "reports").is_dir()
        assert (tmp_path / "out" / "ledgers").is_dir()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
