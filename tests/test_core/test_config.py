"""Tests for application configuration settings."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from content_core.core.config import Settings


class TestContentSettings:
    """Test content fetch and render settings."""

    def test_should_have_default_fetch_timeout(self):
        """CONTENT_FETCH_TIMEOUT defaults to 30 seconds."""
        settings = Settings()

        assert settings.CONTENT_FETCH_TIMEOUT == 30.0
        assert settings.fetch_timeout == 30.0

    def test_should_disable_timeout_with_zero(self):
        """A zero timeout disables the bound on fetch rounds."""
        with patch.dict(os.environ, {"CONTENT_FETCH_TIMEOUT": "0"}):
            settings = Settings()

        assert settings.fetch_timeout is None

    def test_should_reject_negative_timeout(self):
        """Negative timeouts are invalid."""
        with patch.dict(os.environ, {"CONTENT_FETCH_TIMEOUT": "-1"}):
            with pytest.raises(ValidationError):
                Settings()

    def test_should_require_fetch_before_render_by_default(self):
        """Rendering requires fetched placeholders unless disabled."""
        assert Settings().CONTENT_REQUIRE_FETCH_BEFORE_RENDER is True

        with patch.dict(os.environ, {"CONTENT_REQUIRE_FETCH_BEFORE_RENDER": "false"}):
            assert Settings().CONTENT_REQUIRE_FETCH_BEFORE_RENDER is False

    def test_should_override_default_zone_via_environment(self):
        """CONTENT_DEFAULT_ZONE can be overridden via environment."""
        with patch.dict(os.environ, {"CONTENT_DEFAULT_ZONE": "sidebar"}):
            settings = Settings()

        assert settings.CONTENT_DEFAULT_ZONE == "sidebar"


class TestLoggingSettings:
    """Test logging settings."""

    def test_should_upper_case_log_level(self):
        """Log level names are normalized."""
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}):
            settings = Settings()

        assert settings.LOG_LEVEL == "DEBUG"
