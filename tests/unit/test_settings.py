# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for application settings."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.core.config.settings import (
    DatabaseSettings,
    LLMSettings,
    OrchestrationSettings,
    RateLimitSettings,
    RedisSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


class TestDatabaseSettings:
    """Tests for DatabaseSettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = DatabaseSettings()

        assert settings.url.startswith("postgresql+asyncpg://")
        assert settings.pool_size == 10
        assert settings.max_overflow == 20
        assert settings.echo is False
        assert settings.is_sqlite is False

    def test_loads_from_environment(self) -> None:
        """Test that settings load from DB_ environment variables."""
        env = {"DB_URL": "sqlite+aiosqlite:///./mentormind.db", "DB_POOL_SIZE": "3"}

        with patch.dict(os.environ, env, clear=True):
            settings = DatabaseSettings()

        assert settings.url == "sqlite+aiosqlite:///./mentormind.db"
        assert settings.pool_size == 3
        assert settings.is_sqlite is True


class TestRedisSettings:
    """Tests for RedisSettings."""

    def test_url_without_password(self) -> None:
        """Test URL property without a password."""
        settings = RedisSettings(host="cache", port=6380, database=2)

        assert settings.url == "redis://cache:6380/2"

    def test_url_with_password(self) -> None:
        """Test URL property embeds the password."""
        settings = RedisSettings(password="secret")  # type: ignore[arg-type]

        assert settings.url == "redis://:secret@localhost:6379/0"

    def test_loads_from_environment(self) -> None:
        """Test that settings load from REDIS_ environment variables."""
        with patch.dict(os.environ, {"REDIS_HOST": "redis.internal"}, clear=True):
            settings = RedisSettings()

        assert settings.host == "redis.internal"


class TestLLMSettings:
    """Tests for LLMSettings."""

    def test_default_model_per_provider(self) -> None:
        """Test the model identifier for each provider."""
        with patch.dict(os.environ, {}, clear=True):
            assert LLMSettings().get_default_model() == "gemini/gemini-2.0-flash"
            assert LLMSettings(default_provider="openai").get_default_model() == "gpt-4o"
            assert (
                LLMSettings(default_provider="ollama").get_default_model()
                == "ollama/qwen2.5:7b"
            )

    def test_gemini_key_alias(self) -> None:
        """Test that GEMINI_API_KEY is accepted for the Google provider."""
        with patch.dict(os.environ, {"GEMINI_API_KEY": "gm-key"}, clear=True):
            settings = LLMSettings()

        assert settings.get_api_key() == "gm-key"
        assert settings.is_configured is True

    def test_not_configured_without_key(self) -> None:
        """Test that a keyless cloud provider is not configured."""
        with patch.dict(os.environ, {"LLM_DEFAULT_PROVIDER": "anthropic"}, clear=True):
            settings = LLMSettings()

        assert settings.get_api_key() is None
        assert settings.is_configured is False

    def test_ollama_needs_no_key(self) -> None:
        """Test that Ollama is configured by its base URL alone."""
        with patch.dict(os.environ, {}, clear=True):
            settings = LLMSettings(default_provider="ollama")

        assert settings.is_configured is True


class TestRateLimitSettings:
    """Tests for RateLimitSettings."""

    def test_default_values(self) -> None:
        """Test sixty requests per sixty seconds in memory."""
        with patch.dict(os.environ, {}, clear=True):
            settings = RateLimitSettings()

        assert settings.max_requests == 60
        assert settings.window_seconds == 60
        assert settings.backend == "memory"

    def test_loads_from_environment(self) -> None:
        """Test that settings load from RATE_LIMIT_ environment variables."""
        env = {"RATE_LIMIT_MAX_REQUESTS": "5", "RATE_LIMIT_BACKEND": "redis"}

        with patch.dict(os.environ, env, clear=True):
            settings = RateLimitSettings()

        assert settings.max_requests == 5
        assert settings.backend == "redis"

    def test_rejects_zero_window(self) -> None:
        """Test that the window must be positive."""
        with pytest.raises(ValidationError):
            RateLimitSettings(window_seconds=0)


class TestOrchestrationSettings:
    """Tests for OrchestrationSettings."""

    def test_default_values(self) -> None:
        """Test default orchestration limits."""
        with patch.dict(os.environ, {}, clear=True):
            settings = OrchestrationSettings()

        assert settings.max_reasoning_steps == 25
        assert settings.min_output_length == 10
        assert settings.min_plan_output_length == 100
        assert settings.max_message_length == 1000
        assert settings.max_history_messages == 40
        assert settings.checkpoint_backend == "memory"

    def test_agents_config_dir_points_at_shipped_configs(self) -> None:
        """Test that the default config dir holds the agent YAML files."""
        settings = OrchestrationSettings()

        assert isinstance(settings.agents_config_dir, Path)
        assert (settings.agents_config_dir / "planner.yaml").exists()

    def test_loads_from_environment(self) -> None:
        """Test that settings load from ORCHESTRATION_ environment variables."""
        env = {
            "ORCHESTRATION_MAX_REASONING_STEPS": "8",
            "ORCHESTRATION_CHECKPOINT_BACKEND": "postgres",
        }

        with patch.dict(os.environ, env, clear=True):
            settings = OrchestrationSettings()

        assert settings.max_reasoning_steps == 8
        assert settings.checkpoint_backend == "postgres"

    def test_rejects_zero_steps(self) -> None:
        """Test that at least one reasoning step is required."""
        with pytest.raises(ValidationError):
            OrchestrationSettings(max_reasoning_steps=0)


class TestSettings:
    """Tests for the main Settings class."""

    def test_aggregates_subsettings(self) -> None:
        """Test that subsettings are created with their defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.environment == "development"
        assert settings.is_development is True
        assert settings.rate_limit.max_requests == 60
        assert settings.orchestration.max_reasoning_steps == 25

    def test_production_rejects_debug(self) -> None:
        """Test that production requires debug to be off."""
        env = {"ENVIRONMENT": "production", "DEBUG": "true"}

        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ValidationError, match="Debug mode"):
                Settings(_env_file=None)  # type: ignore[call-arg]

    def test_production_rejects_sqlite(self) -> None:
        """Test that production refuses a SQLite store."""
        env = {
            "ENVIRONMENT": "production",
            "DEBUG": "false",
            "DB_URL": "sqlite+aiosqlite:///./mentormind.db",
        }

        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ValidationError, match="SQLite"):
                Settings(_env_file=None)  # type: ignore[call-arg]

    def test_production_with_postgres(self) -> None:
        """Test a valid production configuration."""
        env = {"ENVIRONMENT": "production", "DEBUG": "false"}

        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.is_production is True


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_returns_cached_instance(self) -> None:
        """Test that repeated calls share one instance."""
        clear_settings_cache()
        try:
            assert get_settings() is get_settings()
        finally:
            clear_settings_cache()

    def test_clear_cache_reloads(self) -> None:
        """Test that clearing the cache picks up new environment values."""
        clear_settings_cache()
        try:
            first = get_settings()
            with patch.dict(os.environ, {"RATE_LIMIT_MAX_REQUESTS": "7"}, clear=False):
                clear_settings_cache()
                second = get_settings()

            assert second is not first
            assert second.rate_limit.max_requests == 7
        finally:
            clear_settings_cache()
