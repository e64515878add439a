"""Tests for configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from pkglikes.config import Config, ConfigError, ConfigLoader


def _loader(config_file, local_config_file=None, use_env_vars=False):
    return ConfigLoader(
        str(config_file),
        local_config_file=str(local_config_file) if local_config_file else None,
        load_env_file=False,
        use_env_vars=use_env_vars,
    )


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_load_defaults_when_file_missing(self, tmp_path):
        """Test loading when config file doesn't exist."""
        config = _loader(tmp_path / "missing.yaml").load()

        assert config.environment == "development"
        assert config.cache.type == "auto"
        assert config.backlink_index.type == "constellation"
        assert config.record_store.type == "memory"
        assert config.likes.collection == "dev.npmx.feed.like"
        assert config.likes.path_field == ".subjectRef"
        assert config.likes.cache_ttl_seconds == 300
        assert config.constellation_base_url == "https://constellation.microcosm.blue"

    def test_load_yaml(self, tmp_path):
        """Test loading values from YAML."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
environment: staging
likes:
  cache_ttl_seconds: 60
backlink_index:
  type: memory
""")

        config = _loader(config_file).load()

        assert config.environment == "staging"
        assert config.likes.cache_ttl_seconds == 60
        assert config.likes.serialize_writes is True
        assert config.backlink_index.type == "memory"

    def test_local_config_overrides_project_config(self, tmp_path):
        """Test deep merge of the local override file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
cache:
  type: memory
  key_prefix: shared
likes:
  cache_ttl_seconds: 120
""")
        local_file = tmp_path / "config.local.yaml"
        local_file.write_text("""
cache:
  key_prefix: mine
""")

        config = _loader(config_file, local_file).load()

        assert config.cache.type == "memory"
        assert config.cache.key_prefix == "mine"
        assert config.likes.cache_ttl_seconds == 120

    def test_env_overrides(self, tmp_path):
        """Test loading with environment variable overrides."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("environment: development\n")

        with patch.dict(os.environ, {
            "ENVIRONMENT": "production",
            "DEBUG": "true",
            "REDIS_URL": "redis://cache:6379/0",
            "LIKES_CACHE_TTL_SECONDS": "30",
            "LOG_LEVEL": "DEBUG",
        }):
            config = _loader(config_file, use_env_vars=True).load()

        assert config.environment == "production"
        assert config.is_production is True
        assert config.debug is True
        assert config.redis_url == "redis://cache:6379/0"
        assert config.likes.cache_ttl_seconds == 30
        assert config.logging.level == "DEBUG"

    def test_redis_cache_requires_url(self, tmp_path):
        """Test validation error when Redis is selected without a URL."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("cache:\n  type: redis\n")

        with pytest.raises(ConfigError, match="Redis URL is required"):
            _loader(config_file).load()

    def test_atproto_store_requires_service_url(self, tmp_path):
        """Test validation error when the atproto store has no PDS URL."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("record_store:\n  type: atproto\n")

        with pytest.raises(ConfigError, match="service URL is required"):
            _loader(config_file).load()

    def test_ttl_must_be_positive(self, tmp_path):
        """Test validation of the cache TTL."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("likes:\n  cache_ttl_seconds: 0\n")

        with pytest.raises(ConfigError, match="TTL must be a positive"):
            _loader(config_file).load()

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML is reported."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("cache: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            _loader(config_file).load()

    def test_yaml_must_be_mapping(self, tmp_path):
        """Test that a top-level list is rejected."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            _loader(config_file).load()

    def test_project_config_file_loads(self):
        """Test that the committed config.yaml is valid."""
        project_config = Path(__file__).resolve().parents[2] / "config.yaml"

        config = _loader(project_config).load()

        assert config.cache.type == "auto"
        assert config.backlink_index.config["records_limit"] == 16


class TestConfig:
    """Tests for the Config model."""

    def test_is_production(self):
        assert Config(environment="Production").is_production is True
        assert Config().is_production is False
