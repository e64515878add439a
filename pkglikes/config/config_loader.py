"""Configuration models and the layered loader that builds them."""

import copy
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .exceptions import ConfigError, ConfigFileNotFoundError, ConfigValidationError


class ProviderConfig(BaseModel):
    """Selects a backend by ``type`` and passes it backend-specific ``config``."""
    type: str
    config: Dict[str, Any] = Field(default_factory=dict)


class CacheConfig(ProviderConfig):
    """Cache backend configuration.

    ``auto`` selects Redis in production when a Redis URL is configured and the
    in-process cache otherwise.
    """
    type: str = "auto"
    key_prefix: str = "pkglikes"


class BacklinkIndexConfig(ProviderConfig):
    """Backlink index configuration."""
    type: str = "constellation"


class RecordStoreConfig(ProviderConfig):
    """Record store configuration."""
    type: str = "memory"


class LikesConfig(BaseModel):
    """Like coordination settings."""
    collection: str = "dev.npmx.feed.like"
    path_field: str = ".subjectRef"
    subject_base_url: str = "https://npmx.dev/package"
    cache_ttl_seconds: int = 300
    serialize_writes: bool = True


class LoggingConfig(BaseModel):
    """Root logger and optional rotating log file."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5


class Config(BaseModel):
    """Application configuration."""

    environment: str = "development"
    debug: bool = False

    cache: CacheConfig = Field(default_factory=CacheConfig)
    backlink_index: BacklinkIndexConfig = Field(default_factory=BacklinkIndexConfig)
    record_store: RecordStoreConfig = Field(default_factory=RecordStoreConfig)
    likes: LikesConfig = Field(default_factory=LikesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Endpoints and secrets, usually supplied through the environment
    redis_url: Optional[str] = None
    constellation_base_url: str = "https://constellation.microcosm.blue"
    atproto_service_url: Optional[str] = None
    atproto_access_token: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


class ConfigLoader:
    """Builds a Config from layered sources.

    Later layers win:
    1. Built-in model defaults
    2. Project config file (config.yaml, committed)
    3. Local config file (config.local.yaml, gitignored), deep-merged
    4. Environment variables, including those from the .env file
    """

    ENV_MAPPINGS = {
        'ENVIRONMENT': 'environment',
        'DEBUG': 'debug',
        'REDIS_URL': 'redis_url',
        'CONSTELLATION_BASE_URL': 'constellation_base_url',
        'ATPROTO_SERVICE_URL': 'atproto_service_url',
        'ATPROTO_ACCESS_TOKEN': 'atproto_access_token',
        'LIKES_CACHE_TTL_SECONDS': 'likes.cache_ttl_seconds',
        'LOG_LEVEL': 'logging.level',
        'LOG_FILE_PATH': 'logging.file_path',
    }

    INT_KEYS = {'cache_ttl_seconds', 'max_file_size_mb', 'backup_count'}
    BOOL_KEYS = {'debug'}

    def __init__(self, config_file: Optional[str] = None, env_file: Optional[str] = None,
                 local_config_file: Optional[str] = "config.local.yaml", load_env_file: bool = True,
                 use_env_vars: bool = True):
        """
        Initialize config loader.

        Args:
            config_file: Project YAML file
            env_file: dotenv file loaded into the process environment
            local_config_file: Local override YAML file, or None to skip it
            load_env_file: Read env_file before applying environment overrides
            use_env_vars: Apply ENV_MAPPINGS overrides
        """
        self.config_file = config_file or "config.yaml"
        self.env_file = env_file or ".env"
        self.local_config_file = local_config_file
        self.load_env_file = load_env_file
        self.use_env_vars = use_env_vars

    def load(self) -> Config:
        """
        Load and validate configuration.

        Raises:
            ConfigError: If any layer cannot be read or the result is invalid
        """
        try:
            if self.load_env_file and Path(self.env_file).is_file():
                load_dotenv(self.env_file)

            data: Dict[str, Any] = {}
            for path in self._yaml_layers():
                data = self._merge(data, self._read_yaml(path))

            if self.use_env_vars:
                self._apply_env_overrides(data)

            config = Config(**data)
            self._check(config)
            return config
        except Exception as e:
            raise ConfigError(f"Failed to load configuration: {e}") from e

    def _yaml_layers(self) -> List[str]:
        layers = [self.config_file]
        if self.local_config_file:
            layers.append(self.local_config_file)
        return layers

    @staticmethod
    def _read_yaml(config_file: str) -> Dict[str, Any]:
        """Read one YAML layer; a missing file is an empty layer."""
        path = Path(config_file)
        if not path.exists():
            return {}

        try:
            data = yaml.safe_load(path.read_text(encoding='utf-8'))
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in config file '{config_file}': {e}") from e
        except OSError as e:
            raise ConfigFileNotFoundError(f"Cannot read config file '{config_file}': {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigValidationError(f"Config file '{config_file}' must contain a mapping")
        return data

    @classmethod
    def _merge(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge override into a copy of base."""
        merged = copy.deepcopy(base)
        for key, value in override.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key] = cls._merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _apply_env_overrides(self, data: Dict[str, Any]) -> None:
        for env_var, dotted in self.ENV_MAPPINGS.items():
            raw = os.getenv(env_var)
            if raw is None:
                continue

            *parents, leaf = dotted.split('.')
            section = data
            for name in parents:
                if not isinstance(section.get(name), dict):
                    section[name] = {}
                section = section[name]
            section[leaf] = self._coerce(leaf, raw)

    def _coerce(self, key: str, raw: str) -> Any:
        """Convert an environment string to the type the field expects."""
        if key in self.BOOL_KEYS or raw.lower() in ('true', 'false'):
            return raw.lower() == 'true'
        if key in self.INT_KEYS:
            try:
                return int(raw)
            except ValueError:
                # Left as-is so pydantic reports the bad value
                return raw
        return raw

    @staticmethod
    def _check(config: Config) -> None:
        """Cross-field checks pydantic does not express."""
        if config.cache.type.lower() == "redis" and not config.redis_url:
            raise ConfigValidationError("Redis URL is required when the Redis cache is selected")

        if config.record_store.type.lower() == "atproto" and not config.atproto_service_url:
            raise ConfigValidationError("AT Protocol service URL is required for the atproto record store")

        if config.likes.cache_ttl_seconds <= 0:
            raise ConfigValidationError("Likes cache TTL must be a positive number of seconds")
