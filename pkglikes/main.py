"""Main application entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import ConfigLoader, Config, ConfigError
from .core.entities import PackageLikes
from .core.usecases import HealthManagementUseCase, LikeCoordinator
from .factories import ServiceFactory


def _build_handlers(config: Config) -> List[logging.Handler]:
    """Create stdout and optional rotating-file handlers."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    log_file = config.logging.file_path
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                path,
                maxBytes=config.logging.max_file_size_mb * 1024 * 1024,
                backupCount=config.logging.backup_count,
            )
        )
    return handlers


def setup_logging(config: Config) -> None:
    """Configure the root logger from config, replacing existing handlers."""
    level = getattr(logging, config.logging.level.upper(), logging.INFO)
    formatter = logging.Formatter(config.logging.format)

    root = logging.getLogger()
    root.setLevel(level)
    for existing in list(root.handlers):
        root.removeHandler(existing)

    for handler in _build_handlers(config):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)


class PackageLikesApp:
    """Main application class wiring configuration, services and the like coordinator."""

    def __init__(self, config_file: str = "config.yaml", env_file: str = ".env"):
        """
        Initialize the application.

        Args:
            config_file: Path to configuration file
            env_file: Path to environment file
        """
        self.config_file = config_file
        self.env_file = env_file
        self.config: Optional[Config] = None
        self.services: Dict[str, Any] = {}
        self.like_coordinator: Optional[LikeCoordinator] = None
        self.health_management: Optional[HealthManagementUseCase] = None

        self.logger = logging.getLogger(__name__)

    async def initialize(self) -> None:
        """Initialize the application."""
        try:
            self.logger.info("Loading configuration...")
            config_loader = ConfigLoader(self.config_file, self.env_file, "config.local.yaml")
            self.config = config_loader.load()

            setup_logging(self.config)
            self.logger.info(f"Application initialized in {self.config.environment} environment")

            self.logger.info("Creating services...")
            service_factory = ServiceFactory(self.config)
            self.services = {
                "cache": service_factory.create_cache_store(),
                "backlink_index": service_factory.create_backlink_index(),
                "record_store": service_factory.create_record_store(),
            }

            self.like_coordinator = service_factory.create_like_coordinator(
                cache=self.services["cache"],
                index=self.services["backlink_index"],
                record_store=self.services["record_store"],
            )
            self.health_management = HealthManagementUseCase(services=self.services)

            self.logger.info("Application initialization complete")

        except ConfigError as e:
            self.logger.error(f"Configuration error: {e}")
            raise
        except Exception as e:
            self.logger.error(f"Failed to initialize application: {e}")
            raise

    def _require_coordinator(self) -> LikeCoordinator:
        if not self.like_coordinator:
            raise RuntimeError("Application not initialized")
        return self.like_coordinator

    async def get_likes(self, package_name: str, caller_id: Optional[str] = None) -> PackageLikes:
        """
        Get likes for a package.

        Args:
            package_name: Package name
            caller_id: DID of the logged in caller, if any

        Returns:
            PackageLikes view
        """
        return await self._require_coordinator().get_status(package_name, caller_id)

    async def like_package(self, package_name: str, caller_id: str) -> PackageLikes:
        """Like a package on behalf of an authenticated caller."""
        return await self._require_coordinator().like(package_name, caller_id)

    async def unlike_package(self, package_name: str, caller_id: str) -> PackageLikes:
        """Remove an authenticated caller's like from a package."""
        return await self._require_coordinator().unlike(package_name, caller_id)

    async def get_service_health_status(self) -> dict:
        """
        Check health of all services.

        Returns:
            Dictionary containing health status for each service
        """
        if not self.health_management:
            raise RuntimeError("Application not initialized")

        return await self.health_management.get_service_health_status()

    async def close(self) -> None:
        """Release HTTP sessions and cache connections."""
        closed = set()
        for service_name, service in self.services.items():
            if id(service) in closed:
                continue
            closed.add(id(service))
            try:
                await service.close()
            except Exception as e:
                self.logger.warning(f"Error closing {service_name}: {e}")
