"""Health reporting for the services behind the like coordinator."""

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


class HealthManagementUseCase:
    """Reports the health of the cache, backlink index and record store."""

    def __init__(self, services: Dict[str, Any]):
        """
        Args:
            services: Mapping of service name to an object exposing async health_check()
        """
        self.services = services

    @staticmethod
    async def _probe(name: str, service: Any) -> Dict[str, Any]:
        try:
            healthy = bool(await service.health_check())
        except Exception as e:
            logger.error(f"Error checking {name} health: {e}")
            return {"healthy": False, "status": "error", "details": str(e)}

        details = "Service is responding normally" if healthy else "Service is not responding"
        backend_name = getattr(service, "get_backend_name", None)
        if callable(backend_name):
            details += f" ({backend_name()})"

        return {
            "healthy": healthy,
            "status": "healthy" if healthy else "unhealthy",
            "details": details,
        }

    async def get_service_health_status(self) -> Dict[str, Any]:
        """
        Probe every service. Failures are reported in the result, never raised.

        Returns:
            Dictionary with overall_healthy, healthy_count, total_count and a
            per-service services mapping of healthy/status/details
        """
        services = {
            name: await self._probe(name, service)
            for name, service in self.services.items()
        }
        healthy_count = sum(1 for result in services.values() if result["healthy"])
        total_count = len(services)

        logger.debug(f"Health check complete: {healthy_count}/{total_count} services healthy")
        return {
            "overall_healthy": total_count > 0 and healthy_count == total_count,
            "healthy_count": healthy_count,
            "total_count": total_count,
            "services": services,
        }
