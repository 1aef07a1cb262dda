"""
Startup readiness and health checks.
Application starts without the webhook or redis, recovers after.
"""
import time
from typing import Dict, Any

from adcraft.logger import logger


class ReadinessManager:
    """
    Tracks which dependencies are usable.
    Startup succeeds even when storage or the webhook are down.
    """

    def __init__(self):
        self.is_ready = False
        self.services: Dict[str, bool] = {
            "config": True,  # Config validation happens at import
            "storage": False,
            "webhook": False,
        }
        self.startup_time = None

    def check_services(self, data_layer, webhook_service) -> Dict[str, bool]:
        """Refresh service status. Failures are recorded, never raised."""
        try:
            self.services["storage"] = data_layer.backend.ping()
        except Exception as e:
            logger.warning(f"Storage check failed: {e}")
            self.services["storage"] = False

        self.services["webhook"] = webhook_service.is_available

        if not self.is_ready:
            self.is_ready = True
            self.startup_time = time.monotonic()
            logger.info(f"Services initialized. Ready: {self.is_ready}")
        logger.info(f"Service status: {self.services}")
        return self.services

    def get_status(self) -> Dict[str, Any]:
        """Get readiness status."""
        return {
            "ready": self.is_ready,
            "services": self.services,
            "uptime": time.monotonic() - self.startup_time if self.startup_time else 0
        }

    def is_service_available(self, service_name: str) -> bool:
        """Check if a specific service is available."""
        return self.services.get(service_name, False)


# Global readiness manager
readiness_manager = ReadinessManager()
