"""
Sentry initialization for centralized error tracking.
Observes degraded operations, never controls logic.
"""
import logging
from typing import Dict, Any

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from adcraft.config import config
from adcraft.logger import logger


def initialize_sentry():
    """Initialize Sentry SDK if DSN is configured."""
    if not config.has_sentry:
        logger.info("Sentry not configured, skipping initialization")
        return

    try:
        sentry_sdk.init(
            dsn=config.SENTRY_DSN,
            environment=config.ENVIRONMENT,
            integrations=[
                LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
            ],
            traces_sample_rate=0.1,
            send_default_pii=False,
            debug=False,
            before_send=lambda event, hint: _enrich_sentry_event(event, hint)
        )

        logger.info("Sentry initialized for error tracking")

    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")


def _enrich_sentry_event(event: Dict[str, Any], hint: Dict[str, Any]) -> Dict[str, Any]:
    """Tag events with the system name and group by exception type."""
    try:
        event.setdefault("tags", {})
        event["tags"]["system"] = "adcraft-data"
        event["tags"]["environment"] = config.ENVIRONMENT

        if "exception" in event:
            exceptions = event["exception"].get("values", [])
            if exceptions:
                exc = exceptions[0]
                event["fingerprint"] = [
                    "{{ default }}",
                    exc.get("type", "Unknown"),
                    exc.get("module", "unknown")
                ]
    except Exception as e:
        logger.error(f"Failed to enrich Sentry event: {e}")

    return event


def capture_storage_failure(key: str, operation: str, error: str):
    """Record a storage read/write that was degraded instead of raised."""
    if not config.has_sentry:
        return

    with sentry_sdk.new_scope() as scope:
        scope.set_tag("error_type", "storage")
        scope.set_tag("operation", operation)
        scope.set_extra("key", key)
        scope.set_extra("error", error)
        scope.set_level("warning")

        sentry_sdk.capture_message(
            f"Storage {operation} failed for key '{key}'",
            "warning"
        )


def capture_normalization_error(raw_data: Dict[str, Any], error: str):
    """Capture webhook payloads that could not be normalized."""
    if not config.has_sentry:
        return

    with sentry_sdk.new_scope() as scope:
        scope.set_tag("error_type", "normalization")
        scope.set_extra("name", raw_data.get("name", "unknown"))
        scope.set_extra("raw_data_keys", list(raw_data.keys()))
        scope.set_extra("error", error)
        scope.set_level("warning")

        sentry_sdk.capture_message(
            f"Normalization failed for payload: {raw_data.get('name', 'unknown')}",
            "warning"
        )
