"""
Wrapper for the product/avatar webhook workflow.
Includes timeout, retry, response validation, error translation.
All network logic is isolated here.
"""
import aiohttp
import asyncio
import json
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

from adcraft.errors import ExternalServiceError, NetworkError
from adcraft.utils.retry import async_retry
from adcraft.config import config
from adcraft.logger import logger


@dataclass
class WebhookResponse:
    """Raw product/avatar objects returned by the workflow, not yet normalized."""
    success: bool
    product: Optional[Dict[str, Any]] = None
    avatar: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = field(default_factory=dict)


class WebhookService:
    """
    Client for the scraping + persona workflow.
    Business logic never calls the webhook directly.
    """

    def __init__(self):
        self.webhook_url = config.PRODUCT_AVATAR_WEBHOOK_URL
        self.session: Optional[aiohttp.ClientSession] = None
        self.is_available = bool(self.webhook_url)

    async def initialize(self):
        """Initialize HTTP session (called after startup)."""
        if not self.is_available:
            logger.warning("Product/avatar webhook not configured")
            return

        self.session = aiohttp.ClientSession(
            headers={"Content-Type": "application/json"},
            timeout=aiohttp.ClientTimeout(total=config.REQUEST_TIMEOUT)
        )
        logger.info("Webhook service initialized")

    async def close(self):
        """Close HTTP session."""
        if self.session:
            await self.session.close()

    @async_retry(exceptions=(NetworkError,))
    async def trigger_product_scraping(self, payload: Dict[str, Any]) -> WebhookResponse:
        """
        Ask the workflow to scrape a product and infer an avatar for it.

        Args:
            payload: Outbound body, e.g. ``{"productUrl": ..., "brief": ...}``

        Returns:
            WebhookResponse with the raw product and/or avatar objects

        Raises:
            ExternalServiceError: If the workflow is not configured or fails
            RetryExhaustedError: If the network kept failing
        """
        if not self.is_available or self.session is None:
            raise ExternalServiceError("Product/avatar webhook not configured")

        logger.info(f"Triggering product/avatar webhook for: {payload.get('productUrl', 'unknown')}")

        try:
            response = await self.session.post(self.webhook_url, json=payload)

            if response.status != 200:
                error_text = await response.text()
                logger.error(f"Webhook error {response.status}: {error_text[:200]}")
                raise ExternalServiceError(
                    f"Webhook error {response.status}: {error_text[:200]}"
                )

            data = await response.json()
            if not isinstance(data, dict):
                raise ExternalServiceError(f"Invalid response format from webhook: {type(data).__name__}")

            product = data.get("product") or None
            avatar = data.get("avatar") or None
            logger.info(
                f"Webhook returned product={'yes' if product else 'no'}, "
                f"avatar={'yes' if avatar else 'no'}"
            )
            return WebhookResponse(success=True, product=product, avatar=avatar, raw=data)

        except ExternalServiceError:
            raise
        except aiohttp.ClientError as e:
            logger.error(f"Network error calling webhook: {str(e)}")
            raise NetworkError(f"Network error calling webhook: {str(e)}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"Timeout calling webhook: {str(e)}")
            raise NetworkError(f"Timeout calling webhook: {str(e)}") from e
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON response from webhook: {str(e)}")
            raise ExternalServiceError(f"Invalid JSON response from webhook: {str(e)}") from e
