"""
Services package initialization.
Centralizes service imports.
"""

from adcraft.services.webhook_service import WebhookService, WebhookResponse

__all__ = [
    'WebhookService',
    'WebhookResponse'
]
