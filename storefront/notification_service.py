"""Order confirmation mail via the EmailJS REST API"""
import logging
from typing import Optional

import httpx

from storefront.config import Settings, get_settings
from storefront.errors import NotificationError

logger = logging.getLogger(__name__)


class NotificationService:
    """EmailJS client"""

    def __init__(self, settings: Optional[Settings] = None, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self.timeout = timeout
        self._transport = transport

    async def send_order_confirmation(self, name: str, order_id: str, total_amount: float) -> None:
        """Send the confirmation mail; raises NotificationError on any failure"""
        if not self.settings.emailjs_configured:
            raise NotificationError("EmailJS is not configured")

        payload = {
            "service_id": self.settings.emailjs_service_id,
            "template_id": self.settings.emailjs_template_id,
            "user_id": self.settings.emailjs_public_key,
            "template_params": {
                "name": name,
                "order_id": order_id,
                "total_amount": total_amount,
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.settings.emailjs_endpoint, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationError(f"Failed to send confirmation email: {e}") from e

        logger.info("[Email] confirmation sent for order %s", order_id)
