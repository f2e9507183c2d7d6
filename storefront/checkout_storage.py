"""
Saved delivery address

Features:
1. Save / load / clear the delivery address under a fixed storage key
2. Schema check on read - anything malformed counts as absent
3. Conversion between DeliveryAddress and CheckoutFormData

Storage failures are logged and reported through the return value, never raised.
"""
import json
import logging
import time
from typing import Any, Optional

from storefront.db.connection import get_db_context
from storefront.models import CheckoutFormData, DeliveryAddress, CHECKOUT_FIELDS

logger = logging.getLogger(__name__)

CHECKOUT_DATA_KEY = "ck_checkout_data"


def validate_stored_checkout_data(data: Any) -> bool:
    """All seven fields present and strings"""
    if not isinstance(data, dict):
        return False
    return all(isinstance(data.get(field), str) for field in CHECKOUT_FIELDS)


def form_data_to_delivery_address(data: CheckoutFormData) -> DeliveryAddress:
    return DeliveryAddress(**data.model_dump())


def delivery_address_to_form_data(address: DeliveryAddress) -> CheckoutFormData:
    return CheckoutFormData(**address.model_dump())


class CheckoutStorage:
    """Delivery address persistence"""

    def __init__(self, namespace: Optional[str] = None):
        self.storage_key = f"{CHECKOUT_DATA_KEY}:{namespace}" if namespace else CHECKOUT_DATA_KEY

    async def save_checkout_data(self, data: CheckoutFormData) -> bool:
        """Store the delivery address, overwriting any previous one"""
        address = form_data_to_delivery_address(data)
        try:
            async with get_db_context() as db:
                await db.execute(
                    """
                    INSERT INTO local_storage (storage_key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(storage_key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (self.storage_key, address.model_dump_json(), time.time())
                )
                await db.commit()
            return True
        except Exception as e:
            logger.error("[Storage] failed to save checkout data: %s", e)
            return False

    async def get_checkout_data(self) -> Optional[DeliveryAddress]:
        """Load the saved address; missing or malformed data gives None"""
        try:
            async with get_db_context() as db:
                cursor = await db.execute(
                    "SELECT value FROM local_storage WHERE storage_key = ?",
                    (self.storage_key,)
                )
                row = await cursor.fetchone()
            if not row:
                return None

            parsed = json.loads(row["value"])
            if validate_stored_checkout_data(parsed):
                return DeliveryAddress(**{field: parsed[field] for field in CHECKOUT_FIELDS})

            logger.warning("[Storage] ignoring malformed checkout data under %s", self.storage_key)
            return None
        except Exception as e:
            logger.error("[Storage] failed to retrieve checkout data: %s", e)
            return None

    async def clear_checkout_data(self) -> bool:
        try:
            async with get_db_context() as db:
                await db.execute(
                    "DELETE FROM local_storage WHERE storage_key = ?",
                    (self.storage_key,)
                )
                await db.commit()
            return True
        except Exception as e:
            logger.error("[Storage] failed to clear checkout data: %s", e)
            return False

    async def has_checkout_data(self) -> bool:
        """Whether anything is stored under the key (valid or not)"""
        try:
            async with get_db_context() as db:
                cursor = await db.execute(
                    "SELECT 1 FROM local_storage WHERE storage_key = ?",
                    (self.storage_key,)
                )
                return await cursor.fetchone() is not None
        except Exception as e:
            logger.error("[Storage] failed to check checkout data: %s", e)
            return False
