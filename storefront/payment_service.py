"""
Razorpay payment hand-off

The browser opens Razorpay Checkout with the options built here and reports
back either a payment id or a dismissal. Only the payment id is kept.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from pydantic import BaseModel

from storefront.config import Settings, get_settings
from storefront.errors import PaymentError
from storefront.models import CheckoutFormData

logger = logging.getLogger(__name__)


class PaymentOptions(BaseModel):
    """Razorpay Checkout options"""
    key: str
    amount: int  # minor units (paise)
    currency: str
    name: str
    description: str
    prefill: dict[str, str] = {}


class PaymentOutcome(BaseModel):
    payment_id: Optional[str] = None
    dismissed: bool = False


def to_minor_units(amount: float) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_payment_options(total: float, form: Optional[CheckoutFormData] = None,
                          settings: Optional[Settings] = None) -> PaymentOptions:
    settings = settings or get_settings()
    if total <= 0:
        raise PaymentError("Nothing to pay for. Please add items to your cart.")

    prefill = {}
    if form:
        prefill = {
            key: value for key, value in (
                ("name", form.full_name), ("email", form.email), ("contact", form.phone_number)
            ) if value
        }

    return PaymentOptions(
        key=settings.razorpay_key_id,
        amount=to_minor_units(total),
        currency=settings.currency,
        name=settings.shop_name,
        description="Order payment",
        prefill=prefill
    )


class PaymentSession:
    """Latest payment attempt of one shopper"""

    def __init__(self):
        self.options: Optional[PaymentOptions] = None
        self.outcome: Optional[PaymentOutcome] = None

    def open(self, options: PaymentOptions) -> PaymentOptions:
        self.options = options
        self.outcome = None
        return options

    def handle_success(self, payment_id: str) -> PaymentOutcome:
        if self.options is None:
            raise PaymentError("No payment in progress")
        if not payment_id:
            raise PaymentError("Payment id missing")
        self.outcome = PaymentOutcome(payment_id=payment_id)
        logger.info("[Payment] completed %s (%d %s)", payment_id, self.options.amount, self.options.currency)
        return self.outcome

    def handle_dismiss(self) -> PaymentOutcome:
        self.outcome = PaymentOutcome(dismissed=True)
        logger.info("[Payment] checkout dismissed")
        return self.outcome

    @property
    def payment_id(self) -> Optional[str]:
        return self.outcome.payment_id if self.outcome else None
