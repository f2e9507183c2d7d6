"""
Order submission flow

States:
    IDLE -> VALIDATING -> AWAITING_CONFIRMATION -> SUBMITTING -> EMAIL_NOTIFYING -> COMPLETED
    VALIDATING / SUBMITTING -> FAILED

Blocking steps (validation, confirmation, order creation) stop the flow on
failure. The confirmation mail is best-effort: its failure is logged and the
order still completes. The submitted lines leave the cart only after the
backend has created the order; lines added while the request was in flight
stay. On any failure the cart and the saved address are left as they were
so the shopper can resubmit.
"""
import inspect
import logging
from decimal import Decimal
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from pydantic import BaseModel

from storefront.cart_service import CartStore, line_amount, round_money
from storefront.checkout_storage import CheckoutStorage
from storefront.errors import EmptyCartError, RemoteOrderError, ValidationError
from storefront.models import CartItem, CheckoutFormData, Customer, OrderData, OrderItem
from storefront.notification_service import NotificationService
from storefront.order_service import OrderService, extract_order_id
from storefront.validation import sanitize_form_data, validate_checkout_form

logger = logging.getLogger(__name__)

ORDER_SUCCESS_PATH = "/order-success"
PAYMENT_METHOD = "ONLINE"

ConfirmCallback = Callable[[], Union[bool, Awaitable[bool]]]


class CheckoutState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SUBMITTING = "submitting"
    EMAIL_NOTIFYING = "email_notifying"
    COMPLETED = "completed"
    FAILED = "failed"


BUSY_STATES = {CheckoutState.SUBMITTING, CheckoutState.EMAIL_NOTIFYING}


class CheckoutResult(BaseModel):
    """Outcome of one submission attempt"""
    state: CheckoutState
    order_id: Optional[str] = None
    total_amount: Optional[float] = None
    message: Optional[str] = None
    error_kind: Optional[str] = None
    errors: dict[str, str] = {}
    redirect_to: Optional[str] = None


def compose_delivery_address(data: CheckoutFormData) -> str:
    """address, landmark, pincode (instructions)"""
    text = data.address
    if data.landmark:
        text += f", {data.landmark}"
    if data.pincode:
        text += f", {data.pincode}"
    if data.delivery_instructions:
        text += f" ({data.delivery_instructions})"
    return text


def build_order_data(data: CheckoutFormData, items: list[CartItem], total_amount: float) -> OrderData:
    return OrderData(
        customer=Customer(
            name=data.full_name,
            email=data.email,
            phone=data.phone_number,
            address=compose_delivery_address(data)
        ),
        items=[OrderItem(name=item.name, price=item.price, quantity=item.quantity) for item in items],
        total_amount=total_amount,
        payment_method=PAYMENT_METHOD
    )


class CheckoutFlow:
    """One shopper's checkout; at most one submission runs at a time"""

    def __init__(self, cart: CartStore, storage: CheckoutStorage,
                 order_service: OrderService, notifier: NotificationService):
        self.cart = cart
        self.storage = storage
        self.order_service = order_service
        self.notifier = notifier
        self.state = CheckoutState.IDLE
        self.history: list[CheckoutState] = [CheckoutState.IDLE]

    @property
    def is_busy(self) -> bool:
        return self.state in BUSY_STATES

    def _transition(self, state: CheckoutState) -> None:
        logger.debug("[Checkout] %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _fail(self, message: str, error_kind: str, errors: Optional[dict[str, str]] = None) -> CheckoutResult:
        self._transition(CheckoutState.FAILED)
        return CheckoutResult(
            state=CheckoutState.FAILED,
            message=message,
            error_kind=error_kind,
            errors=errors or {}
        )

    async def submit(self, form_data: CheckoutFormData, confirm: ConfirmCallback) -> CheckoutResult:
        """Run one submission attempt from IDLE"""
        if self.is_busy:
            raise RuntimeError("a checkout submission is already in flight")
        if self.state != CheckoutState.IDLE:
            self._transition(CheckoutState.IDLE)

        # Idle -> Validating
        self._transition(CheckoutState.VALIDATING)
        if self.cart.is_empty():
            error = EmptyCartError()
            logger.warning("[Checkout] rejected: empty cart")
            return self._fail(error.message, error.kind)

        data = sanitize_form_data(form_data)
        errors = validate_checkout_form(data)
        if errors:
            error = ValidationError(errors)
            logger.info("[Checkout] validation failed: %s", sorted(errors))
            result = self._fail(error.message, error.kind, errors)
            # field errors are recoverable, the form stays editable
            self._transition(CheckoutState.IDLE)
            return result

        # Validating -> AwaitingConfirmation
        self._transition(CheckoutState.AWAITING_CONFIRMATION)
        confirmed = confirm()
        if inspect.isawaitable(confirmed):
            confirmed = await confirmed
        if not confirmed:
            logger.info("[Checkout] shopper cancelled the order")
            self._transition(CheckoutState.IDLE)
            return CheckoutResult(state=CheckoutState.IDLE, message="Order cancelled")

        # AwaitingConfirmation -> Submitting
        self._transition(CheckoutState.SUBMITTING)
        items = self.cart.items
        total_amount = round_money(sum((line_amount(item.price, item.quantity) for item in items), Decimal("0")))
        cart_total = self.cart.get_total_price()
        if total_amount != cart_total:
            logger.error("[Checkout] total mismatch: computed %s, cart %s", total_amount, cart_total)
            return self._fail("Cart total changed. Please review your cart and try again.", "total_mismatch")

        order_data = build_order_data(data, items, total_amount)
        try:
            response = await self.order_service.create_order(order_data)
        except RemoteOrderError as e:
            logger.error("[Checkout] order creation failed (%s): %s", e.error_kind.value, e.message)
            return self._fail(e.message, e.kind)

        order_id = extract_order_id(response)
        if order_id is None:
            logger.warning("[Checkout] backend response carried no order id")
            order_id = "N/A"
        logger.info("[Checkout] order %s created, total %s", order_id, total_amount)

        # Submitting -> EmailNotifying
        self._transition(CheckoutState.EMAIL_NOTIFYING)
        try:
            await self.notifier.send_order_confirmation(data.full_name, order_id, total_amount)
        except Exception as e:
            logger.error("[Email] confirmation for order %s not sent: %s", order_id, e)

        # EmailNotifying -> Completed
        if not await self.storage.save_checkout_data(data):
            logger.warning("[Checkout] delivery address for order %s was not saved", order_id)
        self.cart.remove_ordered(items)
        self._transition(CheckoutState.COMPLETED)

        return CheckoutResult(
            state=CheckoutState.COMPLETED,
            order_id=order_id,
            total_amount=total_amount,
            message="Order placed successfully",
            redirect_to=f"{ORDER_SUCCESS_PATH}?orderId={order_id}"
        )
