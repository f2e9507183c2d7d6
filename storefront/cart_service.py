"""
Cart service

Features:
1. Cart management - add / update / remove / clear line items
2. Price calculation - exact sum, rounded once to cents
3. Change notification - subscribers receive every new snapshot

Line identity is "{item_id}-{customization|default}": adding the same item with
the same customization merges quantities, a different customization opens a
new line.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Iterable, Optional

from storefront.models import (
    Cart, CartItem, MenuItem, PricingBreakdown,
    CustomizationKind, SugarOption, SpiceLevel, SugarChoice, SpiceChoice
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

CartListener = Callable[[list[CartItem]], None]


def round_money(amount: Decimal) -> float:
    """Round to cents, half away from zero"""
    return float(amount.quantize(CENT, rounding=ROUND_HALF_UP))


def line_amount(price: float, quantity: int) -> Decimal:
    # str() keeps the decimal literal of the price instead of its binary expansion
    return Decimal(str(price)) * quantity


def sum_line_amounts(lines: Iterable[tuple[float, int]]) -> float:
    """Sum of price * quantity, rounded once at the aggregate"""
    return round_money(sum((line_amount(price, qty) for price, qty in lines), Decimal("0")))


def build_cart_item_id(item_id: str, sugar_option: Optional[SugarOption] = None,
                       spice_level: Optional[SpiceLevel] = None) -> str:
    customization = spice_level or sugar_option
    return f"{item_id}-{customization.value if customization else 'default'}"


class CartStore:
    """In-memory cart"""

    def __init__(self):
        self._items: dict[str, CartItem] = {}
        self._listeners: list[CartListener] = []

    # ============ Subscription ============

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a change listener, returns the unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.items
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("[Cart] listener failed")

    # ============ Queries ============

    @property
    def items(self) -> list[CartItem]:
        """Line items in insertion order (copies)"""
        return [item.model_copy() for item in self._items.values()]

    def is_empty(self) -> bool:
        return not self._items

    def get_item(self, cart_item_id: str) -> Optional[CartItem]:
        item = self._items.get(cart_item_id)
        return item.model_copy() if item else None

    def get_total_price(self) -> float:
        return sum_line_amounts((item.price, item.quantity) for item in self._items.values())

    def get_total_items(self) -> int:
        return sum(item.quantity for item in self._items.values())

    def calculate_pricing(self) -> PricingBreakdown:
        """Order summary pricing; no tax or delivery charge is applied"""
        subtotal = self.get_total_price()
        return PricingBreakdown(subtotal=subtotal, tax=0.0, delivery_charges=0.0, total=subtotal)

    def snapshot(self, session_id: str) -> Cart:
        return Cart(
            session_id=session_id,
            items=self.items,
            total_price=self.get_total_price(),
            total_items=self.get_total_items()
        )

    # ============ Mutations ============

    def add_to_cart(self, item: MenuItem, quantity: int,
                    sugar_option: Optional[SugarOption] = None,
                    spice_level: Optional[SpiceLevel] = None) -> CartItem:
        """Add an item; same item and customization merge into one line"""
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        if sugar_option and spice_level:
            raise ValueError("an item takes either a sugar option or a spice level, not both")
        if sugar_option and item.customization_kind != CustomizationKind.SUGAR:
            raise ValueError(f"{item.name} does not take a sugar option")
        if spice_level and item.customization_kind != CustomizationKind.SPICE:
            raise ValueError(f"{item.name} does not take a spice level")

        cart_item_id = build_cart_item_id(item.id, sugar_option, spice_level)
        existing = self._items.get(cart_item_id)

        if existing:
            existing.quantity += quantity
            line = existing
        else:
            if spice_level:
                customization = SpiceChoice(level=spice_level)
            elif sugar_option:
                customization = SugarChoice(option=sugar_option)
            else:
                customization = None
            line = CartItem(
                cart_item_id=cart_item_id,
                id=item.id,
                name=item.name,
                price=item.price,
                category=item.category,
                image=item.image,
                quantity=quantity,
                customization=customization
            )
            self._items[cart_item_id] = line

        logger.debug("[Cart] added %s x%d (line qty %d)", cart_item_id, quantity, line.quantity)
        self._notify()
        return line.model_copy()

    def update_quantity(self, cart_item_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line"""
        if quantity <= 0:
            self.remove_from_cart(cart_item_id)
            return

        item = self._items.get(cart_item_id)
        if item is None:
            return
        item.quantity = quantity
        self._notify()

    def remove_from_cart(self, cart_item_id: str) -> None:
        if self._items.pop(cart_item_id, None) is not None:
            self._notify()

    def remove_ordered(self, ordered: Iterable[CartItem]) -> None:
        """Take submitted lines out of the cart; anything added since stays"""
        changed = False
        for line in ordered:
            current = self._items.get(line.cart_item_id)
            if current is None:
                continue
            remaining = current.quantity - line.quantity
            if remaining > 0:
                current.quantity = remaining
            else:
                del self._items[line.cart_item_id]
            changed = True

        if changed:
            self._notify()

    def clear_cart(self) -> None:
        self._items.clear()
        self._notify()
