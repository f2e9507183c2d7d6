"""Data model definitions"""
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SugarOption(str, Enum):
    """Sweetener choice"""
    WITH_SUGAR = "With Sugar"
    WITH_JAGGERY = "With Jaggery"
    WITH_PALM_SUGAR = "With Palm Sugar"
    WITHOUT_SUGAR = "Without Sugar"


class SpiceLevel(str, Enum):
    """Spice level"""
    LOW = "Low Spicy"
    MEDIUM = "Medium Spicy"
    EXTRA = "Extra Spicy"


class CustomizationKind(str, Enum):
    """Which customization a catalog category offers"""
    SUGAR = "sugar"
    SPICE = "spice"
    NONE = "none"


class SugarChoice(BaseModel):
    kind: Literal["sugar"] = "sugar"
    option: SugarOption

    @property
    def value(self) -> str:
        return self.option.value


class SpiceChoice(BaseModel):
    kind: Literal["spice"] = "spice"
    level: SpiceLevel

    @property
    def value(self) -> str:
        return self.level.value


Customization = Annotated[Union[SugarChoice, SpiceChoice], Field(discriminator="kind")]


class MenuItem(BaseModel):
    """Catalog entry; price is per kg"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: float
    category: str
    image: Optional[str] = None
    customization_kind: CustomizationKind = CustomizationKind.NONE


class MenuCategory(BaseModel):
    """Catalog category"""
    id: str
    name: str
    description: str
    customization_kind: CustomizationKind
    items: list[MenuItem] = []


# ============ Cart models ============

class CartItem(BaseModel):
    """Cart line item"""
    cart_item_id: str
    id: str
    name: str
    price: float
    category: str
    image: Optional[str] = None
    quantity: int = Field(ge=1)
    customization: Optional[Customization] = None

    @property
    def sugar_option(self) -> Optional[SugarOption]:
        if isinstance(self.customization, SugarChoice):
            return self.customization.option
        return None

    @property
    def spice_level(self) -> Optional[SpiceLevel]:
        if isinstance(self.customization, SpiceChoice):
            return self.customization.level
        return None


class Cart(BaseModel):
    """Cart snapshot"""
    session_id: str
    items: list[CartItem] = []
    total_price: float = 0.0
    total_items: int = 0


class PricingBreakdown(BaseModel):
    """Order summary pricing"""
    subtotal: float
    tax: float = 0.0
    delivery_charges: float = 0.0
    total: float


# ============ Checkout models ============

class CheckoutFormData(BaseModel):
    """Checkout form fields as entered"""
    full_name: str = ""
    email: str = ""
    phone_number: str = ""
    address: str = ""
    landmark: str = ""
    pincode: str = ""
    delivery_instructions: str = ""


class DeliveryAddress(BaseModel):
    """Delivery address record kept in local storage"""
    full_name: str
    email: str
    phone_number: str
    address: str
    landmark: str
    pincode: str
    delivery_instructions: str


CHECKOUT_FIELDS = tuple(DeliveryAddress.model_fields)


# ============ Order models ============

class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class OrderItem(BaseModel):
    """Order line, decoupled from the live catalog"""
    name: str
    price: float
    quantity: int


class Customer(BaseModel):
    name: str
    email: str
    phone: str
    address: str


class OrderData(BaseModel):
    """Order creation payload (backend uses camelCase)"""
    model_config = ConfigDict(populate_by_name=True)

    customer: Customer
    items: list[OrderItem]
    total_amount: float = Field(alias="totalAmount")
    payment_method: str = Field(default="ONLINE", alias="paymentMethod")


class Order(BaseModel):
    """Server-owned order, read-only projection"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    order_number: Union[str, int] = Field(alias="orderNumber")
    customer: Customer
    items: list[OrderItem]
    total_amount: float = Field(alias="totalAmount")
    payment_method: str = Field(alias="paymentMethod")
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING, alias="paymentStatus")
    status: OrderStatus = OrderStatus.PENDING
    created_at: str = Field(default="", alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


# ============ API request models ============

class AddToCartRequest(BaseModel):
    """Add-to-cart request"""
    session_id: str
    item_id: str
    quantity: int = Field(default=1, ge=1, le=10)
    sugar_option: Optional[SugarOption] = None
    spice_level: Optional[SpiceLevel] = None


class UpdateCartItemRequest(BaseModel):
    """Update cart line request"""
    quantity: int


class CheckoutRequest(BaseModel):
    """Checkout submission request"""
    session_id: str
    form: CheckoutFormData
    confirmed: bool = False


class LoginRequest(BaseModel):
    session_id: str
    phone_number: str


class LogoutRequest(BaseModel):
    session_id: str


class SendOtpRequest(BaseModel):
    session_id: str
    phone_number: str
    recaptcha_token: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    session_id: str
    code: str


class PaymentOptionsRequest(BaseModel):
    session_id: str
    form: Optional[CheckoutFormData] = None


class PaymentCompleteRequest(BaseModel):
    session_id: str
    razorpay_payment_id: Optional[str] = None
    dismissed: bool = False
