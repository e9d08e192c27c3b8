"""
models.py — Data Models for the Checkout Flow

This module defines the data structures used to resolve, validate and submit
an order. It uses Pydantic models to ensure type safety and automatic
validation of incoming and outgoing data.

Models:
    - CartEntry: An entry of the shopping cart as stored by the cart source.
    - DirectPurchase: The raw "buy now" deep-link parameters.
    - LineItem: A normalized purchasable unit of an order.
    - ShippingInfo: Recipient and address for physical deliveries.
    - ProofFile: An attached payment slip.
    - CreateOrderRequest: The payload sent to the order persistence API.
    - Order: A persisted order record returned by the order query API.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator


class ProductKind(str, Enum):
    BOOK = "BOOK"
    COURSE = "COURSE"
    EXAM = "EXAM"


class PaymentMethod(str, Enum):
    """
    Known payment method tags. The order payload carries a plain string so
    that new methods can be added without changing the persisted schema.
    """
    BANK_TRANSFER = "bank-transfer"
    TEST_MODE = "TEST_MODE"


class SubmissionState(str, Enum):
    EDITING = "EDITING"
    SUBMITTING = "SUBMITTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class OrderStatus(str, Enum):
    """Order progression, advanced only by the order-management backend."""
    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPING = "SHIPPING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class CheckoutSource(str, Enum):
    CART = "CART"
    DIRECT = "DIRECT"


class CartEntry(BaseModel):
    """
    Represents one entry of a user's shopping cart.

    Attributes:
        id (str): Product identifier (book, course or exam id).
        title (str): Display name of the product.
        price (float): Unit price in Baht.
        coverUrl (str): Cover image reference.
        quantity (int): Number of units. Must be greater than zero.
        type (ProductKind): Product type the item was added as.
        isDigital (bool | None): Digital flag of the source product record, if known.
    """
    id: str
    title: str
    price: float = Field(0, ge=0)
    coverUrl: Optional[str] = None
    quantity: int = Field(1, gt=0)
    type: ProductKind = ProductKind.BOOK
    isDigital: Optional[bool] = None


class DirectPurchase(BaseModel):
    """
    The parameters of a "buy now" link, kept as raw values.

    Only `id` is required for the link to count as a direct purchase; price
    parsing is left to the resolver.
    """
    id: Optional[str] = None
    title: Optional[str] = None
    price: Optional[Union[str, float]] = None
    coverUrl: Optional[str] = None
    type: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def keep_scalar_price(cls, value):
        # anything that is not a plain string or number is treated as missing
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return None
        return value


class LineItem(BaseModel):
    """
    A purchasable unit in an order.

    Attributes:
        id (str): Opaque product identifier.
        title (str): Display name, also used as a classification signal.
        unitPrice (float): Non-negative unit price in Baht.
        quantity (int): Positive number of units, 1 for direct purchases.
        coverUrl (str | None): Optional image reference.
        kind (ProductKind | None): Explicit product type when known.
        isDigitalFlag (bool | None): Explicit digital flag from the product record.
    """
    id: str
    title: str
    unitPrice: float = Field(0, ge=0)
    quantity: int = Field(1, gt=0)
    coverUrl: Optional[str] = None
    kind: Optional[ProductKind] = None
    isDigitalFlag: Optional[bool] = None

    @property
    def subtotal(self) -> float:
        return self.unitPrice * self.quantity


class ShippingInfo(BaseModel):
    name: str = ""
    phone: str = ""
    address: str = ""
    trackingNumber: Optional[str] = None
    carrier: Optional[str] = None

    def missing_fields(self) -> List[str]:
        """Returns the required fields that are empty or whitespace-only."""
        return [field for field in ("name", "phone", "address") if not getattr(self, field).strip()]


class ProofFile(BaseModel):
    """An attached payment slip (bank transfer evidence)."""
    filename: str
    size: int = Field(..., ge=0)
    contentType: Optional[str] = None
    content: bytes = b""


class CreateOrderRequest(BaseModel):
    """
    Payload sent to the order persistence API.

    Attributes:
        userId (str): Authenticated user id, or the demo placeholder.
        items (List[LineItem]): The full resolved line items.
        totalAmount (int): Payable total in whole Baht.
        shippingInfo (ShippingInfo | None): Address when shipping applies, else None.
        paymentMethod (str): Payment method tag.
        slipUrl (str): Reference to the uploaded payment proof.
        status (OrderStatus): Always PAID, payment is self-reported and reviewed later.
        isTestMode (bool | None): Set only for test-mode orders.
        idempotencyKey (str): Stable per checkout draft to protect against duplicates.
    """
    userId: str
    items: List[LineItem]
    totalAmount: int
    shippingInfo: Optional[ShippingInfo] = None
    paymentMethod: str
    slipUrl: str
    status: OrderStatus = OrderStatus.PAID
    isTestMode: Optional[bool] = None
    idempotencyKey: str


class Order(BaseModel):
    """A persisted order record as returned by the order query API."""
    id: str
    userId: str
    items: List[LineItem] = []
    totalAmount: float = 0
    shippingInfo: Optional[ShippingInfo] = None
    paymentMethod: Optional[str] = None
    slipUrl: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
