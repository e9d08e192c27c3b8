"""
totals.py — Order Total Calculator

Sums line items into the payable amount in whole Baht and builds the read-only
order summary shown beside the checkout form. Shipping is always free when it
applies; taxes, discounts and coupons are not modeled.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from pydantic import BaseModel

from .models import LineItem
from .shipping import requires_shipping as order_requires_shipping, unit_label

SHIPPING_FREE_LABEL = "ฟรี"
SHIPPING_NOT_APPLICABLE_LABEL = "-"


def to_baht(amount) -> int:
    """Rounds an amount to whole Baht, half-up."""
    return int(Decimal(str(amount)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def order_total(items: List[LineItem]) -> int:
    """Returns the sum of unitPrice × quantity over all items, in whole Baht."""
    return to_baht(sum(Decimal(str(item.unitPrice)) * item.quantity for item in items))


def shipping_line(requires_shipping: bool) -> str:
    """Label of the shipping row: free when a delivery is needed, a dash otherwise."""
    return SHIPPING_FREE_LABEL if requires_shipping else SHIPPING_NOT_APPLICABLE_LABEL


class SummaryLine(BaseModel):
    id: str
    title: str
    quantity: int
    unitLabel: str
    coverUrl: Optional[str] = None
    lineTotal: int


class OrderSummary(BaseModel):
    """
    Read-only summary of a checkout.

    Attributes:
        lines (List[SummaryLine]): One entry per line item.
        itemCount (int): Total number of units.
        subtotal (int): Sum of all line totals.
        shippingCost (int): Always 0.
        shippingLabel (str): "ฟรี" when shipping applies, "-" otherwise.
        total (int): Payable amount.
        requiresShipping (bool): Whether a shipping address must be collected.
    """
    lines: List[SummaryLine]
    itemCount: int
    subtotal: int
    shippingCost: int = 0
    shippingLabel: str
    total: int
    requiresShipping: bool


def summarize(items: List[LineItem]) -> OrderSummary:
    """Builds the order summary panel; shipping is always free."""
    needs_shipping = order_requires_shipping(items)
    total = order_total(items)
    lines = [
        SummaryLine(
            id=item.id,
            title=item.title,
            quantity=item.quantity,
            unitLabel=unit_label(item),
            coverUrl=item.coverUrl,
            lineTotal=to_baht(Decimal(str(item.unitPrice)) * item.quantity),
        )
        for item in items
    ]
    return OrderSummary(
        lines=lines,
        itemCount=sum(item.quantity for item in items),
        subtotal=total,
        shippingLabel=shipping_line(needs_shipping),
        total=total,
        requiresShipping=needs_shipping,
    )
