"""
catalog.py — Catalog Item Resolver

Turns either the user's cart or a single "buy now" deep link into the list of
line items a checkout works on. A direct purchase always wins over the cart;
the two sources are never merged.
"""

import logging
import math
from typing import Iterable, List, Optional, Tuple

from .errors import NoItemsToCheckout
from .models import CartEntry, CheckoutSource, DirectPurchase, LineItem, ProductKind

log = logging.getLogger(__name__)

DEFAULT_DIRECT_TITLE = "สินค้า"
DEFAULT_DIRECT_KIND = ProductKind.COURSE


def coerce_price(raw) -> float:
    """
    Parses a deep-link price leniently.

    Missing, malformed, negative or non-finite input becomes 0 instead of an
    error, so a broken link still opens checkout at a zero price.
    """
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return value


def _coerce_kind(raw: Optional[str]) -> Optional[ProductKind]:
    """
    Maps the deep-link type onto a ProductKind.

    A missing type defaults to COURSE. An unrecognised type yields None so the
    shipping classifier falls through to its keyword and physical rules.
    """
    if not raw or not raw.strip():
        return DEFAULT_DIRECT_KIND
    try:
        return ProductKind(raw.strip().upper())
    except ValueError:
        log.info(f"Unknown direct-purchase type {raw!r}, leaving it untyped.")
        return None


def item_from_direct(direct: DirectPurchase) -> LineItem:
    """Builds the single line item of a "buy now" link, quantity 1."""
    return LineItem(
        id=direct.id,
        title=direct.title or DEFAULT_DIRECT_TITLE,
        unitPrice=coerce_price(direct.price),
        quantity=1,
        coverUrl=direct.coverUrl or None,
        kind=_coerce_kind(direct.type),
    )


def item_from_cart(entry: CartEntry) -> LineItem:
    """Copies a cart entry, carrying the product record's digital flag over."""
    return LineItem(
        id=entry.id,
        title=entry.title,
        unitPrice=entry.price,
        quantity=entry.quantity,
        coverUrl=entry.coverUrl,
        kind=entry.type,
        isDigitalFlag=entry.isDigital,
    )


def resolve_line_items(
        cart_entries: Iterable[CartEntry],
        direct: Optional[DirectPurchase] = None,
) -> Tuple[List[LineItem], CheckoutSource]:
    """
    Resolves the line items of a checkout.

    Args:
        cart_entries (Iterable[CartEntry]): Current cart contents, possibly empty.
        direct (DirectPurchase | None): Deep-link parameters; counts only when it carries an id.

    Returns:
        tuple: (line items, CheckoutSource.DIRECT or CheckoutSource.CART)

    Raises:
        NoItemsToCheckout: If neither source yields a single item.
    """
    if direct is not None and direct.id:
        item = item_from_direct(direct)
        if item.unitPrice == 0:
            log.warning(f"[Direct: {direct.id}] Resolved to price 0 (raw price: {direct.price!r}).")
        return [item], CheckoutSource.DIRECT

    items = [item_from_cart(entry) for entry in cart_entries]
    if not items:
        raise NoItemsToCheckout()
    return items, CheckoutSource.CART
