"""
cart.py — Cart repository

The checkout only needs to read the cart and clear it after a successful
cart-sourced order. The repository is injected into each checkout session so
tests can substitute a double that records `clear()` calls.
"""

import logging
import threading
from typing import Dict, List, Protocol

from .models import CartEntry

log = logging.getLogger(__name__)


class CartRepository(Protocol):
    def read(self) -> List[CartEntry]:
        ...

    def clear(self) -> None:
        ...


class InMemoryCart:
    """
    A single user's cart.

    Adding a product that is already present increases its quantity; setting
    a quantity of zero or less removes the entry. Every read and mutation holds
    the cart's lock, so concurrent requests for one user do not lose updates.
    """

    def __init__(self, entries: List[CartEntry] = None):
        self._entries: Dict[str, CartEntry] = {}
        self._lock = threading.Lock()
        for entry in entries or []:
            self._merge(entry)

    def read(self) -> List[CartEntry]:
        with self._lock:
            return [entry.model_copy() for entry in self._entries.values()]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def add_item(self, entry: CartEntry) -> CartEntry:
        with self._lock:
            return self._merge(entry).model_copy()

    def remove_item(self, product_id: str) -> None:
        with self._lock:
            self._entries.pop(product_id, None)

    def update_quantity(self, product_id: str, quantity: int) -> None:
        with self._lock:
            if quantity <= 0:
                self._entries.pop(product_id, None)
            elif product_id in self._entries:
                self._entries[product_id].quantity = quantity

    @property
    def total_items(self) -> int:
        with self._lock:
            return sum(entry.quantity for entry in self._entries.values())

    def _merge(self, entry: CartEntry) -> CartEntry:
        # caller holds the lock
        existing = self._entries.get(entry.id)
        if existing is not None:
            existing.quantity += entry.quantity
            return existing
        self._entries[entry.id] = entry.model_copy()
        return self._entries[entry.id]


class CartStore:
    """Holds one InMemoryCart per user id."""

    def __init__(self):
        self._carts: Dict[str, InMemoryCart] = {}
        self._lock = threading.Lock()

    def for_user(self, user_id: str) -> InMemoryCart:
        with self._lock:
            if user_id not in self._carts:
                log.info(f"[Cart: {user_id}] New cart created.")
                self._carts[user_id] = InMemoryCart()
            return self._carts[user_id]
