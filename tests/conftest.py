import pytest

from checkout_service.config import CheckoutSettings
from checkout_service.models import CartEntry, LineItem, ProductKind, ProofFile

MiB = 1024 * 1024


def mk_item(
    title: str = "หนังสือกฎหมายอาญา",
    *,
    id: str = "p1",
    price: float = 100,
    quantity: int = 1,
    kind: ProductKind = None,
    digital: bool = None,
) -> LineItem:
    return LineItem(id=id, title=title, unitPrice=price, quantity=quantity, kind=kind, isDigitalFlag=digital)


def mk_entry(
    title: str = "หนังสือกฎหมายอาญา",
    *,
    id: str = "p1",
    price: float = 100,
    quantity: int = 1,
    type: ProductKind = ProductKind.BOOK,
    digital: bool = None,
) -> CartEntry:
    return CartEntry(id=id, title=title, price=price, quantity=quantity, type=type, isDigital=digital)


def mk_proof(size: int = 1024, filename: str = "slip.png") -> ProofFile:
    return ProofFile(filename=filename, size=size, contentType="image/png")


@pytest.fixture
def settings():
    return CheckoutSettings(
        order_api_url="http://orders.test",
        proof_max_bytes=5 * MiB,
        test_mode_enabled=False,
        placeholder_user_id="user-123",
        placeholder_slip_url="https://placehold.co/400x600/png?text=Slip",
        placeholder_test_slip_url="https://placehold.co/400x600/png?text=Test+Slip",
    )
